"""Spam/ham naive Bayes scoring against a fixed word-likelihood table."""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional
import math
import re

from .entities import ClassificationResult, NaiveBayesStep
from .errors import DegenerateInputError, InvalidParameterError

UNKNOWN_WORD_PROBABILITY = 0.01

DEFAULT_LIKELIHOODS = {
    # spam-leaning
    "free": {"spam": 0.8, "ham": 0.1},
    "money": {"spam": 0.7, "ham": 0.05},
    "win": {"spam": 0.6, "ham": 0.02},
    "click": {"spam": 0.5, "ham": 0.1},
    "now": {"spam": 0.4, "ham": 0.3},
    "offer": {"spam": 0.7, "ham": 0.05},
    "urgent": {"spam": 0.8, "ham": 0.02},
    "limited": {"spam": 0.6, "ham": 0.1},
    "guarantee": {"spam": 0.7, "ham": 0.05},
    "prize": {"spam": 0.8, "ham": 0.01},
    # ham-leaning
    "meeting": {"spam": 0.01, "ham": 0.4},
    "project": {"spam": 0.02, "ham": 0.5},
    "work": {"spam": 0.05, "ham": 0.6},
    "team": {"spam": 0.02, "ham": 0.4},
    "please": {"spam": 0.1, "ham": 0.3},
    "thank": {"spam": 0.05, "ham": 0.4},
    "schedule": {"spam": 0.01, "ham": 0.3},
    "report": {"spam": 0.02, "ham": 0.35},
    "update": {"spam": 0.03, "ham": 0.4},
    "regards": {"spam": 0.01, "ham": 0.5},
}

DEFAULT_PRIORS = {"spam": 0.4, "ham": 0.6}

PRESET_MESSAGES = {
    "spam1": "FREE MONEY! Win $1000 now! Click here immediately! Limited time offer!",
    "spam2": "URGENT! You've won a prize! Claim your free gift now! Don't wait!",
    "spam3": "Make money fast! Guaranteed returns! Free trial! Act now!",
    "ham1": "Hi team, please review the project report and send your feedback by Friday.",
    "ham2": "Thank you for the meeting today. I'll update the schedule accordingly.",
    "ham3": "Could you please share the latest work progress? Best regards.",
    "mixed": "Free project update: please review our work and schedule a meeting.",
}

_STRIP = re.compile(r"[^\w\s]")


@dataclass(frozen=True)
class WordProbabilityTable:
    """Token -> {"spam": P(token|spam), "ham": P(token|ham)} plus class priors."""
    likelihoods: Mapping[str, Mapping[str, float]] = field(default_factory=lambda: DEFAULT_LIKELIHOODS)
    priors: Mapping[str, float] = field(default_factory=lambda: DEFAULT_PRIORS)

    def __post_init__(self):
        if not isinstance(self.priors, Mapping) or not isinstance(self.likelihoods, Mapping):
            raise InvalidParameterError("word table needs 'likelihoods' and 'priors' objects")
        for name in ("spam", "ham"):
            if not _is_probability(self.priors.get(name)) or self.priors[name] == 0:
                raise InvalidParameterError(f"prior for '{name}' must be in (0, 1]")
        for token, probs in self.likelihoods.items():
            if not isinstance(token, str) or token != token.lower():
                raise InvalidParameterError(f"table tokens must be lowercase strings, got {token!r}")
            if not isinstance(probs, Mapping) or not all(_is_probability(probs.get(name))
                                                         for name in ("spam", "ham")):
                raise InvalidParameterError(f"likelihoods for '{token}' must be in [0, 1]")

    @property
    def vocabulary_size(self) -> int:
        return len(self.likelihoods)

    def get_state(self) -> Dict[str, Any]:
        return {"likelihoods": {t: dict(p) for t, p in self.likelihoods.items()},
                "priors": dict(self.priors)}

    @classmethod
    def from_state(cls, state: Dict[str, Any]) -> "WordProbabilityTable":
        if not isinstance(state, Mapping):
            raise InvalidParameterError(f"word table must be an object, got {state!r}")
        return cls(likelihoods=state.get("likelihoods", DEFAULT_LIKELIHOODS),
                   priors=state.get("priors", DEFAULT_PRIORS))


def _is_probability(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and 0 <= value <= 1


def tokenize(text: str) -> List[str]:
    return [w for w in _STRIP.sub("", text.lower()).split() if w]


def _log(p: float) -> float:
    return math.log(p) if p > 0 else -math.inf


def token_likelihood(token: str, table: WordProbabilityTable, smoothing: bool = True,
                     alpha: float = 1.0):
    """(P(token|spam), P(token|ham), known)"""
    probs = table.likelihoods.get(token)
    if probs is not None:
        return probs["spam"], probs["ham"], True
    if smoothing:
        p = alpha / (table.vocabulary_size + alpha) if alpha > 0 else 0.0
        return p, p, False
    return UNKNOWN_WORD_PROBABILITY, UNKNOWN_WORD_PROBABILITY, False


def classify_text(text: str, table: Optional[WordProbabilityTable] = None, smoothing: bool = True,
                  alpha: float = 1.0) -> ClassificationResult:
    """
    Posterior P(spam|text) and P(ham|text) with a step-by-step trace.

    Blank text gives the neutral 0.5/0.5 result with prediction "unknown".
    Unknown tokens get the same likelihood in both classes, so they never
    move the posterior away from what the known tokens and priors say.
    """
    if isinstance(alpha, bool) or not isinstance(alpha, (int, float)) or alpha < 0:
        raise InvalidParameterError(f"smoothing alpha must be >= 0, got {alpha!r}")
    if text is None or not str(text).strip():
        return ClassificationResult(spam=0.5, ham=0.5, predicted="unknown")
    table = table or WordProbabilityTable()

    prior_spam, prior_ham = table.priors["spam"], table.priors["ham"]
    log_spam, log_ham = _log(prior_spam), _log(prior_ham)
    steps = [NaiveBayesStep(kind="prior", spam=prior_spam, ham=prior_ham,
                            spam_log=log_spam, ham_log=log_ham)]

    for token in tokenize(str(text)):
        p_spam, p_ham, known = token_likelihood(token, table, smoothing, alpha)
        spam_contrib, ham_contrib = _log(p_spam), _log(p_ham)
        log_spam += spam_contrib
        log_ham += ham_contrib
        steps.append(NaiveBayesStep(kind="token", token=token, known=known, spam=p_spam, ham=p_ham,
                                    spam_log=spam_contrib, ham_log=ham_contrib))

    max_log = max(log_spam, log_ham)
    if max_log == -math.inf:
        raise DegenerateInputError("every class has zero likelihood for this text")
    spam_weight = math.exp(log_spam - max_log)
    ham_weight = math.exp(log_ham - max_log)
    total = spam_weight + ham_weight
    spam, ham = spam_weight / total, ham_weight / total

    steps.append(NaiveBayesStep(kind="posterior", spam=spam, ham=ham, spam_log=log_spam, ham_log=log_ham))
    return ClassificationResult(spam=spam, ham=ham, predicted="spam" if spam > ham else "ham",
                                step_by_step=tuple(steps))
