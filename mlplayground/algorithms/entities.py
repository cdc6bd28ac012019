"""
Plain data structures shared by the algorithms.

Every structure converts to and from a JSON-friendly dict with
get_state() / from_state(), mirroring the keys the browser shell uses
(``class`` for labels, ``rSquared`` for the coefficient of determination).
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
import math

import numpy as np

from .errors import InvalidParameterError

Domain = Tuple[float, float]
VALID_LABELS = (0, 1)


def _as_float(value: Any, name: str) -> float:
    if isinstance(value, bool):
        raise InvalidParameterError(f"{name} must be a number, got {value!r}")
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise InvalidParameterError(f"{name} must be a number, got {value!r}") from None
    if not math.isfinite(number):
        raise InvalidParameterError(f"{name} must be finite, got {value!r}")
    return number


def as_int(value: Any, name: str) -> int:
    number = _as_float(value, name)
    if not number.is_integer():
        raise InvalidParameterError(f"{name} must be an integer, got {value!r}")
    return int(number)


def check_label(label: Any) -> int:
    if isinstance(label, bool) or label not in VALID_LABELS:
        raise InvalidParameterError(f"class must be 0 or 1, got {label!r}")
    return int(label)


# ------------ Points ------------

@dataclass(frozen=True)
class Point:
    x: float
    y: float
    id: Any = None
    label: Optional[int] = None
    cluster: int = -1

    def get_state(self) -> Dict[str, Any]:
        state = {"x": self.x, "y": self.y, "id": self.id, "cluster": self.cluster}
        if self.label is not None:
            state["class"] = self.label
        return state

    @classmethod
    def from_state(cls, state: Dict[str, Any]) -> "Point":
        if not isinstance(state, dict):
            raise InvalidParameterError(f"point must be an object, got {state!r}")
        if "x" not in state or "y" not in state:
            raise InvalidParameterError(f"point is missing a coordinate: {state!r}")
        label = state.get("class")
        cluster = state.get("cluster")
        return cls(x=_as_float(state["x"], "x"),
                   y=_as_float(state["y"], "y"),
                   id=state.get("id"),
                   label=check_label(label) if label is not None else None,
                   cluster=as_int(cluster, "cluster") if cluster is not None else -1)


@dataclass(frozen=True)
class Centroid:
    x: float
    y: float
    id: int

    def get_state(self) -> Dict[str, Any]:
        return {"x": self.x, "y": self.y, "id": self.id}

    @classmethod
    def from_state(cls, state: Dict[str, Any]) -> "Centroid":
        if not isinstance(state, dict) or "x" not in state or "y" not in state:
            raise InvalidParameterError(f"malformed centroid: {state!r}")
        return cls(x=_as_float(state["x"], "x"), y=_as_float(state["y"], "y"),
                   id=as_int(state.get("id", 0), "centroid id"))


# ------------ Models ------------

@dataclass(frozen=True)
class RegressionModel:
    slope: float = 0.0
    intercept: float = 0.0
    r_squared: float = 0.0

    def get_state(self) -> Dict[str, Any]:
        return {"slope": self.slope, "intercept": self.intercept, "rSquared": self.r_squared}

    @classmethod
    def from_state(cls, state: Dict[str, Any]) -> "RegressionModel":
        return cls(slope=float(state.get("slope", 0.0)),
                   intercept=float(state.get("intercept", 0.0)),
                   r_squared=float(state.get("rSquared", 0.0)))


@dataclass(frozen=True)
class LogisticModel:
    """z = w0 + w1*x + w2*y"""
    weights: Tuple[float, float, float]

    def get_state(self) -> Dict[str, Any]:
        return {"weights": list(self.weights)}

    @classmethod
    def from_state(cls, state: Dict[str, Any]) -> "LogisticModel":
        weights = state.get("weights")
        if weights is None or len(weights) != 3:
            raise InvalidParameterError(f"logistic model needs exactly 3 weights, got {weights!r}")
        return cls(weights=tuple(float(w) for w in weights))


@dataclass(frozen=True)
class Hyperplane:
    """Line a*x + b*y + c = 0."""
    a: float
    b: float
    c: float

    def decision_value(self, x: float, y: float) -> float:
        return self.a * x + self.b * y + self.c

    def distance(self, x: float, y: float) -> float:
        return abs(self.decision_value(x, y)) / math.hypot(self.a, self.b)

    def line_points(self, domain: Domain, step: float = 1.0) -> List[Tuple[float, float]]:
        """Sample the line inside a square domain for drawing."""
        lo, hi = domain
        if abs(self.b) > 1e-12:
            xs = np.arange(lo, hi + step / 2, step)
            ys = -(self.a * xs + self.c) / self.b
            keep = (ys >= lo) & (ys <= hi)
            return [(float(x), float(y)) for x, y in zip(xs[keep], ys[keep])]
        if abs(self.a) <= 1e-12:
            return []
        x = -self.c / self.a
        if lo <= x <= hi:
            return [(float(x), float(lo)), (float(x), float(hi))]
        return []

    def get_state(self) -> Dict[str, Any]:
        return {"a": self.a, "b": self.b, "c": self.c}

    @classmethod
    def from_state(cls, state: Dict[str, Any]) -> "Hyperplane":
        return cls(a=float(state["a"]), b=float(state["b"]), c=float(state["c"]))


# ------------ Naive Bayes ------------

@dataclass(frozen=True)
class NaiveBayesStep:
    """One row of the classification trace."""
    kind: str  # "prior", "token" or "posterior"
    spam: float
    ham: float
    token: Optional[str] = None
    known: Optional[bool] = None
    spam_log: Optional[float] = None
    ham_log: Optional[float] = None

    def get_state(self) -> Dict[str, Any]:
        return {"kind": self.kind, "token": self.token, "known": self.known,
                "spam": self.spam, "ham": self.ham,
                "spamLog": self.spam_log, "hamLog": self.ham_log}

    @classmethod
    def from_state(cls, state: Dict[str, Any]) -> "NaiveBayesStep":
        return cls(kind=state["kind"], spam=float(state["spam"]), ham=float(state["ham"]),
                   token=state.get("token"), known=state.get("known"),
                   spam_log=state.get("spamLog"), ham_log=state.get("hamLog"))


@dataclass(frozen=True)
class ClassificationResult:
    spam: float
    ham: float
    predicted: str
    step_by_step: Tuple[NaiveBayesStep, ...] = field(default_factory=tuple)

    def get_state(self) -> Dict[str, Any]:
        return {"spam": self.spam, "ham": self.ham, "predicted": self.predicted,
                "stepByStep": [s.get_state() for s in self.step_by_step]}

    @classmethod
    def from_state(cls, state: Dict[str, Any]) -> "ClassificationResult":
        return cls(spam=float(state["spam"]), ham=float(state["ham"]),
                   predicted=state["predicted"],
                   step_by_step=tuple(NaiveBayesStep.from_state(s)
                                      for s in state.get("stepByStep", [])))
