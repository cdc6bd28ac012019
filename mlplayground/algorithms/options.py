"""Recognized configuration options for the algorithms."""

from __future__ import annotations
from dataclasses import dataclass, fields
from typing import Any, Dict, Optional

from .entities import Domain
from .errors import InvalidParameterError
from .utils import validate_domain

# camelCase names the browser shell sends
_ALIASES = {
    "learningRate": "learning_rate",
    "convergenceThreshold": "convergence_threshold",
    "maxIterations": "max_iterations",
    "smoothingAlpha": "smoothing_alpha",
    "smoothingEnabled": "smoothing_enabled",
    "smoothing": "smoothing_enabled",
    "alpha": "smoothing_alpha",
}


@dataclass(frozen=True)
class AlgorithmOptions:
    k: int = 3
    domain: Domain = (0.0, 100.0)
    learning_rate: float = 0.1
    iterations: int = 1000
    convergence_threshold: float = 0.01
    max_iterations: int = 100
    C: float = 1.0
    smoothing_alpha: float = 1.0
    smoothing_enabled: bool = True

    def __post_init__(self):
        self.validate()

    def validate(self) -> "AlgorithmOptions":
        if isinstance(self.k, bool) or not isinstance(self.k, int) or self.k < 1:
            raise InvalidParameterError(f"k must be an integer >= 1, got {self.k!r}")
        validate_domain(self.domain)
        _positive("learning_rate", self.learning_rate)
        _positive_int("iterations", self.iterations)
        _positive("convergence_threshold", self.convergence_threshold)
        _positive_int("max_iterations", self.max_iterations)
        _positive("C", self.C)
        if not isinstance(self.smoothing_alpha, (int, float)) or self.smoothing_alpha < 0:
            raise InvalidParameterError(f"smoothing_alpha must be >= 0, got {self.smoothing_alpha!r}")
        if not isinstance(self.smoothing_enabled, bool):
            raise InvalidParameterError(f"smoothing_enabled must be true or false, got {self.smoothing_enabled!r}")
        return self

    @classmethod
    def from_params(cls, params: Optional[Dict[str, Any]] = None,
                    defaults: Optional[Dict[str, Any]] = None) -> "AlgorithmOptions":
        known = {f.name for f in fields(cls)}
        values: Dict[str, Any] = dict(defaults or {})
        for key, value in (params or {}).items():
            name = _ALIASES.get(key, key)
            if name not in known:
                raise InvalidParameterError(f"unknown option '{key}'. Valid: {sorted(known)}")
            values[name] = value
        if "domain" in values:
            values["domain"] = validate_domain(values["domain"])
        return cls(**values)

    def get_state(self) -> Dict[str, Any]:
        return {"k": self.k, "domain": list(self.domain), "learningRate": self.learning_rate,
                "iterations": self.iterations, "convergenceThreshold": self.convergence_threshold,
                "maxIterations": self.max_iterations, "C": self.C,
                "smoothingAlpha": self.smoothing_alpha, "smoothingEnabled": self.smoothing_enabled}


def _positive(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)) or not value > 0:
        raise InvalidParameterError(f"{name} must be > 0, got {value!r}")


def _positive_int(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise InvalidParameterError(f"{name} must be an integer > 0, got {value!r}")
