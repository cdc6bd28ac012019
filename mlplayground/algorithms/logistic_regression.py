"""Binary logistic regression on (x, y) trained with full-batch gradient descent."""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

import numpy as np

from .entities import Domain, LogisticModel, Point
from .errors import InvalidParameterError
from .utils import accuracy, labels_to_array, log_loss, points_to_array, sigmoid, validate_domain

# Non-zero feature weights: with all-zero weights the first gradient for w2
# can vanish on symmetric data and the boundary never tilts.
INITIAL_WEIGHTS = (0.0, 0.01, 0.01)
BOUNDARY_EPS = 0.001


@dataclass(frozen=True)
class DecisionBoundary:
    """y = slope * x + intercept, the p = 0.5 line."""
    slope: float
    intercept: float
    points: Tuple[Tuple[float, float], ...]

    def get_state(self) -> Dict[str, Any]:
        return {"slope": self.slope, "intercept": self.intercept,
                "points": [{"x": x, "y": y} for x, y in self.points]}


@dataclass(frozen=True)
class LogisticResult:
    model: LogisticModel
    accuracy: float
    log_loss: float
    sigmoid_curve: Tuple[Tuple[float, float], ...]
    decision_boundary: Optional[DecisionBoundary]

    def get_state(self) -> Dict[str, Any]:
        return {"model": self.model.get_state(),
                "accuracy": self.accuracy,
                "logLoss": self.log_loss,
                "sigmoidCurve": [{"x": x, "probability": p} for x, p in self.sigmoid_curve],
                "decisionBoundary": self.decision_boundary.get_state() if self.decision_boundary else None}


def _design_matrix(points: Sequence[Point]) -> np.ndarray:
    XY = points_to_array(points)
    return np.hstack([np.ones((len(XY), 1)), XY])


def predict_proba(model: LogisticModel, points: Sequence[Point]) -> np.ndarray:
    return sigmoid(_design_matrix(points) @ np.asarray(model.weights, dtype=float))


def predict(model: LogisticModel, points: Sequence[Point]) -> np.ndarray:
    return (predict_proba(model, points) >= 0.5).astype(int)


def fit_weights(points: Sequence[Point], learning_rate: float = 0.1, iterations: int = 1000,
                initial_weights: Sequence[float] = INITIAL_WEIGHTS) -> np.ndarray:
    X = _design_matrix(points)
    y = labels_to_array(points)
    n = len(y)
    w = np.array(initial_weights, dtype=float)
    for _ in range(iterations):
        p = sigmoid(X @ w)
        grad = X.T @ (p - y) / n
        w = w - learning_rate * grad
    return w


def sigmoid_curve(model: LogisticModel, domain: Domain, step: float = 2.0) -> List[Tuple[float, float]]:
    """P(class 1) along x with y held at the middle of the domain."""
    lo, hi = domain
    w0, w1, w2 = model.weights
    xs = np.arange(lo, hi + step / 2, step)
    probs = sigmoid(w0 + w1 * xs + w2 * (lo + hi) / 2)
    return [(float(x), float(p)) for x, p in zip(xs, probs)]


def decision_boundary(model: LogisticModel, domain: Domain, step: float = 5.0) -> Optional[DecisionBoundary]:
    w0, w1, w2 = model.weights
    if abs(w2) <= BOUNDARY_EPS:
        return None
    lo, hi = domain
    slope, intercept = -w1 / w2, -w0 / w2
    xs = np.arange(lo, hi + step / 2, step)
    ys = slope * xs + intercept
    keep = (ys >= lo) & (ys <= hi)
    return DecisionBoundary(slope=float(slope), intercept=float(intercept),
                            points=tuple((float(x), float(y)) for x, y in zip(xs[keep], ys[keep])))


def train_logistic_regression(points: Sequence[Point], learning_rate: float = 0.1, iterations: int = 1000,
                              domain: Domain = (0.0, 100.0),
                              initial_weights: Sequence[float] = INITIAL_WEIGHTS,
                              curve_step: float = 2.0, boundary_step: float = 5.0) -> Optional[LogisticResult]:
    """
    Train on labeled points and derive the curves the chart needs.

    Returns None for fewer than two points. A single class is accepted and
    simply drifts toward a constant probability.
    """
    if isinstance(learning_rate, bool) or not learning_rate > 0:
        raise InvalidParameterError(f"learning_rate must be > 0, got {learning_rate!r}")
    if isinstance(iterations, bool) or not isinstance(iterations, int) or iterations < 1:
        raise InvalidParameterError(f"iterations must be an integer > 0, got {iterations!r}")
    if len(initial_weights) != 3:
        raise InvalidParameterError("initial_weights needs exactly 3 values")
    domain = validate_domain(domain)
    for p in points:
        if p.label is None:
            raise InvalidParameterError(f"point {p.id!r} has no class label")
    if len(points) < 2:
        return None

    w = fit_weights(points, learning_rate, iterations, initial_weights)
    model = LogisticModel(weights=tuple(float(v) for v in w))
    probs = predict_proba(model, points)
    y = labels_to_array(points)

    return LogisticResult(model=model,
                          accuracy=accuracy(y, (probs >= 0.5).astype(int)),
                          log_loss=log_loss(y, probs),
                          sigmoid_curve=tuple(sigmoid_curve(model, domain, curve_step)),
                          decision_boundary=decision_boundary(model, domain, boundary_step))
