"""Shared numeric helpers: distances, sigmoid, losses, point parsing."""

from __future__ import annotations
from typing import Any, Iterable, List, Optional, Sequence
import math

import numpy as np

from .entities import Domain, Point
from .errors import InvalidParameterError

PROBABILITY_FLOOR = 0.001
PROBABILITY_CEIL = 0.999

# ------------ Geometry ------------

def euclidean_distance(p1, p2) -> float:
    return math.hypot(p1.x - p2.x, p1.y - p2.y)


def validate_domain(domain) -> Domain:
    try:
        lo, hi = (float(v) for v in domain)
    except (TypeError, ValueError):
        raise InvalidParameterError(f"domain must be a [min, max] pair, got {domain!r}") from None
    if not (math.isfinite(lo) and math.isfinite(hi)) or lo >= hi:
        raise InvalidParameterError(f"domain must satisfy min < max, got {domain!r}")
    return lo, hi


def clamp_to_domain(point: Point, domain) -> Point:
    lo, hi = validate_domain(domain)
    x = min(max(point.x, lo), hi)
    y = min(max(point.y, lo), hi)
    if x == point.x and y == point.y:
        return point
    return Point(x=x, y=y, id=point.id, label=point.label, cluster=point.cluster)


# ------------ Conversions ------------

def to_points(raw: Iterable[Any], require_label: bool = False,
              domain: Optional[Domain] = None) -> List[Point]:
    """Parse plain dicts (or Points) into Points, optionally clamping them."""
    if raw is None:
        return []
    points = []
    for item in raw:
        point = item if isinstance(item, Point) else Point.from_state(item)
        if require_label and point.label is None:
            raise InvalidParameterError(f"point {point.id!r} has no class label")
        if domain is not None:
            point = clamp_to_domain(point, domain)
        points.append(point)
    return points


def points_to_array(points: Sequence[Point]) -> np.ndarray:
    if not points:
        return np.zeros((0, 2), dtype=float)
    return np.array([[p.x, p.y] for p in points], dtype=float)


def labels_to_array(points: Sequence[Point]) -> np.ndarray:
    return np.array([p.label for p in points], dtype=float)


# ------------ Activations & metrics ------------

def sigmoid(z):
    # exp overflows past ~709; the probability is already 0 or 1 there
    return 1.0 / (1.0 + np.exp(-np.clip(z, -500.0, 500.0)))


def clamp_probability(p, low: float = PROBABILITY_FLOOR, high: float = PROBABILITY_CEIL):
    return np.clip(p, low, high)


def log_loss(y_true, p) -> float:
    y_true = np.asarray(y_true, dtype=float)
    if len(y_true) == 0:
        return 0.0
    p = clamp_probability(np.asarray(p, dtype=float))
    return float(-np.mean(y_true * np.log(p) + (1.0 - y_true) * np.log(1.0 - p)))


def accuracy(y_true, y_pred) -> float:
    y_true = np.asarray(y_true).ravel().astype(int)
    y_pred = np.asarray(y_pred).ravel().astype(int)
    return float(np.mean(y_true == y_pred)) if len(y_true) else 0.0
