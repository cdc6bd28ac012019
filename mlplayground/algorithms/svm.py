"""
Linear SVM approximation from class centroids.

This is not a margin-maximizing solver. The separating line is the
perpendicular bisector of the two class centroids, slid toward the negative
centroid as C drops below 1, and the support vectors are simply the points
nearest to that line.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Sequence, Tuple
import math

import numpy as np

from .entities import Hyperplane, Point
from .errors import DegenerateInputError, InvalidParameterError
from .utils import points_to_array

MIN_POINTS = 4
MAX_SUPPORT_VECTORS = 4


@dataclass(frozen=True)
class SVMResult:
    hyperplane: Optional[Hyperplane] = None
    margin: Optional[float] = None
    support_vectors: Tuple[Point, ...] = field(default_factory=tuple)
    accuracy: float = 0.0

    def get_state(self) -> Dict[str, Any]:
        return {"hyperplane": self.hyperplane.get_state() if self.hyperplane else None,
                "margin": self.margin,
                "supportVectors": [p.get_state() for p in self.support_vectors],
                "accuracy": self.accuracy}

    @classmethod
    def from_state(cls, state: Dict[str, Any]) -> "SVMResult":
        hp = state.get("hyperplane")
        return cls(hyperplane=Hyperplane.from_state(hp) if hp else None,
                   margin=state.get("margin"),
                   support_vectors=tuple(Point.from_state(p) for p in state.get("supportVectors", [])),
                   accuracy=float(state.get("accuracy", 0.0)))


def support_vector_count(n: int) -> int:
    return min(MAX_SUPPORT_VECTORS, n // 4)


def regularization_shift(C: float) -> float:
    return (1 - C) * 10 * 0.1


def predict(hyperplane: Hyperplane, points: Sequence[Point]) -> np.ndarray:
    XY = points_to_array(points)
    return (hyperplane.a * XY[:, 0] + hyperplane.b * XY[:, 1] + hyperplane.c > 0).astype(int)


def fit_linear_svm(points: Sequence[Point], C: float = 1.0) -> SVMResult:
    if isinstance(C, bool) or not isinstance(C, (int, float)) or not C > 0:
        raise InvalidParameterError(f"C must be > 0, got {C!r}")
    for p in points:
        if p.label is None:
            raise InvalidParameterError(f"point {p.id!r} has no class label")
    if len(points) < MIN_POINTS:
        return SVMResult()

    positive = [p for p in points if p.label == 1]
    negative = [p for p in points if p.label == 0]
    if not positive or not negative:
        return SVMResult()

    pos_x, pos_y = points_to_array(positive).mean(axis=0)
    neg_x, neg_y = points_to_array(negative).mean(axis=0)
    a, b = float(pos_x - neg_x), float(pos_y - neg_y)
    if a == 0 and b == 0:
        raise DegenerateInputError("class centroids coincide, the separating line is undefined")

    shift = regularization_shift(C)
    mid_x = (pos_x + neg_x) / 2 + shift * (neg_x - pos_x)
    mid_y = (pos_y + neg_y) / 2 + shift * (neg_y - pos_y)
    c = float(-(a * mid_x + b * mid_y))
    hyperplane = Hyperplane(a=a, b=b, c=c)

    # sorted() is stable: equal distances keep input order
    ranked = sorted(points, key=lambda p: hyperplane.distance(p.x, p.y))
    support_vectors = tuple(ranked[:support_vector_count(len(points))])
    margin = 2 * hyperplane.distance(support_vectors[0].x, support_vectors[0].y) if support_vectors else 0.0

    labels = np.array([p.label for p in points])
    acc = float(np.mean(predict(hyperplane, points) == labels))

    return SVMResult(hyperplane=hyperplane, margin=float(margin),
                     support_vectors=support_vectors, accuracy=acc)


def margin_lines(hyperplane: Hyperplane, margin: float) -> Tuple[Hyperplane, Hyperplane]:
    """Lines parallel to the boundary at half the margin on either side."""
    offset = margin / 2 * math.hypot(hyperplane.a, hyperplane.b)
    return (Hyperplane(hyperplane.a, hyperplane.b, hyperplane.c - offset),
            Hyperplane(hyperplane.a, hyperplane.b, hyperplane.c + offset))
