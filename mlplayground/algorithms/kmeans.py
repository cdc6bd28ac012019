"""
Lloyd's k-means over caller-owned state.

Nothing is kept between calls: points, centroids, iteration count and
convergence flag travel in a KMeansState (or are passed explicitly to step),
so the shell can replay, step back, or drive the loop from any timer.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Iterator, List, Sequence, Tuple
import logging

import numpy as np

from .entities import Centroid, Domain, Point, as_int
from .errors import InvalidParameterError
from .utils import points_to_array, validate_domain

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLD = 0.01


class KMeansStatus(str, Enum):
    UNINITIALIZED = "uninitialized"
    READY = "ready"
    CONVERGED = "converged"


@dataclass(frozen=True)
class StepResult:
    points: Tuple[Point, ...]
    centroids: Tuple[Centroid, ...]
    converged: bool


@dataclass(frozen=True)
class KMeansState:
    points: Tuple[Point, ...] = ()
    centroids: Tuple[Centroid, ...] = ()
    iteration: int = 0
    converged: bool = False

    @property
    def status(self) -> KMeansStatus:
        if not self.centroids:
            return KMeansStatus.UNINITIALIZED
        return KMeansStatus.CONVERGED if self.converged else KMeansStatus.READY

    @property
    def k(self) -> int:
        return len(self.centroids)

    def get_state(self) -> Dict[str, Any]:
        return {"points": [p.get_state() for p in self.points],
                "centroids": [c.get_state() for c in self.centroids],
                "iteration": self.iteration,
                "converged": self.converged,
                "status": self.status.value}

    @classmethod
    def from_state(cls, state: Dict[str, Any]) -> "KMeansState":
        return cls(points=tuple(Point.from_state(p) for p in state.get("points", [])),
                   centroids=tuple(Centroid.from_state(c) for c in state.get("centroids", [])),
                   iteration=as_int(state.get("iteration", 0), "iteration"),
                   converged=bool(state.get("converged", False)))


@dataclass(frozen=True)
class KMeansRun:
    points: Tuple[Point, ...]
    centroids: Tuple[Centroid, ...]
    iterations: int
    converged: bool
    history: Tuple[StepResult, ...] = field(default_factory=tuple)


def _check_threshold(threshold: float) -> None:
    if not threshold > 0:
        raise InvalidParameterError(f"convergence threshold must be > 0, got {threshold!r}")


def make_rng(rng=None) -> np.random.Generator:
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


# ------------ Initialization ------------

def initialize_centroids(k: int, domain: Domain = (0.0, 15.0), rng=None) -> List[Centroid]:
    """Place k centroids uniformly at random inside the square domain."""
    if isinstance(k, bool) or not isinstance(k, (int, np.integer)) or k < 1:
        raise InvalidParameterError(f"k must be an integer >= 1, got {k!r}")
    lo, hi = validate_domain(domain)
    xy = make_rng(rng).uniform(lo, hi, size=(int(k), 2))
    return [Centroid(x=float(x), y=float(y), id=i) for i, (x, y) in enumerate(xy)]


def init_state(points: Sequence[Point], k: int, domain: Domain = (0.0, 15.0), rng=None) -> KMeansState:
    """Fresh run: new centroids, unassigned points, iteration 0."""
    centroids = initialize_centroids(k, domain, rng)
    return KMeansState(points=tuple(replace(p, cluster=-1) for p in points),
                       centroids=tuple(centroids), iteration=0, converged=False)


# ------------ Lloyd iteration ------------

def assign(points: Sequence[Point], centroids: Sequence[Centroid]) -> List[Point]:
    if not points:
        return []
    XY = points_to_array(points)
    C = np.array([[c.x, c.y] for c in centroids], dtype=float)
    dists = np.linalg.norm(XY[:, None, :] - C[None, :, :], axis=2)
    # argmin keeps the first minimum, so ties go to the lowest centroid index
    labels = np.argmin(dists, axis=1)
    return [replace(p, cluster=int(label)) for p, label in zip(points, labels)]


def update(points: Sequence[Point], centroids: Sequence[Centroid]) -> List[Centroid]:
    new_centroids = []
    for i, centroid in enumerate(centroids):
        members = [p for p in points if p.cluster == i]
        if not members:
            new_centroids.append(centroid)
            continue
        mean = points_to_array(members).mean(axis=0)
        new_centroids.append(replace(centroid, x=float(mean[0]), y=float(mean[1])))
    return new_centroids


def has_converged(old: Sequence[Centroid], new: Sequence[Centroid],
                  threshold: float = DEFAULT_THRESHOLD) -> bool:
    return all(np.hypot(a.x - b.x, a.y - b.y) < threshold for a, b in zip(old, new))


def step(points: Sequence[Point], centroids: Sequence[Centroid],
         threshold: float = DEFAULT_THRESHOLD) -> StepResult:
    """One assignment + update pass."""
    _check_threshold(threshold)
    if not centroids:
        raise InvalidParameterError("centroids must be initialized before stepping")
    assigned = assign(points, centroids)
    new_centroids = update(assigned, centroids)
    return StepResult(points=tuple(assigned), centroids=tuple(new_centroids),
                      converged=has_converged(centroids, new_centroids, threshold))


def advance(state: KMeansState, threshold: float = DEFAULT_THRESHOLD) -> KMeansState:
    """Next state of a run. A converged state is returned as is."""
    if state.status is KMeansStatus.UNINITIALIZED:
        raise InvalidParameterError("centroids must be initialized before stepping")
    if state.converged:
        return state
    result = step(state.points, state.centroids, threshold)
    return KMeansState(points=result.points, centroids=result.centroids,
                       iteration=state.iteration + 1, converged=result.converged)


def add_point(state: KMeansState, point: Point) -> KMeansState:
    """Append an unassigned point; the run is no longer converged."""
    return replace(state, points=state.points + (replace(point, cluster=-1),), converged=False)


def iterate(points: Sequence[Point], centroids: Sequence[Centroid], max_iterations: int = 100,
            threshold: float = DEFAULT_THRESHOLD) -> Iterator[StepResult]:
    """Yield every step until convergence or max_iterations."""
    if isinstance(max_iterations, bool) or not isinstance(max_iterations, int) or max_iterations < 1:
        raise InvalidParameterError(f"max_iterations must be an integer > 0, got {max_iterations!r}")
    _check_threshold(threshold)
    for i in range(max_iterations):
        result = step(points, centroids, threshold)
        logger.debug(f"k-means iteration {i + 1}: converged={result.converged}")
        yield result
        if result.converged:
            return
        points, centroids = result.points, result.centroids


def run(points: Sequence[Point], centroids: Sequence[Centroid], max_iterations: int = 100,
        threshold: float = DEFAULT_THRESHOLD) -> KMeansRun:
    history = tuple(iterate(points, centroids, max_iterations, threshold))
    last = history[-1]
    return KMeansRun(points=last.points, centroids=last.centroids, iterations=len(history),
                     converged=last.converged, history=history)


def inertia(points: Sequence[Point], centroids: Sequence[Centroid]) -> float:
    """Sum of squared distances from assigned points to their centroid."""
    total = 0.0
    for p in points:
        if 0 <= p.cluster < len(centroids):
            c = centroids[p.cluster]
            total += (p.x - c.x) ** 2 + (p.y - c.y) ** 2
    return float(total)
