"""Single-sample loss functions and their sampled curves."""

from __future__ import annotations
from typing import Callable, Dict, List
import math

import numpy as np

from .errors import InvalidParameterError

HUBER_DELTA = 1.0


def mse(actual: float, predicted: float) -> float:
    return (actual - predicted) ** 2


def mae(actual: float, predicted: float) -> float:
    return abs(actual - predicted)


def huber(actual: float, predicted: float, delta: float = HUBER_DELTA) -> float:
    error = abs(actual - predicted)
    if error <= delta:
        return 0.5 * error ** 2
    return delta * error - 0.5 * delta ** 2


def logistic(actual: float, predicted: float) -> float:
    # predictions live on [-5, 5]; map them onto a probability
    p = min(max((predicted + 5) / 10, 0.0001), 0.9999)
    y = 1 if actual > 0 else 0
    return -(y * math.log(p) + (1 - y) * math.log(1 - p))


def hinge(actual: float, predicted: float) -> float:
    y = 1 if actual > 0 else -1
    return max(0.0, 1 - y * predicted)


LOSS_FUNCTIONS: Dict[str, Callable[[float, float], float]] = {
    "mse": mse,
    "mae": mae,
    "huber": huber,
    "logistic": logistic,
    "hinge": hinge,
}


def get_loss(name: str) -> Callable[[float, float], float]:
    if name not in LOSS_FUNCTIONS:
        raise InvalidParameterError(f"Unknown loss '{name}'. Valid: {list(LOSS_FUNCTIONS.keys())}")
    return LOSS_FUNCTIONS[name]


def compute_loss(name: str, actual: float, predicted: float) -> float:
    return float(get_loss(name)(float(actual), float(predicted)))


def _grid(low: float, high: float, step: float) -> np.ndarray:
    if not step > 0 or low > high:
        raise InvalidParameterError(f"bad sampling range [{low}, {high}] with step {step}")
    return np.round(np.arange(low, high + step / 2, step), 10)


def loss_curve(name: str, actual: float, low: float = -5.0, high: float = 5.0,
               step: float = 0.1) -> List[Dict[str, float]]:
    fn = get_loss(name)
    return [{"predicted": float(p), "loss": float(fn(float(actual), float(p)))}
            for p in _grid(low, high, step)]


def compare_losses(actual: float, low: float = -5.0, high: float = 5.0,
                   step: float = 0.2) -> List[Dict[str, float]]:
    rows = []
    for p in _grid(low, high, step):
        row = {"predicted": float(p)}
        for name, fn in LOSS_FUNCTIONS.items():
            row[name] = float(fn(float(actual), float(p)))
        rows.append(row)
    return rows
