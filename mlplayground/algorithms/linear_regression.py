"""Closed-form ordinary least squares on 2D points."""

from __future__ import annotations
from typing import List, Sequence, Tuple

import numpy as np

from .entities import Point, RegressionModel
from .errors import DegenerateInputError
from .utils import points_to_array


def fit_linear_regression(points: Sequence[Point]) -> RegressionModel:
    """
    Fit y = slope * x + intercept.

    Fewer than two points give the all-zero model. Identical x values leave
    the slope undefined and raise DegenerateInputError.
    """
    n = len(points)
    if n < 2:
        return RegressionModel()

    XY = points_to_array(points)
    x, y = XY[:, 0], XY[:, 1]
    sum_x, sum_y = x.sum(), y.sum()
    sum_xy, sum_xx = (x * y).sum(), (x * x).sum()

    denom = n * sum_xx - sum_x * sum_x
    if denom == 0 or np.all(x == x[0]):
        raise DegenerateInputError("slope is undefined: every point has the same x value")

    slope = (n * sum_xy - sum_x * sum_y) / denom
    intercept = (sum_y - slope * sum_x) / n

    y_mean = sum_y / n
    ss_total = float(((y - y_mean) ** 2).sum())
    ss_residual = float(((y - (slope * x + intercept)) ** 2).sum())
    r_squared = 1.0 - ss_residual / ss_total if ss_total > 0 else 0.0

    return RegressionModel(slope=float(slope), intercept=float(intercept), r_squared=float(r_squared))


def predict(model: RegressionModel, x):
    return model.slope * np.asarray(x, dtype=float) + model.intercept


def residuals(model: RegressionModel, points: Sequence[Point]) -> List[float]:
    XY = points_to_array(points)
    return (XY[:, 1] - predict(model, XY[:, 0])).tolist()


def regression_line(model: RegressionModel, points: Sequence[Point],
                    step: float = 0.5) -> List[Tuple[float, float]]:
    """Sample the fitted line one unit past the outermost points."""
    if len(points) < 2:
        return []
    xs = points_to_array(points)[:, 0]
    grid = np.arange(xs.min() - 1, xs.max() + 1 + step / 2, step)
    return [(float(x), float(y)) for x, y in zip(grid, predict(model, grid))]
