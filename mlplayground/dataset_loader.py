import numpy as np
from sklearn.datasets import make_blobs
import logging

from mlplayground.algorithms.entities import Point
from mlplayground.algorithms.errors import InvalidParameterError

logger = logging.getLogger(__name__)


def _points(xy, labels=None, prefix="preset"):
    points = []
    for i, (x, y) in enumerate(xy):
        label = int(labels[i]) if labels is not None else None
        points.append(Point(x=float(x), y=float(y), id=f"{prefix}_{i}", label=label))
    return points


# ------------ Linear regression (domain 0-15) ------------

REGRESSION_PRESETS = {
    "regression_linear": [(1, 2), (3, 4), (5, 6), (7, 8), (9, 10)],
    "regression_scattered": [(2, 3), (4, 7), (6, 5), (8, 11), (10, 9)],
    "regression_no_correlation": [(2, 8), (4, 3), (6, 12), (8, 5), (10, 9)],
}


# ------------ K-means (domain 0-15) ------------

def _kmeans_random(rng, seed):
    # 三个自然簇，坐标限制在 [1, 14]
    X, _ = make_blobs(n_samples=50, centers=[(3, 8), (7, 3), (11, 9)], cluster_std=1.2,
                      random_state=seed)
    return _points(np.clip(X, 1, 14))


def _kmeans_circles(rng, seed):
    xy = []
    for cx, cy in [(4, 4), (10, 4), (7, 10)]:
        angle = rng.uniform(0, 2 * np.pi, 15)
        radius = rng.uniform(0, 2, 15)
        xy.append(np.column_stack([cx + np.cos(angle) * radius, cy + np.sin(angle) * radius]))
    return _points(np.clip(np.vstack(xy), 1, 13))


def _kmeans_elongated(rng, seed):
    left = np.column_stack([rng.uniform(1, 7, 25), rng.uniform(6, 8, 25)])
    right = np.column_stack([rng.uniform(7, 13, 25), rng.uniform(3, 5, 25)])
    return _points(np.vstack([left, right]))


# ------------ Logistic regression (domain 0-100) ------------

def _logistic_binary(rng, seed):
    neg = np.column_stack([rng.integers(0, 50, 30), rng.integers(0, 100, 30)])
    pos = np.column_stack([50 + rng.integers(0, 50, 30), rng.integers(0, 100, 30)])
    return _points(np.vstack([neg, pos]), [0] * 30 + [1] * 30)


def _logistic_sigmoid(rng, seed):
    x = rng.integers(0, 100, 60)
    prob = 1.0 / (1.0 + np.exp(-(x - 50) * 0.1))
    labels = (rng.random(60) < prob).astype(int)
    return _points(np.column_stack([x, rng.integers(0, 100, 60)]), labels)


# ------------ SVM (domain 0-100) ------------

def _svm_linear(rng, seed):
    neg = rng.integers(10, 50, size=(25, 2))
    pos = rng.integers(50, 90, size=(25, 2))
    return _points(np.vstack([neg, pos]), [0] * 25 + [1] * 25)


def _svm_nonlinear(rng, seed):
    angle = np.arange(30) / 30 * 2 * np.pi
    radius = 20 + rng.random(30) * 10
    ring = np.column_stack([50 + radius * np.cos(angle), 50 + radius * np.sin(angle)])
    inner_angle = rng.random(20) * 2 * np.pi
    inner_radius = rng.random(20) * 15
    core = np.column_stack([50 + inner_radius * np.cos(inner_angle), 50 + inner_radius * np.sin(inner_angle)])
    return _points(np.vstack([ring, core]), [0] * 30 + [1] * 20)


def _svm_overlapping(rng, seed):
    xy = rng.integers(10, 90, size=(40, 2))
    return _points(xy, (rng.random(40) > 0.5).astype(int))


def _svm_blobs(rng, seed):
    # 对角的两个紧凑簇
    X, y = make_blobs(n_samples=40, centers=[(20, 20), (80, 80)], cluster_std=3.0, random_state=seed)
    return _points(np.clip(X, 0, 100), y)


GENERATED_PRESETS = {
    "kmeans_random": _kmeans_random,
    "kmeans_circles": _kmeans_circles,
    "kmeans_elongated": _kmeans_elongated,
    "logistic_binary": _logistic_binary,
    "logistic_sigmoid": _logistic_sigmoid,
    "svm_linear": _svm_linear,
    "svm_nonlinear": _svm_nonlinear,
    "svm_overlapping": _svm_overlapping,
    "svm_blobs": _svm_blobs,
}


def available_datasets():
    return sorted(list(REGRESSION_PRESETS) + list(GENERATED_PRESETS))


def load_dataset(dataset_name, seed=None):
    """
    加载预设数据集，返回 Point 列表
    固定 seed 时结果可复现；seed=None 时每次随机生成
    """
    try:
        if dataset_name in REGRESSION_PRESETS:
            points = _points(REGRESSION_PRESETS[dataset_name])
        elif dataset_name in GENERATED_PRESETS:
            if seed is None:
                seed = int(np.random.default_rng().integers(0, 2**31 - 1))
            points = GENERATED_PRESETS[dataset_name](np.random.default_rng(seed), seed)
        else:
            raise InvalidParameterError(f"未知数据集: {dataset_name}, 可选: {available_datasets()}")

        logger.info(f"加载数据集: {dataset_name}, seed={seed}, 点数={len(points)}")
        return points

    except Exception as e:
        logger.error(f"数据集加载失败 {dataset_name}: {str(e)}")
        raise
