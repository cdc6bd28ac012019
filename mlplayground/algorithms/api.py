"""
Unified, stateless request/response entry to the algorithms.

serve_request(payload: dict) -> dict
  payload = {
    "algo": str,                 # one of the keys in ALGORITHMS below
    "action": str,               # see ALGORITHMS[algo]["actions"]
    "points": list[dict] | None, # {"x", "y", "id", "class"?}
    "params": dict | None,       # AlgorithmOptions (camelCase or snake_case)
    "state": dict | None,        # k-means state previously returned
    "text": str | None,          # naive Bayes input
    "preset": str | None,        # naive Bayes preset message when text is absent
    "table": dict | None,        # naive Bayes word table override
    "seed": int | None           # k-means centroid initialization
  }

Return:
  {"ok": bool, "algo": str, "action": str, "task_type": str,
   "result": dict | None, "y_true": list | None, "y_pred": list | None,
   "message": str | None}

Only PlaygroundError is turned into ok=False; anything else propagates.
"""

from __future__ import annotations
from typing import Any, Dict

from . import kmeans, linear_regression, logistic_regression, loss_functions, naive_bayes, svm
from .errors import InvalidParameterError, PlaygroundError
from .options import AlgorithmOptions
from .utils import to_points

SMALL_DOMAIN = (0.0, 15.0)
LARGE_DOMAIN = (0.0, 100.0)


# ------------ Handlers ------------

def _linear_regression(action: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    opts = AlgorithmOptions.from_params(payload.get("params"), defaults={"domain": SMALL_DOMAIN})
    points = to_points(payload.get("points"), domain=opts.domain)
    model = linear_regression.fit_linear_regression(points)
    has_model = len(points) >= 2
    return {"result": {"model": model.get_state(),
                       "hasModel": has_model,
                       "line": [{"x": x, "y": y} for x, y in linear_regression.regression_line(model, points)],
                       "residuals": linear_regression.residuals(model, points) if has_model else []}}


def _kmeans_state(payload: Dict[str, Any]) -> kmeans.KMeansState:
    state = payload.get("state")
    if not state:
        raise InvalidParameterError("k-means step/run needs the state returned by init")
    return kmeans.KMeansState.from_state(state)


def _kmeans(action: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    opts = AlgorithmOptions.from_params(payload.get("params"), defaults={"domain": SMALL_DOMAIN})
    history = []
    if action == "init":
        points = to_points(payload.get("points"), domain=opts.domain)
        state = kmeans.init_state(points, opts.k, opts.domain, payload.get("seed"))
    elif action == "step":
        state = kmeans.advance(_kmeans_state(payload), opts.convergence_threshold)
    else:
        state = _kmeans_state(payload)
        if state.status is kmeans.KMeansStatus.UNINITIALIZED:
            raise InvalidParameterError("centroids must be initialized before running")
        if not state.converged:
            for result in kmeans.iterate(state.points, state.centroids, opts.max_iterations,
                                         opts.convergence_threshold):
                history.append([c.get_state() for c in result.centroids])
                state = kmeans.KMeansState(points=result.points, centroids=result.centroids,
                                           iteration=state.iteration + 1, converged=result.converged)
    return {"result": {"state": state.get_state(),
                       "inertia": kmeans.inertia(state.points, state.centroids),
                       "history": history},
            "y_pred": [p.cluster for p in state.points]}


def _logistic_regression(action: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    opts = AlgorithmOptions.from_params(payload.get("params"), defaults={"domain": LARGE_DOMAIN})
    points = to_points(payload.get("points"), require_label=True, domain=opts.domain)
    result = logistic_regression.train_logistic_regression(points, opts.learning_rate, opts.iterations,
                                                           opts.domain)
    if result is None:
        return {"result": None}
    return {"result": result.get_state(),
            "y_true": [p.label for p in points],
            "y_pred": logistic_regression.predict(result.model, points).tolist()}


def _svm(action: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    opts = AlgorithmOptions.from_params(payload.get("params"), defaults={"domain": LARGE_DOMAIN})
    points = to_points(payload.get("points"), require_label=True, domain=opts.domain)
    result = svm.fit_linear_svm(points, opts.C)
    data = result.get_state()
    if result.hyperplane is None:
        return {"result": data}
    lower, upper = svm.margin_lines(result.hyperplane, result.margin)
    data["boundary"] = [{"x": x, "y": y} for x, y in result.hyperplane.line_points(opts.domain)]
    data["marginLines"] = [[{"x": x, "y": y} for x, y in line.line_points(opts.domain)]
                           for line in (lower, upper)]
    return {"result": data,
            "y_true": [p.label for p in points],
            "y_pred": svm.predict(result.hyperplane, points).tolist()}


def _naive_bayes(action: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    opts = AlgorithmOptions.from_params(payload.get("params"))
    table = payload.get("table")
    table = naive_bayes.WordProbabilityTable.from_state(table) if table else None
    text = payload.get("text")
    if text is None and payload.get("preset"):
        preset = payload["preset"]
        if preset not in naive_bayes.PRESET_MESSAGES:
            raise InvalidParameterError(f"Unknown message preset '{preset}'. "
                                        f"Valid: {list(naive_bayes.PRESET_MESSAGES.keys())}")
        text = naive_bayes.PRESET_MESSAGES[preset]
    result = naive_bayes.classify_text(text or "", table, opts.smoothing_enabled, opts.smoothing_alpha)
    return {"result": dict(result.get_state(), text=text or "")}


def _number(params: Dict[str, Any], key: str, default: float) -> float:
    try:
        return float(params.get(key, default))
    except (TypeError, ValueError):
        raise InvalidParameterError(f"{key} must be a number, got {params.get(key)!r}") from None


def _loss_functions(action: str, payload: Dict[str, Any]) -> Dict[str, Any]:
    params = payload.get("params") or {}
    actual = _number(params, "actual", 3.0)
    if action == "compare":
        return {"result": {"actual": actual, "curves": loss_functions.compare_losses(actual)}}
    name = params.get("loss", "mse")
    predicted = _number(params, "predicted", 2.0)
    return {"result": {"loss": name,
                       "actual": actual,
                       "predicted": predicted,
                       "error": actual - predicted,
                       "value": loss_functions.compute_loss(name, actual, predicted),
                       "curve": loss_functions.loss_curve(name, actual)}}


# ------------ Registry & service ------------

ALGORITHMS = {
    "linear_regression": {"task_type": "regression", "actions": ("fit",), "handler": _linear_regression},
    "kmeans": {"task_type": "unsupervised", "actions": ("init", "step", "run"), "handler": _kmeans},
    "logistic_regression": {"task_type": "classification", "actions": ("train",),
                            "handler": _logistic_regression},
    "svm": {"task_type": "classification", "actions": ("fit",), "handler": _svm},
    "naive_bayes": {"task_type": "text_classification", "actions": ("classify",), "handler": _naive_bayes},
    "loss_functions": {"task_type": "concept", "actions": ("evaluate", "compare"), "handler": _loss_functions},
}


def describe_algorithms() -> Dict[str, Dict[str, Any]]:
    return {name: {"task_type": entry["task_type"], "actions": list(entry["actions"])}
            for name, entry in ALGORITHMS.items()}


def serve_request(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Stateless service entry."""
    algo = payload.get("algo")
    action = payload.get("action")
    try:
        if algo not in ALGORITHMS:
            raise InvalidParameterError(f"Unknown algo '{algo}'. Valid: {list(ALGORITHMS.keys())}")
        entry = ALGORITHMS[algo]
        if action not in entry["actions"]:
            raise InvalidParameterError(f"Unknown action '{action}' for {algo}. Valid: {list(entry['actions'])}")
        out = entry["handler"](action, payload)
    except PlaygroundError as e:
        return {"ok": False, "algo": algo, "action": action,
                "task_type": ALGORITHMS.get(algo, {}).get("task_type"),
                "message": f"{type(e).__name__}: {e}"}

    return {"ok": True, "algo": algo, "action": action, "task_type": entry["task_type"],
            "result": out.get("result"), "y_true": out.get("y_true"), "y_pred": out.get("y_pred"),
            "message": None}
