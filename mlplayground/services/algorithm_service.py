import numpy as np
import logging
from mlplayground.algorithms.api import ALGORITHMS, serve_request
from mlplayground.algorithms.errors import PlaygroundError
from mlplayground.dataset_loader import load_dataset
from sklearn.metrics import confusion_matrix, precision_score, recall_score, f1_score

logger = logging.getLogger(__name__)

# 每种算法可用的预设数据集前缀
DATASET_PREFIXES = {
    "linear_regression": ("regression_",),
    "kmeans": ("kmeans_",),
    "logistic_regression": ("logistic_", "svm_"),
    "svm": ("svm_", "logistic_"),
}


def validate_algorithm_dataset_compatibility(algorithm, dataset_name, points):
    """
    验证算法与数据集的兼容性
    """
    if algorithm not in ALGORITHMS:
        return False, f"未知算法 '{algorithm}'"

    if dataset_name is not None:
        prefixes = DATASET_PREFIXES.get(algorithm)
        if prefixes is None:
            return False, f"算法 '{algorithm}' 不使用点数据集"
        if not dataset_name.startswith(prefixes):
            return False, f"算法 '{algorithm}' 不能使用数据集 '{dataset_name}'"

    # 分类算法要求每个点都有类别标签
    if ALGORITHMS[algorithm]["task_type"] == "classification":
        for point in points or []:
            label = point.get("class") if isinstance(point, dict) else None
            if label is None:
                return False, "分类算法要求每个点都带有 class 标签"

    return True, "验证通过"


def classification_report_data(y_true, y_pred):
    """用 sklearn 计算混淆矩阵与精确率/召回率/F1"""
    y_true = np.asarray(y_true, dtype=int)
    y_pred = np.asarray(y_pred, dtype=int)
    cm = confusion_matrix(y_true, y_pred, labels=[0, 1])
    class_accuracy = {}
    for cls in (0, 1):
        mask = y_true == cls
        if np.sum(mask) > 0:
            class_accuracy[cls] = float(np.mean(y_pred[mask] == cls))
    return {
        "confusion_matrix": cm.tolist(),
        "class_accuracy": class_accuracy,
        "precision": float(precision_score(y_true, y_pred, zero_division=0)),
        "recall": float(recall_score(y_true, y_pred, zero_division=0)),
        "f1_score": float(f1_score(y_true, y_pred, zero_division=0)),
    }


def handle_algorithm_request(request_data: dict) -> dict:
    """
    对接前端请求与算法模块的核心服务函数
    """
    try:
        # 1. 解析前端请求参数
        algo_name = request_data["algorithm"]
        action = request_data["action"]
        dataset_name = request_data.get("dataset")
        points = request_data.get("points")

        logger.info(f"处理算法请求 - 算法: {algo_name}, 动作: {action}, 数据集: {dataset_name}")

        # 2. 指定了预设数据集时加载数据集
        if dataset_name is not None and points is None:
            is_valid, validation_msg = validate_algorithm_dataset_compatibility(algo_name, dataset_name, None)
            if not is_valid:
                return {"code": 400, "message": f"算法与数据集不兼容: {validation_msg}", "data": {}}
            points = [p.get_state() for p in load_dataset(dataset_name, request_data.get("seed"))]

        # 3. 验证请求
        is_valid, validation_msg = validate_algorithm_dataset_compatibility(algo_name, None, points)
        if not is_valid:
            return {"code": 400, "message": f"请求无效: {validation_msg}", "data": {}}

        # 4. 构造 serve_request 输入
        payload = {
            "algo": algo_name,
            "action": action,
            "points": points,
            "params": request_data.get("params", {}),
            "state": request_data.get("state"),
            "text": request_data.get("text"),
            "preset": request_data.get("preset"),
            "table": request_data.get("table"),
            "seed": request_data.get("seed"),
        }

        # 5. 调用算法模块
        result = serve_request(payload)

        if not result["ok"]:
            logger.warning(f"算法运行失败: {algo_name} - {result['message']}")
            return {"code": 400, "message": f"算法运行失败：{result['message']}", "data": {}}

        # 6. 整理基础结果
        response_data = {
            "code": 200,
            "message": "success",
            "data": {
                "basic_info": {
                    "algorithm": algo_name,
                    "dataset": dataset_name,
                    "task_type": result["task_type"],
                    "action": action
                },
                "result": result["result"],
                "points": points if dataset_name is not None else None,
                "metrics": {},
                "y_pred": result["y_pred"] or [],
            }
        }

        # 7. 分类任务补充混淆矩阵等评估指标
        if result["task_type"] == "classification" and result["y_true"]:
            response_data["data"]["metrics"] = classification_report_data(result["y_true"], result["y_pred"])

        logger.info(f"算法执行成功: {algo_name}, 动作: {action}")
        return response_data

    except KeyError as e:
        logger.error(f"请求缺少字段: {str(e)}")
        return {"code": 400, "message": f"请求缺少字段：{str(e)}", "data": {}}

    except PlaygroundError as e:
        logger.error(f"请求参数错误: {str(e)}")
        return {"code": 400, "message": f"请求参数错误：{str(e)}", "data": {}}

    except Exception as e:
        logger.exception(f"算法服务错误: {str(e)}")
        return {"code": 500, "message": f"服务端错误：{str(e)}", "data": {}}
