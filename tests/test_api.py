import time

import pytest

from mlplayground.algorithms.api import describe_algorithms, serve_request
from mlplayground.algorithms.entities import Point
from mlplayground.routes import algorithm_route
from mlplayground.services import algorithm_service
from mlplayground.services.algorithm_service import classification_report_data, handle_algorithm_request


def _states(points):
    return [p.get_state() for p in points]


# ------------ serve_request ------------

class TestServeRequest:
    def test_unknown_algo(self):
        out = serve_request({"algo": "random_forest", "action": "fit"})
        assert out["ok"] is False
        assert out["message"].startswith("InvalidParameterError")

    def test_unknown_action(self):
        out = serve_request({"algo": "svm", "action": "train"})
        assert out["ok"] is False
        assert out["task_type"] == "classification"

    def test_linear_regression(self):
        points = [{"x": x, "y": x + 1, "id": x} for x in (1, 3, 5, 7, 9)]
        out = serve_request({"algo": "linear_regression", "action": "fit", "points": points})
        assert out["ok"] and out["task_type"] == "regression"
        model = out["result"]["model"]
        assert model["slope"] == pytest.approx(1.0)
        assert model["intercept"] == pytest.approx(1.0)
        assert out["result"]["hasModel"] is True
        assert out["result"]["residuals"] == pytest.approx([0] * 5, abs=1e-9)

    def test_linear_regression_needs_two_points(self):
        out = serve_request({"algo": "linear_regression", "action": "fit", "points": [{"x": 1, "y": 1}]})
        assert out["ok"]
        assert out["result"]["hasModel"] is False
        assert out["result"]["line"] == [] and out["result"]["residuals"] == []

    def test_degenerate_regression(self):
        points = [{"x": 5, "y": 1}, {"x": 5, "y": 9}]
        out = serve_request({"algo": "linear_regression", "action": "fit", "points": points})
        assert out["ok"] is False
        assert out["message"].startswith("DegenerateInputError")

    def test_kmeans_init_then_run(self, two_clusters):
        init = serve_request({"algo": "kmeans", "action": "init", "points": _states(two_clusters),
                              "params": {"k": 2}, "seed": 5})
        assert init["ok"]
        state = init["result"]["state"]
        assert state["status"] == "ready" and len(state["centroids"]) == 2
        assert init["y_pred"] == [-1] * 12

        run = serve_request({"algo": "kmeans", "action": "run", "state": state})
        assert run["ok"]
        assert run["result"]["state"]["converged"] is True
        assert len(run["result"]["history"]) == run["result"]["state"]["iteration"]
        assert all(c in (0, 1) for c in run["y_pred"])

    def test_kmeans_step_advances(self, two_clusters):
        init = serve_request({"algo": "kmeans", "action": "init", "points": _states(two_clusters),
                              "params": {"k": 2}, "seed": 5})
        step = serve_request({"algo": "kmeans", "action": "step", "state": init["result"]["state"]})
        assert step["ok"]
        assert step["result"]["state"]["iteration"] == 1

    @pytest.mark.parametrize("state", [None, {"points": [{"x": 1, "y": 1}], "centroids": []}])
    def test_kmeans_step_needs_initialized_state(self, state):
        out = serve_request({"algo": "kmeans", "action": "step", "state": state})
        assert out["ok"] is False

    def test_logistic_with_too_few_points(self):
        out = serve_request({"algo": "logistic_regression", "action": "train",
                             "points": [{"x": 1, "y": 1, "class": 1}]})
        assert out["ok"] and out["result"] is None

    def test_logistic_needs_labels(self):
        out = serve_request({"algo": "logistic_regression", "action": "train",
                             "points": [{"x": 1, "y": 1}, {"x": 2, "y": 2}]})
        assert out["ok"] is False

    def test_logistic_train(self):
        points = [{"x": 10 + i, "y": 20 + i, "class": 0} for i in range(5)]
        points += [{"x": 80 + i, "y": 70 + i, "class": 1} for i in range(5)]
        out = serve_request({"algo": "logistic_regression", "action": "train", "points": points,
                             "params": {"learningRate": 0.01, "iterations": 200}})
        assert out["ok"]
        assert len(out["result"]["model"]["weights"]) == 3
        assert len(out["y_true"]) == len(out["y_pred"]) == 10

    def test_svm(self, demo_svm_points):
        out = serve_request({"algo": "svm", "action": "fit", "points": _states(demo_svm_points),
                             "params": {"C": 1.0}})
        assert out["ok"]
        assert out["result"]["accuracy"] == 1.0
        assert out["result"]["boundary"]
        assert len(out["result"]["marginLines"]) == 2
        assert out["y_pred"] == [0, 0, 0, 1, 1, 1]

    def test_svm_single_class_has_no_boundary(self):
        points = [{"x": i * 10, "y": i * 10, "class": 1} for i in range(5)]
        out = serve_request({"algo": "svm", "action": "fit", "points": points})
        assert out["ok"]
        assert out["result"]["hyperplane"] is None
        assert "boundary" not in out["result"]

    def test_naive_bayes_preset(self):
        out = serve_request({"algo": "naive_bayes", "action": "classify", "preset": "spam1"})
        assert out["ok"]
        assert out["result"]["predicted"] == "spam"
        assert out["result"]["text"].startswith("FREE MONEY")

    def test_naive_bayes_text_and_options(self):
        out = serve_request({"algo": "naive_bayes", "action": "classify", "text": "zebra",
                             "params": {"smoothing": False}})
        assert out["result"]["stepByStep"][1]["spam"] == 0.01

    def test_svm_nearly_coinciding_centroids(self):
        points = [{"x": 0, "y": 0, "class": 0}, {"x": 10, "y": 0, "class": 0},
                  {"x": 0, "y": 1e-13, "class": 1}, {"x": 10, "y": 1e-13, "class": 1}]
        out = serve_request({"algo": "svm", "action": "fit", "points": points})
        assert out["ok"]
        assert out["result"]["boundary"] == []
        assert out["result"]["marginLines"] == [[], []]

    def test_naive_bayes_unknown_preset(self):
        out = serve_request({"algo": "naive_bayes", "action": "classify", "preset": "spam99"})
        assert out["ok"] is False

    def test_loss_evaluate(self):
        out = serve_request({"algo": "loss_functions", "action": "evaluate",
                             "params": {"loss": "hinge", "actual": 3, "predicted": 0.5}})
        assert out["ok"]
        assert out["result"]["value"] == pytest.approx(0.5)
        assert out["result"]["error"] == pytest.approx(2.5)
        assert len(out["result"]["curve"]) == 101

    def test_loss_compare(self):
        out = serve_request({"algo": "loss_functions", "action": "compare", "params": {"actual": -1}})
        assert len(out["result"]["curves"]) == 51

    def test_loss_bad_number(self):
        out = serve_request({"algo": "loss_functions", "action": "evaluate", "params": {"actual": "three"}})
        assert out["ok"] is False

    def test_describe(self):
        info = describe_algorithms()
        assert info["kmeans"] == {"task_type": "unsupervised", "actions": ["init", "step", "run"]}


# ------------ service layer ------------

class TestService:
    def test_dataset_request_reports_metrics(self):
        response = handle_algorithm_request({"algorithm": "svm", "action": "fit",
                                             "dataset": "svm_blobs", "seed": 0})
        assert response["code"] == 200
        data = response["data"]
        assert data["basic_info"]["task_type"] == "classification"
        assert len(data["points"]) == 40
        metrics = data["metrics"]
        assert sum(map(sum, metrics["confusion_matrix"])) == 40
        assert metrics["precision"] == metrics["recall"] == metrics["f1_score"] == 1.0

    def test_points_request(self, two_clusters):
        response = handle_algorithm_request({"algorithm": "kmeans", "action": "init",
                                             "points": _states(two_clusters), "params": {"k": 3}})
        assert response["code"] == 200
        assert response["data"]["points"] is None
        assert response["data"]["metrics"] == {}

    def test_incompatible_dataset(self):
        response = handle_algorithm_request({"algorithm": "kmeans", "action": "init", "dataset": "svm_blobs"})
        assert response["code"] == 400

    def test_text_algorithm_rejects_dataset(self):
        response = handle_algorithm_request({"algorithm": "naive_bayes", "action": "classify",
                                             "dataset": "svm_blobs"})
        assert response["code"] == 400

    def test_missing_field(self):
        response = handle_algorithm_request({"action": "fit"})
        assert response["code"] == 400
        assert "algorithm" in response["message"]

    def test_unlabelled_classification_points(self):
        response = handle_algorithm_request({"algorithm": "svm", "action": "fit",
                                             "points": [{"x": 1, "y": 1}]})
        assert response["code"] == 400

    def test_malformed_centroid_id_is_400(self, two_clusters):
        state = {"points": _states(two_clusters), "centroids": [{"x": 1, "y": 1, "id": "zero"}]}
        response = handle_algorithm_request({"algorithm": "kmeans", "action": "step", "state": state})
        assert response["code"] == 400

    def test_malformed_word_table_is_400(self):
        response = handle_algorithm_request({"algorithm": "naive_bayes", "action": "classify", "text": "free",
                                             "table": {"likelihoods": {"free": 0.5}}})
        assert response["code"] == 400

    def test_string_smoothing_flag_is_400(self):
        response = handle_algorithm_request({"algorithm": "naive_bayes", "action": "classify", "text": "free",
                                             "params": {"smoothing": "false"}})
        assert response["code"] == 400

    def test_unknown_dataset(self):
        response = handle_algorithm_request({"algorithm": "kmeans", "action": "init", "dataset": "kmeans_nope"})
        assert response["code"] == 400

    def test_unexpected_error_is_500(self, monkeypatch):
        def boom(payload):
            raise RuntimeError("boom")

        monkeypatch.setattr(algorithm_service, "serve_request", boom)
        response = handle_algorithm_request({"algorithm": "svm", "action": "fit", "points": []})
        assert response["code"] == 500

    def test_classification_report(self):
        report = classification_report_data([0, 1, 1, 0], [0, 1, 0, 0])
        assert report["confusion_matrix"] == [[2, 0], [1, 1]]
        assert report["class_accuracy"] == {0: 1.0, 1: 0.5}
        assert report["precision"] == 1.0
        assert report["recall"] == 0.5


# ------------ HTTP ------------

class TestRoutes:
    def test_index(self, client):
        body = client.get("/").get_json()
        assert body["name"] == "ML Playground"
        assert "svm" in body["algorithms"]

    def test_list(self, client):
        body = client.get("/api/algorithm/list").get_json()
        assert body["code"] == 200
        assert set(body["data"]) == {"linear_regression", "kmeans", "logistic_regression", "svm",
                                     "naive_bayes", "loss_functions"}

    def test_presets(self, client):
        assert "svm_blobs" in client.get("/api/algorithm/presets").get_json()["data"]

    def test_run(self, client):
        resp = client.post("/api/algorithm/run", json={"algorithm": "linear_regression", "action": "fit",
                                                       "dataset": "regression_linear"})
        assert resp.status_code == 200
        assert resp.get_json()["data"]["result"]["model"]["slope"] == pytest.approx(1.0)

    def test_run_rejects_non_object(self, client):
        assert client.post("/api/algorithm/run", data="nope", content_type="text/plain").status_code == 400
        assert client.post("/api/algorithm/run", json=[1, 2]).status_code == 400

    def test_run_bad_params(self, client):
        resp = client.post("/api/algorithm/run", json={"algorithm": "kmeans", "action": "init",
                                                       "points": [], "params": {"k": 0}})
        assert resp.status_code == 400
        assert resp.get_json()["code"] == 400


# ------------ Socket.IO ------------

def _events(client, name):
    return [e["args"][0] for e in client.get_received() if e["name"] == name]


def _wait_for(client, name, timeout=5.0):
    deadline = time.time() + timeout
    seen = []
    while time.time() < deadline:
        seen.extend(client.get_received())
        found = [e["args"][0] for e in seen if e["name"] == name]
        if found:
            return found, seen
        time.sleep(0.05)
    return [], seen


class TestSocket:
    def test_connect_and_ping(self, socket_client):
        assert _events(socket_client, "connection_response")[0]["status"] == "connected"
        socket_client.emit("ping")
        assert _events(socket_client, "pong")[0]["message"] == "pong"

    def test_run_algorithm(self, socket_client):
        socket_client.get_received()
        socket_client.emit("run_algorithm", {"algorithm": "naive_bayes", "action": "classify",
                                             "text": "free prize"})
        received = socket_client.get_received()
        names = [e["name"] for e in received]
        assert names == ["algorithm_status", "algorithm_result"]
        assert received[1]["args"][0]["result"]["predicted"] == "spam"

    def test_run_algorithm_error(self, socket_client):
        socket_client.get_received()
        socket_client.emit("run_algorithm", {"algorithm": "svm"})
        assert _events(socket_client, "algorithm_error")

    def test_stop_without_runner(self, socket_client):
        socket_client.get_received()
        socket_client.emit("kmeans_stop")
        assert _events(socket_client, "kmeans_stopped") == [{"stopped": False}]

    def test_autorun_needs_centroids(self, socket_client):
        socket_client.get_received()
        socket_client.emit("kmeans_autorun", {"state": {"points": [{"x": 1, "y": 1}]}})
        assert _events(socket_client, "algorithm_error")

    def test_autorun_streams_steps(self, socket_client, two_clusters):
        init = serve_request({"algo": "kmeans", "action": "init", "points": _states(two_clusters),
                              "params": {"k": 2}, "seed": 5})
        socket_client.get_received()
        socket_client.emit("kmeans_autorun", {"state": init["result"]["state"], "delay": 0})
        finished, seen = _wait_for(socket_client, "kmeans_finished")
        assert finished and finished[0]["cancelled"] is False
        steps = [e["args"][0] for e in seen if e["name"] == "kmeans_step"]
        assert steps
        assert finished[0]["state"] == steps[-1]
        assert finished[0]["state"]["converged"] is True


class TestRunnerRegistry:
    def test_release_only_removes_own_runner(self):
        first, second = object(), object()
        assert algorithm_route._swap_runner("sid-a", first) is None
        assert algorithm_route._swap_runner("sid-a", second) is first
        algorithm_route._release_runner("sid-a", first)
        assert algorithm_route._runners["sid-a"] is second
        algorithm_route._release_runner("sid-a", second)
        assert "sid-a" not in algorithm_route._runners

    def test_release_after_stop_is_harmless(self):
        runner = object()
        algorithm_route._swap_runner("sid-b", runner)
        assert algorithm_route._swap_runner("sid-b") is runner
        algorithm_route._release_runner("sid-b", runner)
        assert "sid-b" not in algorithm_route._runners
