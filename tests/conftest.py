import pytest

from mlplayground.algorithms.entities import Point
from mlplayground.config import TestingConfig


@pytest.fixture
def app():
    from mlplayground.app import app as flask_app
    flask_app.config.from_object(TestingConfig)
    yield flask_app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def socket_client(app):
    from mlplayground.app import socketio
    client = socketio.test_client(app)
    yield client
    if client.is_connected():
        client.disconnect()


@pytest.fixture
def demo_svm_points():
    """The six starting points of the SVM demo."""
    raw = [(25, 25, 0), (30, 20, 0), (20, 35, 0), (75, 75, 1), (70, 80, 1), (80, 65, 1)]
    return [Point(x=x, y=y, id=f"default_{i + 1}", label=c) for i, (x, y, c) in enumerate(raw)]


@pytest.fixture
def two_clusters():
    a = [(2, 2), (3, 2), (2, 3), (3, 3), (4, 4), (3, 4)]
    b = [(12, 12), (13, 12), (12, 13), (11, 11), (12, 11), (13, 13)]
    return [Point(x=x, y=y, id=i) for i, (x, y) in enumerate(a + b)]
