from flask import Flask, jsonify
from flask_socketio import SocketIO
import logging
import socket

from mlplayground.config import Config

# 配置日志
logging.basicConfig(level=getattr(logging, str(Config.LOG_LEVEL).upper(), logging.INFO))
logger = logging.getLogger(__name__)

app = Flask(__name__)
app.config.from_object(Config)

# 使用 threading 模式
socketio = SocketIO(
    app,
    cors_allowed_origins="*",
    logger=app.config['DEBUG'],
    engineio_logger=app.config['DEBUG'],
    async_mode='threading'
)

# 注册蓝图
from mlplayground.routes.algorithm_route import algorithm_bp  # noqa: E402

app.register_blueprint(algorithm_bp)

# 注册 SocketIO 事件
from mlplayground.routes.algorithm_route import register_socket_events  # noqa: E402

register_socket_events(socketio)

from mlplayground.algorithms.api import describe_algorithms  # noqa: E402


# 获取本机IP地址
def get_local_ip():
    try:
        s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        s.connect(("8.8.8.8", 80))
        ip = s.getsockname()[0]
        s.close()
        return ip
    except OSError:
        return "127.0.0.1"


@app.route('/')
def index():
    return jsonify({"name": "ML Playground", "algorithms": describe_algorithms()})


def main():
    host, port = app.config['HOST'], app.config['PORT']
    local_ip = get_local_ip()
    logger.info("=" * 50)
    logger.info("机器学习算法可视化服务启动成功!")
    logger.info(f"本地访问: http://localhost:{port}")
    logger.info(f"网络访问: http://{local_ip}:{port}")
    logger.info("=" * 50)

    socketio.run(
        app,
        debug=app.config['DEBUG'],
        host=host,
        port=port,
        allow_unsafe_werkzeug=True
    )


if __name__ == '__main__':
    main()
