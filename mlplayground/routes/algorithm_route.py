from flask import Blueprint, current_app, request, jsonify
from flask_socketio import emit
from mlplayground.algorithms.api import describe_algorithms
from mlplayground.algorithms.errors import PlaygroundError
from mlplayground.algorithms.kmeans import KMeansState
from mlplayground.algorithms.options import AlgorithmOptions
from mlplayground.dataset_loader import available_datasets
from mlplayground.services.algorithm_service import handle_algorithm_request
from mlplayground.services.kmeans_runner import KMeansAutoRunner
import logging
import threading
import time

logger = logging.getLogger(__name__)

# 创建蓝图
algorithm_bp = Blueprint('algorithm', __name__, url_prefix='/api/algorithm')

# 每个 Socket.IO 连接当前的自动运行任务
_runners = {}
_runners_lock = threading.Lock()


def _swap_runner(sid, runner=None):
    """登记新任务（runner=None 时仅移除），返回被替换的旧任务"""
    with _runners_lock:
        previous = _runners.pop(sid, None)
        if runner is not None:
            _runners[sid] = runner
    return previous


def _release_runner(sid, runner):
    """任务结束时注销，只移除它自己"""
    with _runners_lock:
        if _runners.get(sid) is runner:
            del _runners[sid]


# HTTP接口（用于同步算法请求）
@algorithm_bp.route('/run', methods=['POST'])
def run_algorithm():
    request_data = request.get_json(silent=True)
    if not isinstance(request_data, dict):
        return jsonify({"code": 400, "message": "请求体必须是 JSON 对象", "data": {}}), 400

    logger.info(f"收到HTTP算法请求: {request_data.get('algorithm')} - {request_data.get('action')}")
    response = handle_algorithm_request(request_data)
    return jsonify(response), response["code"]


@algorithm_bp.route('/list', methods=['GET'])
def list_algorithms():
    return jsonify({"code": 200, "message": "success", "data": describe_algorithms()})


@algorithm_bp.route('/presets', methods=['GET'])
def list_presets():
    return jsonify({"code": 200, "message": "success", "data": available_datasets()})


# WebSocket事件处理
def register_socket_events(socketio):
    @socketio.on('connect')
    def handle_connect():
        logger.info('客户端已连接')
        emit('connection_response', {'message': '连接成功', 'status': 'connected'})

    @socketio.on('disconnect')
    def handle_disconnect(reason=None):
        runner = _swap_runner(request.sid)
        if runner is not None:
            runner.stop()
        logger.info('客户端已断开连接')

    @socketio.on('run_algorithm')
    def handle_algorithm_socket(data):
        """WebSocket实时处理算法请求"""
        try:
            logger.info(f"收到WebSocket算法请求 - 算法: {data.get('algorithm')}, 动作: {data.get('action')}")

            # 发送处理中状态
            emit('algorithm_status', {'status': 'processing', 'message': '算法执行中...'})

            response = handle_algorithm_request(data)

            if response["code"] == 200:
                emit('algorithm_result', response["data"])
                logger.info(f"算法执行完成: {data.get('algorithm')}")
            else:
                emit('algorithm_error', {'error': response["message"]})

        except Exception as e:
            error_msg = f"算法执行错误: {str(e)}"
            logger.exception(error_msg)
            emit('algorithm_error', {'error': error_msg})

    @socketio.on('kmeans_autorun')
    def handle_kmeans_autorun(data):
        """按固定间隔逐步推送 K-means 迭代结果"""
        data = data or {}
        sid = request.sid
        try:
            state = KMeansState.from_state(data.get('state') or {})
            opts = AlgorithmOptions.from_params(data.get('params'))
            config = current_app.config
            runner = KMeansAutoRunner(
                state,
                delay=float(data.get('delay', config['KMEANS_STEP_DELAY'])),
                max_iterations=int(data.get('maxIterations', config['KMEANS_MAX_ITERATIONS'])),
                threshold=opts.convergence_threshold,
                sleep=socketio.sleep,
            )
        except (PlaygroundError, TypeError, ValueError) as e:
            emit('algorithm_error', {'error': f"自动运行参数错误: {str(e)}"})
            return

        previous = _swap_runner(sid, runner)
        if previous is not None:
            previous.stop()

        def push_step(new_state):
            socketio.emit('kmeans_step', new_state.get_state(), to=sid)

        def background():
            final_state = runner.run(push_step)
            _release_runner(sid, runner)
            socketio.emit('kmeans_finished', {'state': final_state.get_state(), 'cancelled': runner.stopped},
                          to=sid)

        logger.info(f"开始 K-means 自动运行: sid={sid}, k={state.k}")
        socketio.start_background_task(background)

    @socketio.on('kmeans_stop')
    def handle_kmeans_stop():
        runner = _swap_runner(request.sid)
        if runner is not None:
            runner.stop()
        emit('kmeans_stopped', {'stopped': runner is not None})

    @socketio.on('ping')
    def handle_ping():
        emit('pong', {'message': 'pong', 'timestamp': time.time()})
