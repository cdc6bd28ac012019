import threading
import time
import logging

from mlplayground.algorithms import kmeans
from mlplayground.algorithms.errors import InvalidParameterError

logger = logging.getLogger(__name__)


class KMeansAutoRunner:
    """
    K-means 自动运行调度器

    Calls kmeans.advance() once per tick. stop() only prevents the next
    tick; a step that already started is applied whole.
    """

    def __init__(self, state, delay=1.0, max_iterations=100, threshold=kmeans.DEFAULT_THRESHOLD,
                 sleep=time.sleep):
        if state.status is kmeans.KMeansStatus.UNINITIALIZED:
            raise InvalidParameterError("centroids must be initialized before auto-run")
        if delay < 0:
            raise InvalidParameterError(f"delay must be >= 0, got {delay!r}")
        self.state = state
        self.delay = delay
        self.max_iterations = max_iterations
        self.threshold = threshold
        self._sleep = sleep
        self._stop = threading.Event()

    @property
    def stopped(self):
        return self._stop.is_set()

    def stop(self):
        self._stop.set()

    def run(self, on_step=None):
        """运行直到收敛/达到上限/被取消，返回最终状态"""
        steps = 0
        while not self._stop.is_set() and not self.state.converged and steps < self.max_iterations:
            self.state = kmeans.advance(self.state, self.threshold)
            steps += 1
            logger.debug(f"自动运行第 {self.state.iteration} 步, converged={self.state.converged}")
            if on_step is not None:
                on_step(self.state)
            if self.state.converged:
                break
            self._sleep(self.delay)
        logger.info(f"自动运行结束: 共 {steps} 步, 收敛={self.state.converged}, 取消={self.stopped}")
        return self.state
