"""最小间隔限流器：串行化同一外部来源的请求，避免触发反爬机制"""

import logging
import threading
import time
from typing import Optional

logger = logging.getLogger(__name__)

# 等待锁时检查取消信号的间隔（秒）
LOCK_POLL_INTERVAL = 0.01


class RateLimiter:
    """
    线程安全的最小间隔限流器

    每个策略实例持有一个独立的限流器（非全局、非按请求）。
    每次 throttle() 计算距上次放行的时间，不足 min_interval 时阻塞补足差额，
    之后无条件把"上次放行时间"更新为当前时间。
    并发调用方通过同一把锁串行，每个调用方都相对最近一次放行补足间隔。
    min_interval 为 0 时不限流。
    """

    def __init__(self, min_interval_ms: float = 200.0) -> None:
        if min_interval_ms < 0:
            raise ValueError("min_interval_ms 不能为负数")
        self.min_interval = min_interval_ms / 1000.0
        self._last_request_time: Optional[float] = None
        self._lock = threading.Lock()

    def throttle(self, cancel_event: Optional[threading.Event] = None) -> None:
        """
        阻塞到距上次放行至少 min_interval 为止

        等待锁和补足间隔两个阶段都会检查 cancel_event；
        取消时直接返回，不更新"上次放行时间"。

        参数:
            cancel_event: 置位时立即结束等待（请求被取消）
        """
        if not self._acquire(cancel_event):
            return
        try:
            if self._last_request_time is not None:
                elapsed = time.monotonic() - self._last_request_time
                shortfall = self.min_interval - elapsed
                if shortfall > 0:
                    logger.debug(f"Rate limiting: sleeping for {int(shortfall * 1000)}ms")
                    if cancel_event is not None:
                        if cancel_event.wait(shortfall):
                            return
                    else:
                        time.sleep(shortfall)

            self._last_request_time = time.monotonic()
        finally:
            self._lock.release()

    def _acquire(self, cancel_event: Optional[threading.Event]) -> bool:
        if cancel_event is None:
            return self._lock.acquire()
        while not self._lock.acquire(timeout=LOCK_POLL_INTERVAL):
            if cancel_event.is_set():
                return False
        return True
