"""
模块职责（应用层）
- 编排一次图片获取请求：按优先级筛选并依次执行适用的策略，拼接结果并截断到 max_results；
- 隔离单个策略的失败：非 ImageFetchError 的异常只记录日志，该策略贡献零结果；
- 以请求级截止时间与调用方的取消信号约束整个请求，到点后立即返回已收集的结果；
- 向事件总线发布领域事件，由 shared 中的事件处理器转换为业务日志。

每个策略在独立的守护线程中运行，编排线程轮询等待。
截止或取消时通过 stop_event 通知在途策略尽快结束，编排线程不再等待它。
"""

import logging
import time
import uuid
from threading import Event, Thread
from typing import Iterable, List, Optional, Tuple

from ..domain.strategy.i_image_fetch_strategy import IImageFetchStrategy
from ..domain.exceptions import ImageFetchError
from ..domain.value_objects.fetch_request import FetchRequest
from ..domain.value_objects.fetch_response import FetchResponse
from ..domain.value_objects.image_result import ImageResult
from ..domain.domain_event.fetch_process_event import (
    ImageFetchStartedEvent,
    StrategyCompletedEvent,
    StrategyFailedEvent,
    ImageFetchCompletedEvent,
    ImageFetchCancelledEvent,
)
from imagefetch.shared.event_bus import EventBus

logger = logging.getLogger(__name__)

# 编排线程轮询在途策略的间隔（秒）
POLL_INTERVAL_SECONDS = 0.01

# 策略执行结束的三种情况
_FINISHED = "finished"
_CANCELLED = "cancelled"
_DEADLINE = "deadline"


class _StrategyRun:
    """一次策略执行的结果容器，由工作线程写入"""

    def __init__(self):
        self.results: List[ImageResult] = []
        self.error: Optional[BaseException] = None
        self.elapsed_ms = 0


class ImageCollectionService:
    """
    应用服务 - 图片获取编排（Collection Orchestrator）
    """

    def __init__(
        self,
        strategies: Iterable[IImageFetchStrategy],
        max_results: int = 3,
        deadline_ms: Optional[int] = None,
        event_bus: Optional[EventBus] = None
    ):
        """
        构造函数注入依赖

        参数:
            strategies: 已注册的策略集合（顺序无关，执行时按 priority 排序）
            max_results: 结果上限
            deadline_ms: 请求级截止时间，None 表示不限制
            event_bus: 事件总线 (可选，便于测试)
        """
        if max_results < 1:
            raise ValueError("max_results 必须大于等于 1")

        self._strategies = list(strategies)
        self._max_results = max_results
        self._deadline_ms = deadline_ms
        self._event_bus = event_bus

    def fetch_images(self, request: FetchRequest, cancel_event: Optional[Event] = None) -> FetchResponse:
        """
        执行一次图片获取

        参数:
            request: 图片获取请求
            cancel_event: 调用方的取消信号（例如客户端断开），置位后立即返回已收集的结果

        返回:
            FetchResponse，images 按策略优先级、策略内发现顺序排列，长度不超过 max_results

        异常:
            ImageFetchError 的子类（InvalidUrlError / FetchTimeoutError / ImageNotAccessibleError）原样抛出
        """
        request_id = str(uuid.uuid4())
        start = time.monotonic()
        deadline = start + self._deadline_ms / 1000 if self._deadline_ms is not None else None

        applicable = self._select_strategies(request)
        self._publish(ImageFetchStartedEvent(
            request_id=request_id,
            item_name=request.item_name,
            strategies=", ".join(s.name for s in applicable),
        ))

        # 通知在途策略停止；工作线程只读取它
        stop_event = Event()
        collected: List[ImageResult] = []

        for strategy in applicable:
            if cancel_event is not None and cancel_event.is_set():
                return self._finish_cancelled(request_id, start, collected, None)

            outcome, run = self._run_strategy(strategy, request, stop_event, cancel_event, deadline)

            if outcome == _CANCELLED:
                return self._finish_cancelled(request_id, start, collected, strategy.name)
            if outcome == _DEADLINE:
                logger.warning(f"Request deadline exceeded while running {strategy.name}")
                return self._finish(request_id, start, collected, deadline_exceeded=True)

            if run.error is not None:
                self._publish(StrategyFailedEvent(
                    request_id=request_id,
                    strategy=strategy.name,
                    error_type=type(run.error).__name__,
                    error_message=str(run.error),
                ))
                if isinstance(run.error, ImageFetchError):
                    raise run.error
                logger.error(f"Strategy {strategy.name} failed: {run.error}", exc_info=run.error)
                continue

            self._publish(StrategyCompletedEvent(
                request_id=request_id,
                strategy=strategy.name,
                priority=strategy.priority(),
                image_count=len(run.results),
                elapsed_ms=run.elapsed_ms,
            ))
            collected.extend(run.results)

        return self._finish(request_id, start, collected)

    def _select_strategies(self, request: FetchRequest) -> List[IImageFetchStrategy]:
        ordered = sorted(self._strategies, key=lambda s: s.priority())
        return [s for s in ordered if s.can_handle(request)]

    def _run_strategy(
        self,
        strategy: IImageFetchStrategy,
        request: FetchRequest,
        stop_event: Event,
        cancel_event: Optional[Event],
        deadline: Optional[float]
    ) -> Tuple[str, _StrategyRun]:
        """在工作线程中运行策略，并在截止或取消时放弃等待"""
        run = _StrategyRun()

        def target():
            started = time.monotonic()
            try:
                run.results = list(strategy.fetch_images(request, stop_event) or [])
            except Exception as e:
                run.error = e
            finally:
                run.elapsed_ms = int((time.monotonic() - started) * 1000)

        worker = Thread(target=target, name=f"strategy-{strategy.name}", daemon=True)
        worker.start()

        while worker.is_alive():
            worker.join(POLL_INTERVAL_SECONDS)
            if not worker.is_alive():
                break
            if cancel_event is not None and cancel_event.is_set():
                stop_event.set()
                return _CANCELLED, run
            if deadline is not None and time.monotonic() >= deadline:
                stop_event.set()
                return _DEADLINE, run

        return _FINISHED, run

    def _finish(
        self,
        request_id: str,
        start: float,
        collected: List[ImageResult],
        deadline_exceeded: bool = False
    ) -> FetchResponse:
        response = self._build_response(start, collected)
        self._publish(ImageFetchCompletedEvent(
            request_id=request_id,
            image_count=len(response.images),
            total_loading_time_ms=response.total_loading_time_ms,
            deadline_exceeded=deadline_exceeded,
        ))
        return response

    def _finish_cancelled(
        self,
        request_id: str,
        start: float,
        collected: List[ImageResult],
        interrupted_strategy: Optional[str]
    ) -> FetchResponse:
        response = self._build_response(start, collected)
        self._publish(ImageFetchCancelledEvent(
            request_id=request_id,
            image_count=len(response.images),
            total_loading_time_ms=response.total_loading_time_ms,
            interrupted_strategy=interrupted_strategy,
        ))
        return response

    def _build_response(self, start: float, collected: List[ImageResult]) -> FetchResponse:
        total_time = int((time.monotonic() - start) * 1000)
        return FetchResponse(
            total_loading_time_ms=total_time,
            images=list(collected[:self._max_results]),
        )

    def _publish(self, event) -> None:
        if self._event_bus is not None:
            self._event_bus.publish(event)
