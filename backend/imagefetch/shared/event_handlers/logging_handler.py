# shared/event_handlers/logging_handler.py
from typing import Dict, List, Optional
from collections import OrderedDict, deque
import logging
import threading
from .base_event_handler import BaseEventHandler
from imagefetch.shared.domain.events import DomainEvent

_LEVELS = {
    "INFO": logging.INFO,
    "SUCCESS": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
}


class LoggingEventHandler(BaseEventHandler):
    """
    日志事件处理器
    职责：
    1. 捕获领域事件并转换为日志格式，写入 domain.fetch_process logger
    2. 按请求ID分组存储日志到内存队列（只保留最近的 max_requests 个请求）
    3. 提供日志查询接口
    """

    def __init__(self, max_logs_per_request: int = 100, max_requests: int = 500):
        """
        初始化日志处理器

        参数:
            max_logs_per_request: 每个请求最多保留的日志条数（超出则丢弃最旧的）
            max_requests: 最多保留日志的请求数（超出则丢弃最早的请求）
        """
        self._request_logs: "OrderedDict[str, deque]" = OrderedDict()
        self._max_logs_per_request = max_logs_per_request
        self._max_requests = max_requests
        self._logger = logging.getLogger('domain.fetch_process')
        # 保护 _request_logs 的插入、淘汰与读取
        self._lock = threading.Lock()

    def handle(self, event: DomainEvent) -> None:
        """
        处理事件：转换为日志格式并存储

        参数:
            event: DomainEvent 实例
        """
        try:
            request_id = getattr(event, 'request_id', 'unknown_request')

            log_entry = self._format_event_to_log(event)

            with self._lock:
                if request_id not in self._request_logs:
                    self._request_logs[request_id] = deque(maxlen=self._max_logs_per_request)
                    while len(self._request_logs) > self._max_requests:
                        self._request_logs.popitem(last=False)
                self._request_logs[request_id].append(log_entry)

            self._logger.log(
                _LEVELS.get(log_entry['level'], logging.INFO),
                log_entry['message'],
                extra={
                    'request_id': request_id,
                    'event_type': log_entry['event_type'],
                    'data': log_entry['data'],
                }
            )

        except Exception as e:
            # 日志处理本身的错误不能影响业务流程
            logging.getLogger('infrastructure.error').error(f"LoggingEventHandler error: {e}")

    def get_logs(self, request_id: str, last_n: Optional[int] = None) -> List[dict]:
        """
        获取请求日志

        参数:
            request_id: 请求ID
            last_n: 获取最近N条，None表示全部
        """
        with self._lock:
            logs = list(self._request_logs.get(request_id, ()))

        if last_n:
            return logs[-last_n:]
        return logs

    def get_error_logs(self, request_id: str) -> List[dict]:
        """快捷方法：获取所有错误日志"""
        return [log for log in self.get_logs(request_id) if log['level'] == 'ERROR']

    def has_errors(self, request_id: str) -> bool:
        return len(self.get_error_logs(request_id)) > 0
