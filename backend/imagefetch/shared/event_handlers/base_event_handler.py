from abc import ABC, abstractmethod
from datetime import datetime
from imagefetch.shared.domain.events import DomainEvent

class BaseEventHandler(ABC):
    """
    事件处理器基类
    提供通用的事件格式化方法
    """

    @abstractmethod
    def handle(self, event: DomainEvent) -> None:
        """
        处理事件（子类必须实现）

        参数:
            event: DomainEvent 实例
        """
        pass

    def _format_event_to_log(self, event: DomainEvent) -> dict:
        """
        将领域事件转换为日志格式（通用方法）

        参数:
            event: DomainEvent实例

        返回:
            格式化的日志字典
        """
        message, level = self._get_message_and_level(event)

        return {
            "timestamp": self._format_timestamp(event.timestamp),
            "level": level,
            "message": message,
            "event_type": event.event_type,
            "request_id": event.request_id,
            "data": event.data
        }

    def _get_message_and_level(self, event: DomainEvent) -> tuple[str, str]:
        """
        根据事件类型生成消息和日志级别

        返回:
            (message, level) 元组
        """
        event_type = event.event_type
        data = event.data

        if event_type == "ImageFetchStartedEvent":
            strategies = data.get('strategies') or '无'
            return (
                f"▶ 开始获取图片: {data.get('item_name', 'N/A')} [适用策略: {strategies}]",
                "INFO"
            )

        if event_type == "StrategyCompletedEvent":
            return (
                f"✓ 策略完成: {data.get('strategy')} (优先级 {data.get('priority')}) "
                f"获得 {data.get('image_count', 0)} 张图片, 耗时 {data.get('elapsed_ms', 0)}ms",
                "SUCCESS"
            )

        if event_type == "StrategyFailedEvent":
            return (
                f"✗ 策略失败: {data.get('strategy')} - "
                f"{data.get('error_type')}: {data.get('error_message')}",
                "ERROR"
            )

        if event_type == "ImageFetchCompletedEvent":
            suffix = " (已超过请求截止时间)" if data.get('deadline_exceeded') else ""
            return (
                f"■ 图片获取完成: {data.get('image_count', 0)} 张, "
                f"总耗时 {data.get('total_loading_time_ms', 0)}ms{suffix}",
                "WARNING" if data.get('deadline_exceeded') else "INFO"
            )

        if event_type == "ImageFetchCancelledEvent":
            return (
                f"⏹ 请求已取消: 已收集 {data.get('image_count', 0)} 张, "
                f"中断策略: {data.get('interrupted_strategy') or '无'}",
                "WARNING"
            )

        return f"{event_type}: {data}", "INFO"

    def _format_timestamp(self, timestamp: datetime) -> str:
        if not timestamp:
            return datetime.now().isoformat()
        return timestamp.isoformat()
