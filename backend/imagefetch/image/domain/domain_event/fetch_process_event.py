from dataclasses import dataclass
from typing import Optional
from imagefetch.shared.domain.events import DomainEvent

@dataclass
class ImageFetchStartedEvent(DomainEvent):
    """图片获取请求开始"""
    item_name: str
    strategies: str  # 适用策略名，按优先级顺序以逗号分隔

@dataclass
class StrategyCompletedEvent(DomainEvent):
    """单个策略执行完成"""
    strategy: str
    priority: int
    image_count: int
    elapsed_ms: int

@dataclass
class StrategyFailedEvent(DomainEvent):
    """单个策略失败（已被隔离，不影响其他策略）"""
    strategy: str
    error_type: str
    error_message: str

@dataclass
class ImageFetchCompletedEvent(DomainEvent):
    """图片获取请求完成"""
    image_count: int
    total_loading_time_ms: int
    deadline_exceeded: bool = False

@dataclass
class ImageFetchCancelledEvent(DomainEvent):
    """调用方取消了请求"""
    image_count: int
    total_loading_time_ms: int
    interrupted_strategy: Optional[str] = None
