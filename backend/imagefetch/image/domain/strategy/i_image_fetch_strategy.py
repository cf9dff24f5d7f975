"""
图片获取策略接口

三种策略（直接URL / 商品页 / 渠道搜索）实现同一能力契约，
由 ImageCollectionService 按 priority 升序调度。
"""

from abc import ABC, abstractmethod
from threading import Event
from typing import List, Optional

from ..value_objects.fetch_request import FetchRequest
from ..value_objects.image_result import ImageResult


class IImageFetchStrategy(ABC):

    @property
    def name(self) -> str:
        return self.__class__.__name__

    @abstractmethod
    def can_handle(self, request: FetchRequest) -> bool:
        """判断策略是否适用于当前请求"""
        pass

    @abstractmethod
    def fetch_images(self, request: FetchRequest, cancel_event: Optional[Event] = None) -> List[ImageResult]:
        """
        获取图片
        可恢复的情况返回空列表；只有分类明确的 ImageFetchError 会被抛出
        cancel_event 置位表示请求已被取消，策略应尽快结束
        """
        pass

    @abstractmethod
    def priority(self) -> int:
        """优先级，数值越小越先执行"""
        pass
