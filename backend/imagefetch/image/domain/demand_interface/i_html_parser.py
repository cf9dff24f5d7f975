from typing import List, Optional, Sequence
from abc import ABC, abstractmethod


class IHtmlParser(ABC):
    """只负责HTML结构解析，不包含业务判断"""

    @abstractmethod
    def select_first_attribute(self, html: str, selector: str, attribute: str) -> Optional[str]:
        """返回第一个匹配选择器的元素的属性值（去除首尾空白），不存在或为空时返回 None"""
        pass

    @abstractmethod
    def select_attribute_values(self, html: str, selector: str, attributes: Sequence[str]) -> List[str]:
        """
        按文档顺序遍历匹配选择器的元素，
        对每个元素按 attributes 顺序取第一个非空属性值，跳过没有任何非空值的元素
        """
        pass
