from dataclasses import dataclass
from typing import Optional

from .sales_channel import SalesChannel


@dataclass(frozen=True)
class FetchRequest:
    """
    图片获取请求值对象（不可变）

    只有 item_name 是必填项；其余来源字段相互独立，可以任意组合出现，也可以全部缺省。
    """
    item_name: str
    option_name: Optional[str] = None
    image_url: Optional[str] = None
    sales_url: Optional[str] = None
    sales_channel: Optional[SalesChannel] = None

    def __post_init__(self):
        if self.item_name is None or not self.item_name.strip():
            raise ValueError("itemName is required")

    @staticmethod
    def _has_text(value: Optional[str]) -> bool:
        return value is not None and bool(value.strip())

    @property
    def has_image_url(self) -> bool:
        return self._has_text(self.image_url)

    @property
    def has_sales_url(self) -> bool:
        return self._has_text(self.sales_url)

    @property
    def has_option_name(self) -> bool:
        return self._has_text(self.option_name)
