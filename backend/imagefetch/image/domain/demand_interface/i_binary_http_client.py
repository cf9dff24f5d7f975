from abc import ABC, abstractmethod
from typing import Optional, Dict
from ..value_objects.binary_response import BinaryResponse


class IBinaryHttpClient(ABC):
    """二进制 HTTP 客户端接口"""

    @abstractmethod
    def get_binary(self, url: str, timeout: float = 30, headers: Optional[Dict[str, str]] = None) -> BinaryResponse:
        """
        下载二进制内容

        参数:
            url: 目标 URL
            timeout: 超时时间（秒）
            headers: 自定义请求头（可选）

        返回:
            BinaryResponse 值对象
        """
        pass
