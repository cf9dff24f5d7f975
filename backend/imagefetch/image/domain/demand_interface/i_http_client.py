from abc import ABC, abstractmethod
from typing import Optional, Dict
from ..value_objects.http_response import HttpResponse

class IHttpClient(ABC):
    @abstractmethod
    def get(self, url: str, headers: Optional[Dict[str, str]] = None, timeout: Optional[float] = None) -> HttpResponse:
        """
        执行HTTP GET请求，返回文本内容
        返回: HttpResponse(status_code, headers, content, content_type, is_timeout)
        处理: 网络异常、超时不抛出，统一转换为失败的 HttpResponse
        """
        pass
