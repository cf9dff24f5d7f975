from dataclasses import dataclass
from typing import Optional, Dict

@dataclass(frozen=True)
class HttpResponse:
    url: str
    status_code: int
    headers: Dict[str, str]
    content: str
    content_type: str
    is_success: bool
    error_message: Optional[str] = None
    is_timeout: bool = False
    elapsed_ms: int = 0

    @property
    def is_client_error(self) -> bool:
        """服务器返回 4xx 状态码"""
        return 400 <= self.status_code < 500
