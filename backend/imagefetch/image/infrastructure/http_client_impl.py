import logging
import time
import requests
from requests.adapters import HTTPAdapter
from urllib3.exceptions import ReadTimeoutError
from urllib3.util.retry import Retry
from typing import NamedTuple, Optional, Dict
from ..domain.demand_interface.i_http_client import IHttpClient
from ..domain.value_objects.http_response import HttpResponse
from ..domain.value_objects.fetch_config import DEFAULT_USER_AGENT

# 获取 logger
error_logger = logging.getLogger('infrastructure.error')
perf_logger = logging.getLogger('infrastructure.perf')


def build_session(
    user_agent: str,
    accept: str,
    max_retries: int = 0,
    retry_backoff: float = 0.3
) -> requests.Session:
    """
    创建带默认请求头与重试策略的会话

    参数:
        user_agent: User-Agent标识
        accept: Accept请求头
        max_retries: 最大重试次数（连接失败与 5xx）
        retry_backoff: 重试间隔倍数
    """
    session = requests.Session()
    session.headers.update({
        'User-Agent': user_agent,
        'Accept': accept,
        'Accept-Language': 'ko-KR,ko;q=0.9,en-US;q=0.8,en;q=0.7',
        'Accept-Encoding': 'gzip, deflate',
        'Connection': 'keep-alive'
    })

    retry_strategy = Retry(
        total=max_retries,
        backoff_factor=retry_backoff,
        status_forcelist=[429, 500, 502, 503, 504],
        allowed_methods=["HEAD", "GET", "OPTIONS"],
        raise_on_status=False,
        connect=max_retries,
        read=False,           # 读取超时不重试，直接作为超时上报
        redirect=5,
    )

    adapter = HTTPAdapter(max_retries=retry_strategy)
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    return session


class HttpClientImpl(IHttpClient):
    """基于requests库的HTTP客户端实现（文本内容）"""

    def __init__(
        self,
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = 30,
        max_retries: int = 0,
        retry_backoff: float = 0.3
    ):
        """
        初始化HTTP客户端

        参数:
            user_agent: User-Agent标识
            timeout: 默认请求超时时间(秒)，可在每次请求时覆盖
            max_retries: 最大重试次数
            retry_backoff: 重试间隔倍数
        """
        self._timeout = timeout
        self._max_retries = max_retries
        self._session = build_session(
            user_agent,
            'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
            max_retries,
            retry_backoff
        )

    def get(self, url: str, headers: Optional[Dict[str, str]] = None, timeout: Optional[float] = None) -> HttpResponse:
        """
        执行HTTP GET请求

        参数:
            url: 目标URL
            headers: 自定义请求头(可选)，与会话头合并
            timeout: 本次请求超时(秒)，默认使用构造时的超时

        返回:
            HttpResponse对象，包含响应信息或错误信息
        """
        request_timeout = timeout if timeout is not None else self._timeout
        start = time.monotonic()
        try:
            response = self._session.get(
                url,
                headers=headers,
                timeout=request_timeout,
                allow_redirects=True
            )

            # 如果 header 里没写编码，requests 默认是 ISO-8859-1，对中日韩站点几乎一定是乱码
            if response.encoding == 'ISO-8859-1':
                response.encoding = response.apparent_encoding

            if not response.encoding:
                response.encoding = 'utf-8'

            content = response.text
            elapsed_ms = elapsed_ms_since(start)

            perf_logger.info(
                f"GET {url} - {response.status_code} - {len(content)} chars - {elapsed_ms}ms",
                extra={
                    'url': url,
                    'method': 'GET',
                    'status_code': response.status_code,
                    'elapsed_ms': elapsed_ms,
                    'component': 'HttpClientImpl'
                }
            )

            return HttpResponse(
                url=response.url,
                status_code=response.status_code,
                headers=dict(response.headers),
                content=content,
                content_type=response.headers.get('Content-Type', ''),
                is_success=response.ok,
                error_message=None if response.ok else f"HTTP {response.status_code}",
                elapsed_ms=elapsed_ms
            )

        except Exception as e:
            failure = classify_request_error(e, request_timeout)
            log_request_failure(url, failure, 'HttpClientImpl')
            return HttpResponse(
                url=url,
                status_code=0,
                headers={},
                content='',
                content_type='',
                is_success=False,
                error_message=failure.message,
                is_timeout=failure.is_timeout,
                elapsed_ms=elapsed_ms_since(start)
            )

    def close(self):
        """关闭会话，释放连接"""
        self._session.close()

    def __enter__(self):
        """支持上下文管理器"""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """退出时自动关闭会话"""
        self.close()


def elapsed_ms_since(start: float) -> int:
    return max(0, int((time.monotonic() - start) * 1000))


class RequestFailure(NamedTuple):
    """传输层失败的分类结果"""
    error_type: str
    detail: str
    is_timeout: bool = False
    unexpected: bool = False

    @property
    def message(self) -> str:
        return f"{self.error_type}: {self.detail}"


def classify_request_error(error: Exception, timeout: Optional[float]) -> RequestFailure:
    """
    将 requests 抛出的异常归类

    读取超时与连接超时都视为超时（Retry 配置了 read=False，读取超时不会被重试吞掉）
    读取响应体时的超时（urllib3 ReadTimeoutError，或被 requests 包装成的 ConnectionError）同样视为超时
    """
    if isinstance(error, requests.exceptions.Timeout):
        return RequestFailure("请求超时", f"请求超过{timeout}秒未响应", is_timeout=True)
    if _is_read_timeout(error):
        return RequestFailure("请求超时", f"读取响应超过{timeout}秒未完成", is_timeout=True)
    if isinstance(error, requests.exceptions.ConnectionError):
        return RequestFailure("连接失败", f"无法连接到服务器: {error}")
    if isinstance(error, requests.exceptions.TooManyRedirects):
        return RequestFailure("重定向过多", "重定向次数超过限制")
    if isinstance(error, requests.exceptions.RequestException):
        return RequestFailure("请求异常", f"请求失败: {error}")
    return RequestFailure("未知错误", f"未预期的错误: {type(error).__name__} - {error}", unexpected=True)


def _is_read_timeout(error: Exception) -> bool:
    causes = [error, error.__cause__, error.__context__] + list(error.args[:1])
    return any(isinstance(cause, ReadTimeoutError) for cause in causes)


def log_request_failure(url: str, failure: RequestFailure, component: str) -> None:
    extra = {'url': url, 'error_type': failure.error_type, 'component': component}
    if failure.unexpected:
        error_logger.error(f"HTTP Unhandled Exception: {url} - {failure.detail}", exc_info=True, extra=extra)
    else:
        error_logger.warning(f"HTTP {failure.error_type}: {url} - {failure.detail}", extra=extra)
