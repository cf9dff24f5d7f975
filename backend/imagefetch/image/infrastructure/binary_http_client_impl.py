"""
二进制 HTTP 客户端实现

使用 requests 库下载图片等二进制内容。
"""

import time
import logging
from typing import Optional, Dict, List
from ..domain.demand_interface.i_binary_http_client import IBinaryHttpClient
from ..domain.value_objects.binary_response import BinaryResponse
from ..domain.value_objects.fetch_config import DEFAULT_USER_AGENT
from .http_client_impl import (
    RequestFailure,
    build_session,
    classify_request_error,
    elapsed_ms_since,
    log_request_failure,
)

# 获取 logger
perf_logger = logging.getLogger('infrastructure.perf')

CHUNK_SIZE = 64 * 1024


class BinaryHttpClientImpl(IBinaryHttpClient):
    """二进制 HTTP 客户端实现（使用 requests 库）"""

    def __init__(
        self,
        user_agent: Optional[str] = None,
        max_retries: int = 0,
        retry_backoff: float = 0.3
    ):
        """
        初始化二进制 HTTP 客户端

        参数:
            user_agent: User-Agent 标识
            max_retries: 最大重试次数
            retry_backoff: 重试间隔倍数
        """
        self._user_agent = user_agent or DEFAULT_USER_AGENT
        self._session = build_session(
            self._user_agent,
            'image/avif,image/webp,image/apng,image/*,*/*;q=0.8',
            max_retries,
            retry_backoff
        )

    def get_binary(self, url: str, timeout: float = 30, headers: Optional[Dict[str, str]] = None) -> BinaryResponse:
        """
        下载二进制内容

        timeout 同时限制单次 socket 读取和整个下载过程的总耗时：
        响应体持续缓慢到达时，超过 timeout 即中止并返回 is_timeout=True 的结果。

        参数:
            url: 目标 URL
            timeout: 超时时间（秒）
            headers: 自定义请求头（可选）

        返回:
            BinaryResponse 值对象
        """
        start = time.monotonic()
        try:
            with self._session.get(
                url,
                headers=headers,
                timeout=timeout,
                allow_redirects=True,
                stream=True
            ) as response:
                content = _read_body(response, start + timeout)

            if content is None:
                failure = RequestFailure("请求超时", f"下载超过{timeout}秒未完成", is_timeout=True)
                log_request_failure(url, failure, 'BinaryHttpClientImpl')
                return _failure_response(url, failure, start)

            elapsed_ms = elapsed_ms_since(start)

            perf_logger.info(
                f"Binary GET {url} - {response.status_code} - {len(content)} bytes - {elapsed_ms}ms",
                extra={
                    'url': url,
                    'method': 'GET',
                    'status_code': response.status_code,
                    'content_length': len(content),
                    'elapsed_ms': elapsed_ms,
                    'component': 'BinaryHttpClientImpl'
                }
            )

            return BinaryResponse(
                url=url,
                status_code=response.status_code,
                headers=dict(response.headers),
                content=content,
                content_type=response.headers.get('Content-Type', ''),
                is_success=response.ok,
                error_message=None if response.ok else f"HTTP {response.status_code}",
                elapsed_ms=elapsed_ms
            )

        except Exception as e:
            failure = classify_request_error(e, timeout)
            log_request_failure(url, failure, 'BinaryHttpClientImpl')
            return _failure_response(url, failure, start)

    def close(self):
        """关闭会话，释放连接"""
        self._session.close()

    def __enter__(self):
        """支持上下文管理器"""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """退出时自动关闭会话"""
        self.close()


def _read_body(response, deadline: float) -> Optional[bytes]:
    """
    逐块读取响应体，总耗时超过 deadline（monotonic 时间）时返回 None

    read1 每次最多做一次 socket 读取，服务器逐字节慢速发送时也能及时检查截止时间。
    """
    chunks: List[bytes] = []
    while True:
        chunk = response.raw.read1(CHUNK_SIZE, decode_content=True)
        if not chunk:
            return b"".join(chunks)
        chunks.append(chunk)
        if time.monotonic() > deadline:
            return None


def _failure_response(url: str, failure: RequestFailure, start: float) -> BinaryResponse:
    return BinaryResponse(
        url=url,
        status_code=0,
        headers={},
        content=b"",
        content_type="",
        is_success=False,
        error_message=failure.message,
        is_timeout=failure.is_timeout,
        elapsed_ms=elapsed_ms_since(start)
    )
