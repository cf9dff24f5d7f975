"""
渠道搜索策略（优先级 3）

请求携带 sales_channel 且 item_name 非空时适用：
限流 → 构造渠道搜索 URL → 以浏览器 UA 抓取搜索结果页 → 按渠道选择器提取缩略图。
搜索结果缩略图不做元信息探测；任何失败都降级为空结果，从不抛出。
"""

import logging
import time
from threading import Event
from typing import Dict, List, Optional

from ...domain.strategy.i_image_fetch_strategy import IImageFetchStrategy
from ...domain.demand_interface.i_http_client import IHttpClient
from ...domain.domain_service.image_extraction_service import ImageExtractionService
from ...domain.value_objects.fetch_config import DEFAULT_USER_AGENT
from ...domain.value_objects.fetch_request import FetchRequest
from ...domain.value_objects.image_result import ImageResult, ImageSource, resolve_image_url
from ...domain.value_objects.sales_channel import get_channel_search_spec
from ..rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


def build_search_query(request: FetchRequest) -> str:
    """商品名 + 选项名（存在时），以单个空格连接"""
    query = request.item_name.strip()
    if request.has_option_name:
        query = f"{query} {request.option_name.strip()}"
    return query.strip()


class ChannelSearchImageFetchStrategy(IImageFetchStrategy):

    PRIORITY = 3

    def __init__(
        self,
        http_client: IHttpClient,
        extraction_service: ImageExtractionService,
        rate_limiter: Optional[RateLimiter] = None,
        max_results: int = 3,
        timeout_ms: int = 300,
        user_agent: str = DEFAULT_USER_AGENT
    ):
        self._http = http_client
        self._extraction = extraction_service
        # 每个策略实例独享一个限流器
        self._rate_limiter = rate_limiter or RateLimiter(min_interval_ms=200)
        self._max_results = max_results
        self._timeout_ms = timeout_ms
        self._headers: Dict[str, str] = {'User-Agent': user_agent}

    def can_handle(self, request: FetchRequest) -> bool:
        return (
            request.sales_channel is not None
            and request.item_name is not None
            and bool(request.item_name.strip())
        )

    def priority(self) -> int:
        return self.PRIORITY

    def fetch_images(self, request: FetchRequest, cancel_event: Optional[Event] = None) -> List[ImageResult]:
        if not self.can_handle(request):
            return []

        channel = request.sales_channel
        logger.debug(f"Fetching images from channel search: {channel.value}")

        try:
            self._rate_limiter.throttle(cancel_event)
            if cancel_event is not None and cancel_event.is_set():
                return []

            query = build_search_query(request)
            search_url = get_channel_search_spec(channel).build_search_url(query)
            logger.debug(f"Searching images for query: {query} on channel: {channel.value}")

            start = time.monotonic()
            response = self._http.get(search_url, headers=self._headers, timeout=self._timeout_ms / 1000)

            if not response.is_success:
                logger.warning(f"Channel search failed: {channel.value} - {response.error_message}")
                return []

            html = response.content
            if not html or not html.strip():
                logger.warning(f"Empty search result page from channel: {channel.value}")
                return []

            image_urls = self._extraction.extract_channel_images(channel, html)[:self._max_results]
            if not image_urls:
                logger.warning(f"No images found for query: {query} on channel: {channel.value}")
                return []

            results = []
            for image_url in image_urls:
                results.append(
                    ImageResult(
                        url=resolve_image_url(image_url, search_url),
                        source=ImageSource.CHANNEL_SEARCH,
                        loading_time_ms=int((time.monotonic() - start) * 1000),
                    )
                )

            total_time = int((time.monotonic() - start) * 1000)
            logger.info(
                f"Successfully fetched {len(results)} images from channel {channel.value} in {total_time}ms"
            )
            return results

        except Exception:
            logger.exception(f"Error fetching images from channel search: {channel.value}")
            return []
