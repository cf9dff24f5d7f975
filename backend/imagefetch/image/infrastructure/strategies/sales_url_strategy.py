"""
商品页策略（优先级 2）

请求携带 sales_url 时适用：抓取商品页 HTML → 挑选代表性图片 → 逐张尽力获取元信息。

错误分类:
- sales_url 不是 http/https：InvalidUrlError
- 商品页返回 4xx：InvalidUrlError；其他 HTTP 错误状态：ImageNotAccessibleError
- 超时、连接失败、空页面、解析失败：降级为空结果
- 单张图片元信息获取失败：仍返回该图片，分辨率为 unknown、大小为 0
"""

import logging
import time
from threading import Event
from typing import Dict, List, Optional

from ...domain.strategy.i_image_fetch_strategy import IImageFetchStrategy
from ...domain.demand_interface.i_http_client import IHttpClient
from ...domain.demand_interface.i_binary_http_client import IBinaryHttpClient
from ...domain.demand_interface.i_image_metadata_prober import IImageMetadataProber
from ...domain.domain_service.image_extraction_service import ImageExtractionService
from ...domain.exceptions import ImageFetchError, InvalidUrlError, ImageNotAccessibleError
from ...domain.value_objects.fetch_config import DEFAULT_USER_AGENT
from ...domain.value_objects.fetch_request import FetchRequest
from ...domain.value_objects.image_result import (
    ImageResult,
    ImageSource,
    UNKNOWN_RESOLUTION,
    resolve_image_url,
)

logger = logging.getLogger(__name__)


class SalesUrlImageFetchStrategy(IImageFetchStrategy):

    PRIORITY = 2

    def __init__(
        self,
        http_client: IHttpClient,
        binary_client: IBinaryHttpClient,
        extraction_service: ImageExtractionService,
        metadata_prober: IImageMetadataProber,
        max_results: int = 3,
        timeout_ms: int = 200,
        image_timeout_ms: int = 50,
        user_agent: str = DEFAULT_USER_AGENT
    ):
        self._http = http_client
        self._binary_http = binary_client
        self._extraction = extraction_service
        self._prober = metadata_prober
        self._max_results = max_results
        self._timeout_ms = timeout_ms
        self._image_timeout_ms = image_timeout_ms
        self._headers: Dict[str, str] = {'User-Agent': user_agent}

    def can_handle(self, request: FetchRequest) -> bool:
        return request.has_sales_url

    def priority(self) -> int:
        return self.PRIORITY

    def fetch_images(self, request: FetchRequest, cancel_event: Optional[Event] = None) -> List[ImageResult]:
        if not self.can_handle(request):
            return []

        sales_url = request.sales_url.strip()
        logger.debug(f"Fetching images from sales URL: {sales_url}")

        self._validate_sales_url(sales_url)

        try:
            start = time.monotonic()
            response = self._http.get(sales_url, headers=self._headers, timeout=self._timeout_ms / 1000)

            if not response.is_success:
                self._raise_for_status(sales_url, response.status_code, response.is_client_error)
                logger.warning(f"Sales URL fetch failed: {sales_url} - {response.error_message}")
                return []

            html = response.content
            if not html or not html.strip():
                logger.warning(f"Empty HTML content from sales URL: {sales_url}")
                return []

            image_urls = self._extraction.select_representative_images(html, self._max_results)
            if not image_urls:
                logger.warning(f"No images found in sales URL: {sales_url}")
                return []

            results = []
            for image_url in image_urls:
                if cancel_event is not None and cancel_event.is_set():
                    logger.info(f"Sales URL strategy cancelled after {len(results)} images")
                    break
                full_url = resolve_image_url(image_url, sales_url)
                results.append(self._fetch_image_metadata(full_url, start))

            total_time = int((time.monotonic() - start) * 1000)
            logger.info(f"Successfully fetched {len(results)} images from sales URL in {total_time}ms")
            return results

        except ImageFetchError:
            raise
        except Exception:
            logger.exception(f"Error fetching images from sales URL: {sales_url}")
            return []

    def _validate_sales_url(self, url: str) -> None:
        if not url:
            raise InvalidUrlError("Sales URL cannot be empty")

        if not url.lower().startswith(("http://", "https://")):
            raise InvalidUrlError("Sales URL must start with http:// or https://")

    def _raise_for_status(self, sales_url: str, status_code: int, is_client_error: bool) -> None:
        """服务器返回了错误状态码时按状态分类抛出；传输层失败（status_code 为 0）不抛出"""
        if not status_code:
            return

        logger.error(f"HTTP error fetching sales URL: {sales_url} - Status: {status_code}")
        if is_client_error:
            raise InvalidUrlError(f"Sales URL not accessible: {sales_url}")
        raise ImageNotAccessibleError(f"Failed to access sales URL: {sales_url}")

    def _fetch_image_metadata(self, image_url: str, overall_start: float) -> ImageResult:
        """
        尽力获取单张图片的元信息

        成功时 loading_time_ms 按单张图片计时；
        失败时返回最小结果，loading_time_ms 按整个策略开始计时
        """
        try:
            image_start = time.monotonic()
            response = self._binary_http.get_binary(image_url, timeout=self._image_timeout_ms / 1000)
            loading_time = int((time.monotonic() - image_start) * 1000)

            if response.is_success and response.content:
                metadata = self._prober.probe(response.content)
                return ImageResult(
                    url=image_url,
                    source=ImageSource.SALES_URL,
                    loading_time_ms=loading_time,
                    resolution=metadata.resolution,
                    file_size_bytes=metadata.size_bytes,
                )
            logger.debug(f"Could not fetch metadata for image: {image_url} - {response.error_message}")

        except Exception as e:
            logger.debug(f"Could not fetch metadata for image: {image_url} - {e}")

        return ImageResult(
            url=image_url,
            source=ImageSource.SALES_URL,
            loading_time_ms=int((time.monotonic() - overall_start) * 1000),
            resolution=UNKNOWN_RESOLUTION,
            file_size_bytes=0,
        )
