"""
直接 URL 策略（优先级 1）

请求携带 image_url 时适用：校验 URL → 下载图片字节 → 探测分辨率。
URL 无效属于调用方输入错误，直接抛出 InvalidUrlError；
下载超时抛出 FetchTimeoutError；其余下载失败降级为空结果。
"""

import logging
import time
from threading import Event
from typing import List, Optional

from ...domain.strategy.i_image_fetch_strategy import IImageFetchStrategy
from ...domain.demand_interface.i_binary_http_client import IBinaryHttpClient
from ...domain.demand_interface.i_image_metadata_prober import IImageMetadataProber
from ...domain.domain_service.image_url_validator import ImageUrlValidator
from ...domain.exceptions import ImageFetchError, FetchTimeoutError
from ...domain.value_objects.fetch_request import FetchRequest
from ...domain.value_objects.image_result import ImageResult, ImageSource

logger = logging.getLogger(__name__)


class DirectUrlImageFetchStrategy(IImageFetchStrategy):

    PRIORITY = 1

    def __init__(
        self,
        binary_client: IBinaryHttpClient,
        validator: ImageUrlValidator,
        metadata_prober: IImageMetadataProber,
        timeout_ms: int = 500
    ):
        self._http = binary_client
        self._validator = validator
        self._prober = metadata_prober
        self._timeout_ms = timeout_ms

    def can_handle(self, request: FetchRequest) -> bool:
        return request.has_image_url

    def priority(self) -> int:
        return self.PRIORITY

    def fetch_images(self, request: FetchRequest, cancel_event: Optional[Event] = None) -> List[ImageResult]:
        if not self.can_handle(request):
            return []

        image_url = request.image_url.strip()
        logger.debug(f"Fetching image from direct URL: {image_url}")

        # 输入错误直接抛出，不降级
        self._validator.validate_image_url(image_url)

        try:
            start = time.monotonic()
            response = self._http.get_binary(image_url, timeout=self._timeout_ms / 1000)
            loading_time = int((time.monotonic() - start) * 1000)

            if response.is_timeout:
                logger.error(f"Timeout fetching image from direct URL: {image_url}")
                raise FetchTimeoutError(f"Timeout fetching image from direct URL: {image_url}")

            if not response.is_success:
                logger.error(f"Error fetching image from direct URL: {image_url} - {response.error_message}")
                return []

            if not response.content:
                logger.warning(f"Empty image data from URL: {image_url}")
                return []

            metadata = self._prober.probe(response.content)

            logger.info(
                f"Successfully fetched direct URL image in {loading_time}ms, size: {metadata.size_bytes} bytes"
            )
            return [
                ImageResult(
                    url=image_url,
                    source=ImageSource.DIRECT,
                    loading_time_ms=loading_time,
                    resolution=metadata.resolution,
                    file_size_bytes=metadata.size_bytes,
                )
            ]

        except ImageFetchError:
            raise
        except Exception:
            logger.exception(f"Error fetching image from direct URL: {image_url}")
            return []
