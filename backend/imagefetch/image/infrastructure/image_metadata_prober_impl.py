"""
图片元信息探测实现

使用 Pillow 解码图片头部以获取分辨率；解码失败时降级为 unknown，永不抛出异常。
"""

import io
import logging

from PIL import Image

from ..domain.demand_interface.i_image_metadata_prober import IImageMetadataProber
from ..domain.value_objects.image_metadata import ImageMetadata
from ..domain.value_objects.image_result import UNKNOWN_RESOLUTION

logger = logging.getLogger(__name__)


class ImageMetadataProberImpl(IImageMetadataProber):

    def probe(self, content: bytes) -> ImageMetadata:
        size_bytes = len(content) if content else 0
        return ImageMetadata(resolution=self.get_image_resolution(content), size_bytes=size_bytes)

    def get_image_resolution(self, content: bytes) -> str:
        if not content:
            return UNKNOWN_RESOLUTION

        try:
            with Image.open(io.BytesIO(content)) as image:
                width, height = image.size
            return f"{width}x{height}"
        except Exception as e:
            logger.warning(f"Failed to read image resolution: {type(e).__name__} - {e}")
            return UNKNOWN_RESOLUTION
