"""
图片 URL 校验（纯函数，无副作用）

规则:
- URL 不能为空
- 必须是带协议与主机的绝对 URL
- 路径（忽略查询串）必须以允许的图片扩展名结尾，大小写不敏感
"""

from typing import Tuple
from urllib.parse import urlparse

from ..exceptions import InvalidUrlError

ALLOWED_FORMATS: Tuple[str, ...] = ("jpg", "jpeg", "png", "gif", "webp")


class ImageUrlValidator:

    def is_valid_image_format(self, url: str) -> bool:
        if url is None or not url.strip():
            return False

        try:
            path = urlparse(url.strip()).path.lower()
        except ValueError:
            return False

        return any(path.endswith("." + fmt) for fmt in ALLOWED_FORMATS)

    def is_absolute_url(self, url: str) -> bool:
        try:
            parsed = urlparse(url.strip())
        except ValueError:
            return False
        return bool(parsed.scheme) and parsed.scheme.isalpha() and bool(parsed.netloc)

    def validate_image_url(self, url: str) -> None:
        """
        校验图片 URL，失败时抛出 InvalidUrlError
        """
        if url is None or not url.strip():
            raise InvalidUrlError("Image URL cannot be null or empty")

        if not self.is_absolute_url(url):
            raise InvalidUrlError(f"Invalid URL format: {url}")

        if not self.is_valid_image_format(url):
            raise InvalidUrlError(
                f"Unsupported image format. Allowed formats: {list(ALLOWED_FORMATS)}"
            )
