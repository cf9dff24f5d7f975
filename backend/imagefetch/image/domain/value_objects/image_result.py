from dataclasses import dataclass
from enum import Enum
from urllib.parse import urljoin


class ImageSource(Enum):
    """图片来源标记，仅用于展示，不影响排序"""
    DIRECT = "DIRECT"
    SALES_URL = "SALES_URL"
    CHANNEL_SEARCH = "CHANNEL_SEARCH"


UNKNOWN_RESOLUTION = "unknown"


@dataclass(frozen=True)
class ImageResult:
    url: str
    source: ImageSource
    loading_time_ms: int
    resolution: str = UNKNOWN_RESOLUTION
    file_size_bytes: int = 0

    def __post_init__(self):
        if self.loading_time_ms < 0:
            raise ValueError("loading_time_ms must be non-negative")

    def to_dict(self) -> dict:
        return {
            "url": self.url,
            "source": self.source.value,
            "loadingTimeMs": self.loading_time_ms,
            "resolution": self.resolution,
            "fileSizeBytes": self.file_size_bytes,
        }


def normalize_image_url(url: str) -> str:
    """协议相对 URL（//cdn...）统一改写为 https"""
    if url.startswith("//"):
        return "https:" + url
    return url


def resolve_image_url(url: str, base_url: str) -> str:
    """
    将提取到的图片地址转换为绝对 URL

    协议相对地址改写为 https；根相对或相对路径基于页面地址补全
    """
    normalized = normalize_image_url(url.strip())
    if normalized.lower().startswith(("http://", "https://")):
        return normalized
    return urljoin(base_url, normalized)
