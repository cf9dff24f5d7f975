from dataclasses import dataclass

from .image_result import UNKNOWN_RESOLUTION


@dataclass(frozen=True)
class ImageMetadata:
    """图片元信息：分辨率 "宽x高"（解码失败时为 unknown）与字节数"""
    resolution: str = UNKNOWN_RESOLUTION
    size_bytes: int = 0
