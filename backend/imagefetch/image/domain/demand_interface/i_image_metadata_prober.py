from abc import ABC, abstractmethod
from ..value_objects.image_metadata import ImageMetadata


class IImageMetadataProber(ABC):
    """图片元信息探测接口：解码字节流获取分辨率，永不抛出异常"""

    @abstractmethod
    def probe(self, content: bytes) -> ImageMetadata:
        pass
