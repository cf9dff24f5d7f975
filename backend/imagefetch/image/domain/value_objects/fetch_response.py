from dataclasses import dataclass, field
from typing import List

from .image_result import ImageResult


@dataclass(frozen=True)
class FetchResponse:
    total_loading_time_ms: int
    images: List[ImageResult] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "totalLoadingTimeMs": self.total_loading_time_ms,
            "images": [image.to_dict() for image in self.images],
        }
