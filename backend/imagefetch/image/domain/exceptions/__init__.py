# Image fetch exceptions module
from .fetch_exceptions import (
    ImageFetchError,
    InvalidUrlError,
    FetchTimeoutError,
    ImageNotAccessibleError,
)

__all__ = ['ImageFetchError', 'InvalidUrlError', 'FetchTimeoutError', 'ImageNotAccessibleError']
