"""
图片获取异常类模块

定义图片获取流程中需要向调用方传播的异常类型。
其余异常（解析失败、解码失败等）在策略边界被吸收，不在此定义。
"""


class ImageFetchError(Exception):
    """
    图片获取异常基类

    Attributes:
        message: 错误描述信息
    """

    def __init__(self, message: str = "Failed to fetch images"):
        self.message = message
        super().__init__(self.message)


class InvalidUrlError(ImageFetchError):
    """
    URL 无效异常

    URL 为空、格式错误、图片格式不被支持，或商品页返回 4xx 时抛出。
    属于调用方输入错误，始终传播到最上层。
    """

    def __init__(self, message: str = "Invalid URL"):
        super().__init__(message)


class FetchTimeoutError(ImageFetchError):
    """
    请求超时异常

    仅由直接 URL 策略传播；其余策略超时时降级为空结果。
    """

    def __init__(self, message: str = "Request timeout exceeded"):
        super().__init__(message)


class ImageNotAccessibleError(ImageFetchError):
    """
    资源不可访问异常

    商品页返回非 4xx 的 HTTP 错误状态时抛出。
    """

    def __init__(self, message: str = "Resource not accessible"):
        super().__init__(message)
