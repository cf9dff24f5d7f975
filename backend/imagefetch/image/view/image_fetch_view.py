"""
模块职责
- 提供图片获取的 RESTful API（健康检查 / 获取图片）。
- 作为组合根（Composition Root）组装依赖：HTTP 客户端、HTML 解析器、元信息探测器、三个策略、编排服务。
- 使用 Flask Blueprint 将接口统一挂载在 `/api/v1/images` 前缀下。
- 将领域异常映射为 HTTP 状态码与统一的错误 JSON。

此模块属于接口层，只做输入输出转换与服务编排，不承载业务规则。
"""

import logging
from typing import Optional

from flask import Blueprint, jsonify, request

from ..services.image_collection_service import ImageCollectionService  # 应用层：策略编排
from ..infrastructure.http_client_impl import HttpClientImpl  # 基础设施：requests 封装的文本 HTTP 客户端
from ..infrastructure.binary_http_client_impl import BinaryHttpClientImpl  # 基础设施：二进制下载
from ..infrastructure.html_parser_impl import HtmlParserImpl  # 基础设施：BeautifulSoup 封装的 HTML 解析器
from ..infrastructure.image_metadata_prober_impl import ImageMetadataProberImpl  # 基础设施：Pillow 解码
from ..infrastructure.rate_limiter import RateLimiter
from ..infrastructure.strategies.direct_url_strategy import DirectUrlImageFetchStrategy
from ..infrastructure.strategies.sales_url_strategy import SalesUrlImageFetchStrategy
from ..infrastructure.strategies.channel_search_strategy import ChannelSearchImageFetchStrategy
from ..domain.domain_service.image_url_validator import ImageUrlValidator
from ..domain.domain_service.image_extraction_service import ImageExtractionService
from ..domain.exceptions import (
    ImageFetchError,
    InvalidUrlError,
    FetchTimeoutError,
    ImageNotAccessibleError,
)
from ..domain.value_objects.fetch_config import ImageFetchConfig
from ..domain.value_objects.fetch_request import FetchRequest
from ..domain.value_objects.sales_channel import SalesChannel
from imagefetch.shared.event_bus import EventBus

logger = logging.getLogger(__name__)

bp = Blueprint("images", __name__, url_prefix="/api/v1/images")


class RequestValidationError(ValueError):
    """请求体校验失败"""
    pass


def build_collection_service(
    config: Optional[ImageFetchConfig] = None,
    event_bus: Optional[EventBus] = None
) -> ImageCollectionService:
    """
    组装编排服务及其全部依赖

    参数:
        config: 图片获取配置，缺省时从环境变量加载
        event_bus: 事件总线 (可选)
    """
    config = config or ImageFetchConfig.from_env()

    http = HttpClientImpl(user_agent=config.user_agent, max_retries=config.http_max_retries)
    binary_http = BinaryHttpClientImpl(user_agent=config.user_agent, max_retries=config.http_max_retries)
    parser = HtmlParserImpl()
    extraction = ImageExtractionService(parser)
    prober = ImageMetadataProberImpl()

    strategies = [
        DirectUrlImageFetchStrategy(
            binary_http,
            ImageUrlValidator(),
            prober,
            timeout_ms=config.direct_url_timeout_ms,
        ),
        SalesUrlImageFetchStrategy(
            http,
            binary_http,
            extraction,
            prober,
            max_results=config.max_results,
            timeout_ms=config.sales_url_timeout_ms,
            image_timeout_ms=config.sales_url_image_timeout_ms,
            user_agent=config.user_agent,
        ),
        ChannelSearchImageFetchStrategy(
            http,
            extraction,
            RateLimiter(min_interval_ms=config.channel_search_min_interval_ms),
            max_results=config.max_results,
            timeout_ms=config.channel_search_timeout_ms,
            user_agent=config.user_agent,
        ),
    ]

    return ImageCollectionService(
        strategies,
        max_results=config.max_results,
        deadline_ms=config.effective_deadline_ms,
        event_bus=event_bus,
    )


# 组合根（模块级单例）：首次请求时组装，应用启动时可通过 init_image_fetch 替换
_service: Optional[ImageCollectionService] = None


def init_image_fetch(
    event_bus: Optional[EventBus] = None,
    config: Optional[ImageFetchConfig] = None,
    service: Optional[ImageCollectionService] = None
) -> ImageCollectionService:
    """
    初始化编排服务（供应用启动或测试时调用）

    参数:
        event_bus: 事件总线
        config: 图片获取配置
        service: 直接指定已组装好的服务，给定时忽略其余参数
    """
    global _service
    _service = service or build_collection_service(config, event_bus)
    return _service


def _get_service() -> ImageCollectionService:
    if _service is None:
        return init_image_fetch()
    return _service


def parse_fetch_request(payload) -> FetchRequest:
    """
    将 camelCase JSON 请求体转换为 FetchRequest

    异常:
        RequestValidationError: 请求体不是 JSON 对象、itemName 为空或 salesChannel 未知
    """
    if not isinstance(payload, dict):
        raise RequestValidationError("Request body must be a JSON object")

    def optional_text(key: str) -> Optional[str]:
        value = payload.get(key)
        if value is None:
            return None
        if not isinstance(value, str):
            raise RequestValidationError(f"{key} must be a string")
        return value

    item_name = optional_text("itemName")
    if item_name is None or not item_name.strip():
        raise RequestValidationError("itemName is required")

    sales_channel = None
    channel_name = optional_text("salesChannel")
    if channel_name is not None and channel_name.strip():
        try:
            sales_channel = SalesChannel[channel_name.strip().upper()]
        except KeyError:
            raise RequestValidationError(f"Unsupported salesChannel: {channel_name}")

    return FetchRequest(
        item_name=item_name.strip(),
        option_name=optional_text("optionName"),
        image_url=optional_text("imageUrl"),
        sales_url=optional_text("salesUrl"),
        sales_channel=sales_channel,
    )


@bp.route("/health", methods=["GET"])
def health():
    # 健康检查：用于快速判断后端是否正常运行
    return jsonify({"status": "ok"})


@bp.route("/fetch", methods=["POST"])
def fetch_images():
    """
    获取商品图片

    请求体: {itemName, optionName?, imageUrl?, salesUrl?, salesChannel?}
    响应体: {totalLoadingTimeMs, images: [{url, source, loadingTimeMs, resolution, fileSizeBytes}]}
    """
    fetch_request = parse_fetch_request(request.get_json(silent=True))
    logger.info(f"Fetching images for item: {fetch_request.item_name}")

    response = _get_service().fetch_images(fetch_request)
    return jsonify(response.to_dict())


def _error_body(error: str, message: str, status: int):
    return jsonify({"error": error, "message": message}), status


@bp.errorhandler(RequestValidationError)
def handle_validation_error(e):
    return _error_body("INVALID_REQUEST", str(e), 400)


@bp.errorhandler(InvalidUrlError)
def handle_invalid_url(e):
    logger.warning(f"Invalid URL in request: {e.message}")
    return _error_body("INVALID_REQUEST", e.message, 400)


@bp.errorhandler(FetchTimeoutError)
def handle_timeout(e):
    logger.warning(f"Image fetch timed out: {e.message}")
    return _error_body("TIMEOUT", e.message, 504)


@bp.errorhandler(ImageNotAccessibleError)
def handle_not_accessible(e):
    logger.warning(f"Resource not accessible: {e.message}")
    return _error_body("NOT_ACCESSIBLE", e.message, 502)


@bp.errorhandler(ImageFetchError)
def handle_fetch_error(e):
    logger.error(f"Image fetch failed: {e.message}")
    return _error_body("INTERNAL_ERROR", e.message, 500)


@bp.errorhandler(Exception)
def handle_unexpected_error(e):
    logger.exception("Unexpected error while fetching images")
    return _error_body("INTERNAL_ERROR", "Internal server error", 500)
