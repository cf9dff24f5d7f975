"""
模块职责（领域服务）
- 从商品页 HTML 中挑选代表性图片：Open Graph > Twitter Card > 通用商品图片；
- 从渠道搜索结果页 HTML 中按渠道选择器回退列表提取缩略图；
- 过滤追踪像素、图标、Logo 等非商品图片。

设计要点
- 结构化 meta 由页面作者维护，噪声最低，优先级最高；
- 通用图片只是兜底，必须经过启发式过滤；
- 按精确字符串去重，避免 meta 与正文图片重复计数；
- HTML 结构解析委托给 IHtmlParser，本服务只承载挑选规则。
"""

import logging
from typing import List, Optional

from ..demand_interface.i_html_parser import IHtmlParser
from ..value_objects.sales_channel import SalesChannel, get_channel_search_spec

logger = logging.getLogger(__name__)

OG_IMAGE_SELECTOR = 'meta[property="og:image"]'
TWITTER_IMAGE_SELECTOR = 'meta[name="twitter:image"], meta[property="twitter:image"]'

# 商品图片所在区域的选择器，按优先级排列；没有产出有效图片时回退到所有 <img>
ITEM_IMAGE_SELECTORS = (
    "img.product-image",
    "img.item-image",
    "img[itemprop=image]",
    ".product-detail img",
    ".item-detail img",
    ".product-images img",
)
FALLBACK_IMAGE_SELECTOR = "img"

ITEM_IMAGE_ATTRIBUTES = ("src", "data-src", "data-original")
CHANNEL_IMAGE_ATTRIBUTES = ("data-src", "src", "data-original")

TRACKING_MARKERS = ("1x1", "pixel", "tracking")
NON_PRODUCT_MARKERS = ("icon", "logo.")


def is_valid_image_url(url: Optional[str]) -> bool:
    """
    通用图片 URL 启发式过滤

    拒绝: 空值、追踪像素（1x1/pixel/tracking）、图标与 Logo
    接受: http 开头、协议相对（//）或根相对（/）路径
    """
    if url is None or not url.strip():
        return False

    lower_url = url.strip().lower()

    if any(marker in lower_url for marker in TRACKING_MARKERS):
        return False

    if any(marker in lower_url for marker in NON_PRODUCT_MARKERS):
        return False

    return lower_url.startswith(("http", "//", "/"))


class ImageExtractionService:

    def __init__(self, html_parser: IHtmlParser):
        # 依赖注入：HTML 解析由基础设施层实现
        self._parser = html_parser

    def extract_og_image(self, html: str) -> Optional[str]:
        if not html:
            return None
        return self._parser.select_first_attribute(html, OG_IMAGE_SELECTOR, "content")

    def extract_twitter_image(self, html: str) -> Optional[str]:
        if not html:
            return None
        return self._parser.select_first_attribute(html, TWITTER_IMAGE_SELECTOR, "content")

    def extract_item_images(self, html: str) -> List[str]:
        """
        提取通用商品图片

        按 ITEM_IMAGE_SELECTORS 顺序扫描，每个元素取 src → data-src → data-original
        中第一个非空值；区域选择器没有产出任何有效图片（未命中，或命中的都被
        追踪像素 / 图标规则过滤掉）时，改为扫描全部 <img>。
        返回过滤、去重后的 URL 列表（保持发现顺序）。
        """
        if not html:
            return []

        candidates: List[str] = []
        for selector in ITEM_IMAGE_SELECTORS:
            candidates.extend(self._parser.select_attribute_values(html, selector, ITEM_IMAGE_ATTRIBUTES))
        images = _dedupe([url for url in candidates if is_valid_image_url(url)])

        if not images:
            candidates = self._parser.select_attribute_values(html, FALLBACK_IMAGE_SELECTOR, ITEM_IMAGE_ATTRIBUTES)
            images = _dedupe([url for url in candidates if is_valid_image_url(url)])

        logger.debug(f"Extracted {len(images)} item images from HTML")
        return images

    def select_representative_images(self, html: str, max_count: int) -> List[str]:
        """
        挑选代表性图片

        参数:
            html: 商品页 HTML
            max_count: 最多返回的图片数

        返回:
            有序、去重的图片 URL 列表，长度不超过 max_count
        """
        selected: List[str] = []
        if not html or max_count <= 0:
            return selected

        # 1. Open Graph
        og_image = self.extract_og_image(html)
        if og_image:
            selected.append(og_image)

        # 2. Twitter Card（与 OG 不同时才加入）
        if len(selected) < max_count:
            twitter_image = self.extract_twitter_image(html)
            if twitter_image and twitter_image not in selected:
                selected.append(twitter_image)

        # 3. 通用商品图片
        if len(selected) < max_count:
            for image_url in self.extract_item_images(html):
                if len(selected) >= max_count:
                    break
                if image_url not in selected:
                    selected.append(image_url)

        logger.info(f"Selected {len(selected)} representative images from HTML")
        return selected

    def extract_channel_images(self, channel: SalesChannel, html: str) -> List[str]:
        """
        从渠道搜索结果页提取缩略图

        依次尝试渠道的选择器回退列表，第一个产出有效图片的选择器即为结果来源；
        每个元素取 data-src → src → data-original。调用方负责截断数量。
        """
        if not html:
            return []

        spec = get_channel_search_spec(channel)
        for selector in spec.selectors:
            values = self._parser.select_attribute_values(html, selector, CHANNEL_IMAGE_ATTRIBUTES)
            images = _dedupe([url for url in values if is_valid_image_url(url)])
            if images:
                logger.debug(f"Channel {channel.value}: selector '{selector}' matched {len(images)} images")
                return images

        logger.debug(f"Channel {channel.value}: no selector matched")
        return []


def _dedupe(urls: List[str]) -> List[str]:
    seen = set()
    result = []
    for url in urls:
        if url not in seen:
            seen.add(url)
            result.append(url)
    return result
