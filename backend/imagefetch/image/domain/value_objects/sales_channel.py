"""
销售渠道与渠道搜索配置

每个渠道对应一个搜索 URL 模板与一组有序的 CSS 选择器回退列表。
新增渠道时需要同时补充枚举值与 CHANNEL_SEARCH_SPECS 中的映射。
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple
from urllib.parse import quote_plus


class SalesChannel(Enum):
    NAVER = "NAVER"
    COUPANG = "COUPANG"
    GMARKET = "GMARKET"
    ELEVENST = "ELEVENST"
    AUCTION = "AUCTION"


@dataclass(frozen=True)
class ChannelSearchSpec:
    """渠道搜索规格：URL 模板（含 {query} 占位符）+ 缩略图选择器回退列表"""
    search_url_template: str
    selectors: Tuple[str, ...]

    def build_search_url(self, query: str) -> str:
        # 表单编码：空格编码为 +
        return self.search_url_template.format(query=quote_plus(query))


CHANNEL_SEARCH_SPECS: Dict[SalesChannel, ChannelSearchSpec] = {
    SalesChannel.NAVER: ChannelSearchSpec(
        search_url_template="https://search.shopping.naver.com/search/all?query={query}",
        selectors=(
            ".product_list_item img.thumbnail",
            "div[class*=product_item] img",
            "img[class*=thumbnail]",
        ),
    ),
    SalesChannel.COUPANG: ChannelSearchSpec(
        search_url_template="https://www.coupang.com/np/search?q={query}",
        selectors=(
            "li.search-product img.search-product-wrap-img",
            "li.search-product img",
            "img[class*=search-product]",
        ),
    ),
    SalesChannel.GMARKET: ChannelSearchSpec(
        search_url_template="https://browse.gmarket.co.kr/search?keyword={query}",
        selectors=(
            ".box__item-container img.image__item",
            ".box__image img",
            "img.image__item",
        ),
    ),
    SalesChannel.ELEVENST: ChannelSearchSpec(
        search_url_template="https://search.11st.co.kr/Search.tmall?kwd={query}",
        selectors=(
            ".c_card .c_prd_thumb img",
            ".c_card img",
            "img[class*=prd]",
        ),
    ),
    SalesChannel.AUCTION: ChannelSearchSpec(
        search_url_template="https://browse.auction.co.kr/search?keyword={query}",
        selectors=(
            ".component--item_card img.image--itemcard",
            ".section--itemcard img",
            "img.image--itemcard",
        ),
    ),
}

_missing = [channel.name for channel in SalesChannel if channel not in CHANNEL_SEARCH_SPECS]
if _missing:
    raise RuntimeError(f"渠道缺少搜索配置: {_missing}")


def get_channel_search_spec(channel: SalesChannel) -> ChannelSearchSpec:
    return CHANNEL_SEARCH_SPECS[channel]
