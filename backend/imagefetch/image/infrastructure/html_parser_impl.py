# infrastructure/html_parser_impl.py
import logging
from typing import List, Optional, Sequence
from bs4 import BeautifulSoup

from ..domain.demand_interface.i_html_parser import IHtmlParser

error_logger = logging.getLogger('infrastructure.error')


class HtmlParserImpl(IHtmlParser):
    """基于BeautifulSoup的HTML解析器实现"""

    def __init__(self, parser: str = 'html.parser'):
        """
        初始化HTML解析器

        参数:
            parser: 解析器类型，可选值:
                   'html.parser' (Python内置，默认)
                   'lxml' (更快，需安装lxml)
                   'html5lib' (最宽容，需安装html5lib)
        """
        self._parser = parser

    def select_first_attribute(self, html: str, selector: str, attribute: str) -> Optional[str]:
        """
        选择第一个匹配元素并读取属性

        参数:
            html: HTML内容
            selector: CSS选择器
            attribute: 属性名

        返回:
            去除空白后的属性值；元素不存在或属性为空时返回 None
        """
        if not html:
            return None

        try:
            soup = BeautifulSoup(html, self._parser)
            element = soup.select_one(selector)
            if element is None:
                return None
            return _attribute_text(element, attribute) or None

        except Exception as e:
            # 解析失败返回 None，不抛出异常
            error_logger.warning(f"HTML属性提取失败: {selector} - {str(e)}")
            return None

    def select_attribute_values(self, html: str, selector: str, attributes: Sequence[str]) -> List[str]:
        """
        按文档顺序读取所有匹配元素的第一个非空属性值

        参数:
            html: HTML内容
            selector: CSS选择器
            attributes: 按优先级排列的属性名

        返回:
            属性值列表（不去重，去除首尾空白）
        """
        if not html:
            return []

        try:
            soup = BeautifulSoup(html, self._parser)
            values = []

            for element in soup.select(selector):
                for attribute in attributes:
                    value = _attribute_text(element, attribute)
                    if value:
                        values.append(value)
                        break

            return values

        except Exception as e:
            error_logger.warning(f"HTML元素选择失败: {selector} - {str(e)}")
            return []


def _attribute_text(element, attribute: str) -> str:
    value = element.get(attribute)
    if value is None:
        return ''
    # class 等多值属性会被 BeautifulSoup 解析为列表
    if isinstance(value, list):
        value = ' '.join(value)
    return value.strip()
