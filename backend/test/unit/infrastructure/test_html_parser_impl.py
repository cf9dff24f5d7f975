import pytest
import sys
import os
from unittest.mock import patch

# 将 backend 目录添加到系统路径，以便导入 imagefetch 模块
sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '../../../')))

from imagefetch.image.infrastructure.html_parser_impl import HtmlParserImpl


class TestHtmlParserImpl:
    """
    HtmlParserImpl 的单元测试类

    测试目标：
    - 验证单个元素属性读取（meta content）
    - 验证多元素按属性优先级读取
    - 验证异常处理机制（解析失败不抛出）
    """

    @pytest.fixture
    def parser(self):
        """pytest fixture: 创建 HtmlParserImpl 实例供测试使用"""
        return HtmlParserImpl()

    def test_select_first_attribute(self, parser):
        html = """
        <html><head>
            <meta property="og:image" content=" https://cdn.example.com/og.jpg ">
            <meta property="og:image" content="https://cdn.example.com/second.jpg">
        </head></html>
        """
        value = parser.select_first_attribute(html, 'meta[property="og:image"]', 'content')
        assert value == "https://cdn.example.com/og.jpg"

    def test_select_first_attribute_missing(self, parser):
        html = '<html><head><meta property="og:title" content="title"></head></html>'
        assert parser.select_first_attribute(html, 'meta[property="og:image"]', 'content') is None

    def test_select_first_attribute_blank_value(self, parser):
        html = '<meta property="og:image" content="   ">'
        assert parser.select_first_attribute(html, 'meta[property="og:image"]', 'content') is None

    def test_selector_group(self, parser):
        """逗号分隔的选择器组按文档顺序匹配"""
        html = '<meta property="twitter:image" content="https://cdn.example.com/tw.jpg">'
        selector = 'meta[name="twitter:image"], meta[property="twitter:image"]'
        assert parser.select_first_attribute(html, selector, 'content') == "https://cdn.example.com/tw.jpg"

    def test_select_attribute_values_priority(self, parser):
        html = """
        <div>
            <img src="https://a.com/1.jpg" data-src="https://a.com/lazy1.jpg">
            <img data-src="https://a.com/2.jpg">
            <img alt="no source">
            <img src=" " data-original="https://a.com/3.jpg">
        </div>
        """
        values = parser.select_attribute_values(html, 'img', ('src', 'data-src', 'data-original'))
        assert values == ["https://a.com/1.jpg", "https://a.com/2.jpg", "https://a.com/3.jpg"]

    def test_select_attribute_values_keeps_duplicates(self, parser):
        html = '<img src="https://a.com/1.jpg"><img src="https://a.com/1.jpg">'
        assert parser.select_attribute_values(html, 'img', ('src',)) == ["https://a.com/1.jpg"] * 2

    def test_empty_html(self, parser):
        assert parser.select_first_attribute("", "meta", "content") is None
        assert parser.select_attribute_values("", "img", ("src",)) == []

    def test_invalid_selector_does_not_raise(self, parser):
        html = '<img src="https://a.com/1.jpg">'
        assert parser.select_attribute_values(html, 'img[[[', ('src',)) == []
        assert parser.select_first_attribute(html, 'img[[[', 'src') is None

    def test_parser_exception_handled(self, parser):
        """BeautifulSoup 抛出异常时返回空结果"""
        with patch('imagefetch.image.infrastructure.html_parser_impl.BeautifulSoup') as mock_bs:
            mock_bs.side_effect = Exception("Parsing error")
            assert parser.select_attribute_values("<html></html>", "img", ("src",)) == []
            assert parser.select_first_attribute("<html></html>", "meta", "content") is None
