"""
SalesUrlImageFetchStrategy 测试
商品页 HTML 通过 Mock 的 IHttpClient 返回，HTML 解析使用真实的 ImageExtractionService + HtmlParserImpl
"""

import pytest
import sys
import os
import threading
from unittest.mock import Mock

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '../../../')))

from imagefetch.image.infrastructure.strategies.sales_url_strategy import SalesUrlImageFetchStrategy
from imagefetch.image.infrastructure.html_parser_impl import HtmlParserImpl
from imagefetch.image.domain.domain_service.image_extraction_service import ImageExtractionService
from imagefetch.image.domain.demand_interface.i_http_client import IHttpClient
from imagefetch.image.domain.demand_interface.i_binary_http_client import IBinaryHttpClient
from imagefetch.image.domain.demand_interface.i_image_metadata_prober import IImageMetadataProber
from imagefetch.image.domain.exceptions import InvalidUrlError, ImageNotAccessibleError
from imagefetch.image.domain.value_objects.binary_response import BinaryResponse
from imagefetch.image.domain.value_objects.fetch_config import DEFAULT_USER_AGENT
from imagefetch.image.domain.value_objects.fetch_request import FetchRequest
from imagefetch.image.domain.value_objects.http_response import HttpResponse
from imagefetch.image.domain.value_objects.image_metadata import ImageMetadata
from imagefetch.image.domain.value_objects.image_result import ImageSource

SALES_URL = "https://shop.example.com/products/42"

PRODUCT_HTML = """
<html><head>
    <meta property="og:image" content="//cdn.example.com/og.jpg">
    <meta name="twitter:image" content="https://cdn.example.com/twitter.jpg">
</head><body>
    <img src="/images/main.jpg">
    <img src="https://cdn.example.com/second.jpg">
</body></html>
"""


def page_response(content=PRODUCT_HTML, status_code=200, is_success=True, is_timeout=False):
    return HttpResponse(
        url=SALES_URL,
        status_code=status_code,
        headers={},
        content=content,
        content_type="text/html",
        is_success=is_success,
        error_message=None if is_success else "failed",
        is_timeout=is_timeout,
    )


def image_response(is_success=True):
    return BinaryResponse(
        url="",
        status_code=200 if is_success else 0,
        headers={},
        content=b"img" if is_success else b"",
        content_type="image/jpeg",
        is_success=is_success,
    )


@pytest.fixture
def http():
    mock = Mock(spec=IHttpClient)
    mock.get.return_value = page_response()
    return mock


@pytest.fixture
def binary_http():
    mock = Mock(spec=IBinaryHttpClient)
    mock.get_binary.return_value = image_response()
    return mock


@pytest.fixture
def prober():
    mock = Mock(spec=IImageMetadataProber)
    mock.probe.return_value = ImageMetadata(resolution="1000x1000", size_bytes=3)
    return mock


@pytest.fixture
def strategy(http, binary_http, prober):
    return SalesUrlImageFetchStrategy(
        http,
        binary_http,
        ImageExtractionService(HtmlParserImpl()),
        prober,
        max_results=3,
        timeout_ms=200,
        image_timeout_ms=50,
    )


def sales_request(url=SALES_URL):
    return FetchRequest(item_name="item", sales_url=url)


class TestApplicability:

    def test_priority(self, strategy):
        assert strategy.priority() == 2

    def test_can_handle(self, strategy):
        assert strategy.can_handle(sales_request())
        assert not strategy.can_handle(FetchRequest(item_name="item", sales_url=" "))
        assert not strategy.can_handle(FetchRequest(item_name="item"))


class TestFetchImages:

    def test_representative_images_with_metadata(self, strategy, http, binary_http):
        results = strategy.fetch_images(sales_request())

        assert [r.url for r in results] == [
            "https://cdn.example.com/og.jpg",
            "https://cdn.example.com/twitter.jpg",
            "https://shop.example.com/images/main.jpg",
        ]
        assert all(r.source == ImageSource.SALES_URL for r in results)
        assert all(r.resolution == "1000x1000" and r.file_size_bytes == 3 for r in results)
        http.get.assert_called_once_with(SALES_URL, headers={'User-Agent': DEFAULT_USER_AGENT}, timeout=0.2)
        binary_http.get_binary.assert_any_call("https://cdn.example.com/og.jpg", timeout=0.05)

    def test_metadata_failure_keeps_image(self, strategy, binary_http, prober):
        binary_http.get_binary.return_value = image_response(is_success=False)

        results = strategy.fetch_images(sales_request())

        assert len(results) == 3
        assert all(r.resolution == "unknown" and r.file_size_bytes == 0 for r in results)
        prober.probe.assert_not_called()

    def test_metadata_exception_keeps_image(self, strategy, binary_http):
        binary_http.get_binary.side_effect = RuntimeError("decode failed")
        results = strategy.fetch_images(sales_request())
        assert len(results) == 3
        assert results[0].url == "https://cdn.example.com/og.jpg"

    @pytest.mark.parametrize("html", ["", "   \n  "])
    def test_blank_html_contributes_nothing(self, strategy, http, html):
        http.get.return_value = page_response(content=html)
        assert strategy.fetch_images(sales_request()) == []

    def test_no_images_found(self, strategy, http):
        http.get.return_value = page_response(content="<html><body><p>no images</p></body></html>")
        assert strategy.fetch_images(sales_request()) == []

    def test_max_results_caps_candidates(self, http, binary_http, prober):
        strategy = SalesUrlImageFetchStrategy(
            http, binary_http, ImageExtractionService(HtmlParserImpl()), prober, max_results=1
        )
        results = strategy.fetch_images(sales_request())
        assert [r.url for r in results] == ["https://cdn.example.com/og.jpg"]

    def test_cancellation_stops_metadata_loop(self, strategy, binary_http):
        cancel_event = threading.Event()
        cancel_event.set()
        assert strategy.fetch_images(sales_request(), cancel_event) == []
        binary_http.get_binary.assert_not_called()


class TestErrorClassification:

    @pytest.mark.parametrize("url", ["ftp://shop.example.com/p", "shop.example.com/p"])
    def test_non_http_scheme_raises_invalid_url(self, strategy, http, url):
        with pytest.raises(InvalidUrlError):
            strategy.fetch_images(sales_request(url))
        http.get.assert_not_called()

    @pytest.mark.parametrize("status", [400, 403, 404])
    def test_client_error_raises_invalid_url(self, strategy, http, status):
        http.get.return_value = page_response(content="", status_code=status, is_success=False)
        with pytest.raises(InvalidUrlError):
            strategy.fetch_images(sales_request())

    @pytest.mark.parametrize("status", [500, 503])
    def test_server_error_raises_not_accessible(self, strategy, http, status):
        http.get.return_value = page_response(content="", status_code=status, is_success=False)
        with pytest.raises(ImageNotAccessibleError):
            strategy.fetch_images(sales_request())

    def test_timeout_degrades_to_empty(self, strategy, http):
        http.get.return_value = page_response(content="", status_code=0, is_success=False, is_timeout=True)
        assert strategy.fetch_images(sales_request()) == []

    def test_connection_failure_degrades_to_empty(self, strategy, http):
        http.get.return_value = page_response(content="", status_code=0, is_success=False)
        assert strategy.fetch_images(sales_request()) == []

    def test_unexpected_error_degrades_to_empty(self, strategy, http):
        http.get.side_effect = RuntimeError("boom")
        assert strategy.fetch_images(sales_request()) == []
