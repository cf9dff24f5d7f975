import pytest
import sys
import os
import time
from unittest.mock import Mock

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '../../../')))

from imagefetch.image.infrastructure.strategies.direct_url_strategy import DirectUrlImageFetchStrategy
from imagefetch.image.infrastructure.binary_http_client_impl import BinaryHttpClientImpl
from imagefetch.image.infrastructure.image_metadata_prober_impl import ImageMetadataProberImpl
from imagefetch.image.domain.domain_service.image_url_validator import ImageUrlValidator
from imagefetch.image.domain.demand_interface.i_binary_http_client import IBinaryHttpClient
from imagefetch.image.domain.demand_interface.i_image_metadata_prober import IImageMetadataProber
from imagefetch.image.domain.exceptions import InvalidUrlError, FetchTimeoutError
from imagefetch.image.domain.value_objects.binary_response import BinaryResponse
from imagefetch.image.domain.value_objects.fetch_request import FetchRequest
from imagefetch.image.domain.value_objects.image_metadata import ImageMetadata
from imagefetch.image.domain.value_objects.image_result import ImageSource

IMAGE_URL = "https://cdn.example.com/product.jpg"


def binary_response(content=b"bytes", is_success=True, status_code=200, is_timeout=False):
    return BinaryResponse(
        url=IMAGE_URL,
        status_code=status_code,
        headers={},
        content=content,
        content_type="image/jpeg",
        is_success=is_success,
        error_message=None if is_success else "failed",
        is_timeout=is_timeout,
    )


@pytest.fixture
def http():
    return Mock(spec=IBinaryHttpClient)


@pytest.fixture
def prober():
    mock = Mock(spec=IImageMetadataProber)
    mock.probe.return_value = ImageMetadata(resolution="800x600", size_bytes=5)
    return mock


@pytest.fixture
def strategy(http, prober):
    return DirectUrlImageFetchStrategy(http, ImageUrlValidator(), prober, timeout_ms=500)


class TestDirectUrlStrategy:

    def test_priority_and_applicability(self, strategy):
        assert strategy.priority() == 1
        assert strategy.can_handle(FetchRequest(item_name="a", image_url=IMAGE_URL))
        assert not strategy.can_handle(FetchRequest(item_name="a", image_url="  "))
        assert not strategy.can_handle(FetchRequest(item_name="a"))

    def test_success_returns_single_probed_result(self, strategy, http, prober):
        http.get_binary.return_value = binary_response()

        results = strategy.fetch_images(FetchRequest(item_name="a", image_url=IMAGE_URL))

        assert len(results) == 1
        result = results[0]
        assert result.url == IMAGE_URL
        assert result.source == ImageSource.DIRECT
        assert result.resolution == "800x600"
        assert result.file_size_bytes == 5
        assert result.loading_time_ms >= 0
        http.get_binary.assert_called_once_with(IMAGE_URL, timeout=0.5)
        prober.probe.assert_called_once_with(b"bytes")

    def test_invalid_url_raises_before_fetch(self, strategy, http):
        with pytest.raises(InvalidUrlError):
            strategy.fetch_images(FetchRequest(item_name="a", image_url="not-a-url"))
        http.get_binary.assert_not_called()

    def test_unsupported_format_raises(self, strategy):
        with pytest.raises(InvalidUrlError):
            strategy.fetch_images(FetchRequest(item_name="a", image_url="https://cdn.example.com/a.bmp"))

    def test_timeout_raises(self, strategy, http):
        http.get_binary.return_value = binary_response(content=b"", is_success=False, status_code=0, is_timeout=True)
        with pytest.raises(FetchTimeoutError):
            strategy.fetch_images(FetchRequest(item_name="a", image_url=IMAGE_URL))

    def test_other_fetch_error_degrades_to_empty(self, strategy, http):
        http.get_binary.return_value = binary_response(content=b"", is_success=False, status_code=404)
        assert strategy.fetch_images(FetchRequest(item_name="a", image_url=IMAGE_URL)) == []

    def test_empty_body_degrades_to_empty(self, strategy, http, prober):
        http.get_binary.return_value = binary_response(content=b"")
        assert strategy.fetch_images(FetchRequest(item_name="a", image_url=IMAGE_URL)) == []
        prober.probe.assert_not_called()

    def test_unexpected_error_degrades_to_empty(self, strategy, http):
        http.get_binary.side_effect = RuntimeError("boom")
        assert strategy.fetch_images(FetchRequest(item_name="a", image_url=IMAGE_URL)) == []

    def test_not_applicable_returns_empty(self, strategy, http):
        assert strategy.fetch_images(FetchRequest(item_name="a")) == []
        http.get_binary.assert_not_called()


class TestDirectUrlStrategyOverRealSocket:
    """真实 BinaryHttpClientImpl + 本地慢速服务器"""

    @pytest.fixture
    def live_strategy(self):
        client = BinaryHttpClientImpl()
        yield DirectUrlImageFetchStrategy(client, ImageUrlValidator(), ImageMetadataProberImpl(), timeout_ms=500)
        client.close()

    @pytest.mark.parametrize("mode", ["stall", "trickle"])
    def test_slow_body_raises_timeout(self, live_strategy, slow_image_server, mode):
        url = slow_image_server(mode)

        start = time.monotonic()
        with pytest.raises(FetchTimeoutError):
            live_strategy.fetch_images(FetchRequest(item_name="a", image_url=url))
        assert time.monotonic() - start < 1.5
