import pytest
import sys
import os
import requests
import requests_mock
import time

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '../../../')))

from imagefetch.image.infrastructure.binary_http_client_impl import BinaryHttpClientImpl
from imagefetch.image.domain.value_objects.binary_response import BinaryResponse


@pytest.fixture
def binary_client():
    client = BinaryHttpClientImpl(user_agent="TestBot/1.0")
    yield client
    client.close()


class TestBinaryHttpClientImpl:

    def test_download_bytes(self, binary_client):
        with requests_mock.Mocker() as m:
            m.get('https://cdn.example.com/a.png', content=b'\x89PNG data', headers={'Content-Type': 'image/png'})

            response = binary_client.get_binary('https://cdn.example.com/a.png', timeout=0.5)

            assert isinstance(response, BinaryResponse)
            assert response.is_success
            assert response.content == b'\x89PNG data'
            assert response.content_type == 'image/png'
            assert m.last_request.timeout == 0.5
            assert m.last_request.headers['User-Agent'] == "TestBot/1.0"

    def test_http_error(self, binary_client):
        with requests_mock.Mocker() as m:
            m.get('https://cdn.example.com/missing.png', status_code=404)

            response = binary_client.get_binary('https://cdn.example.com/missing.png')

            assert not response.is_success
            assert response.status_code == 404
            assert response.error_message == "HTTP 404"

    def test_timeout_flagged(self, binary_client):
        with requests_mock.Mocker() as m:
            m.get('https://cdn.example.com/slow.png', exc=requests.exceptions.ReadTimeout)

            response = binary_client.get_binary('https://cdn.example.com/slow.png', timeout=0.05)

            assert response.is_timeout
            assert response.content == b""
            assert response.status_code == 0

    def test_connection_error_not_timeout(self, binary_client):
        with requests_mock.Mocker() as m:
            m.get('https://cdn.example.com/a.png', exc=requests.exceptions.ConnectionError("reset"))

            response = binary_client.get_binary('https://cdn.example.com/a.png')

            assert not response.is_success
            assert not response.is_timeout
            assert "连接失败" in response.error_message

    def test_default_user_agent(self):
        client = BinaryHttpClientImpl()
        assert 'Mozilla/5.0' in client._session.headers['User-Agent']
        assert client._session.headers['Accept'].startswith('image/')
        client.close()


class TestSlowBodyDownload:
    """真实本地 socket：响应头正常到达，响应体停顿或缓慢到达"""

    def test_stalled_body_reported_as_timeout(self, binary_client, slow_image_server):
        url = slow_image_server("stall")

        start = time.monotonic()
        response = binary_client.get_binary(url, timeout=0.5)
        elapsed = time.monotonic() - start

        assert not response.is_success
        assert response.is_timeout
        assert response.status_code == 0
        assert "请求超时" in response.error_message
        assert elapsed < 1.5

    def test_trickling_body_bounded_by_total_timeout(self, binary_client, slow_image_server):
        # 每 0.1 秒 1 字节：单次读取不会超时，整体下载需要 10 秒
        url = slow_image_server("trickle")

        start = time.monotonic()
        response = binary_client.get_binary(url, timeout=0.5)
        elapsed = time.monotonic() - start

        assert response.is_timeout
        assert response.content == b""
        assert elapsed < 1.5

    def test_timeout_logged_as_timeout(self, binary_client, slow_image_server, caplog):
        url = slow_image_server("stall")

        with caplog.at_level('WARNING', logger='infrastructure.error'):
            binary_client.get_binary(url, timeout=0.3)

        messages = [r.getMessage() for r in caplog.records if r.name == 'infrastructure.error']
        assert any("请求超时" in message for message in messages)
        assert not any("连接失败" in message for message in messages)
