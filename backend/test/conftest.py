"""
测试共享 fixture：本地慢速图片服务器

服务器先正常返回 200 响应头（Content-Length: 100），之后按模式发送响应体：
- "stall"：发送响应头后停顿，不再发送任何字节
- "trickle"：每 0.1 秒发送 1 字节，单次 socket 读取永远不会超时
"""

import socket
import threading

import pytest

RESPONSE_HEAD = (
    b"HTTP/1.1 200 OK\r\n"
    b"Content-Type: image/png\r\n"
    b"Content-Length: 100\r\n"
    b"Connection: close\r\n"
    b"\r\n"
)


def _read_request_head(conn: socket.socket) -> None:
    data = b""
    while b"\r\n\r\n" not in data:
        chunk = conn.recv(1024)
        if not chunk:
            return
        data += chunk


@pytest.fixture
def slow_image_server(monkeypatch):
    """返回一个工厂函数：start(mode) -> 图片 URL"""
    # 本地地址不经过环境变量中的代理
    monkeypatch.setenv("NO_PROXY", "127.0.0.1,localhost")
    monkeypatch.setenv("no_proxy", "127.0.0.1,localhost")

    stop = threading.Event()
    listeners = []

    def serve(listener: socket.socket, mode: str) -> None:
        try:
            conn, _ = listener.accept()
        except OSError:
            return
        with conn:
            try:
                _read_request_head(conn)
                conn.sendall(RESPONSE_HEAD)
                if mode == "stall":
                    stop.wait(2)
                    return
                for _ in range(100):
                    if stop.wait(0.1):
                        return
                    conn.sendall(b"x")
            except OSError:
                # 客户端超时后主动断开
                return

    def start(mode: str) -> str:
        listener = socket.create_server(("127.0.0.1", 0))
        listeners.append(listener)
        threading.Thread(target=serve, args=(listener, mode), daemon=True).start()
        host, port = listener.getsockname()[:2]
        return f"http://{host}:{port}/slow.png"

    yield start

    stop.set()
    for listener in listeners:
        listener.close()
