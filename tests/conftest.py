"""
pytest configuration and fixtures.
"""

import socket
import threading
from typing import Generator, List, Optional
import pytest

# Add src to path for imports
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from costtracker import ServerConfig, create_app
from costtracker.inventory import Item, ItemStore
from costtracker.server import HTTPServer


FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


def build_request(
    method: str,
    target: str,
    body: bytes = b"",
    content_type: Optional[str] = None,
    headers: Optional[dict] = None,
) -> bytes:
    """Build raw request bytes, with Content-Length set when there is a body."""
    lines = [f"{method} {target} HTTP/1.1", "Host: localhost"]
    if content_type is not None:
        lines.append(f"Content-Type: {content_type}")
    for name, value in (headers or {}).items():
        lines.append(f"{name}: {value}")
    if body:
        lines.append(f"Content-Length: {len(body)}")
    return ("\r\n".join(lines) + "\r\n\r\n").encode("utf-8") + body


def form_request(target: str, body: str) -> bytes:
    """Build a urlencoded POST request."""
    return build_request("POST", target, body.encode("utf-8"), FORM_CONTENT_TYPE)


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request."""
    return (
        b"GET /edit?index=1 HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept: text/html\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample HTTP POST request with a urlencoded form body."""
    body = b"itemNameSelect=Tornillo&itemQuantity=10&itemCost=0.25"
    return (
        b"POST /submit HTTP/1.1\r\n"
        b"Host: localhost:8080\r\n"
        b"Content-Type: application/x-www-form-urlencoded\r\n"
        + f"Content-Length: {len(body)}\r\n".encode()
        + b"\r\n"
    ) + body


@pytest.fixture
def store() -> ItemStore:
    """Store pre-loaded with two items."""
    return ItemStore([
        Item("Tornillo", 10, 0.25),
        Item("Cable", 2, 1500.0),
    ])


class FakeSocket:
    """
    In-memory stand-in for a connected client socket.

    recv() hands out the given chunks one by one, then b"" (peer closed).
    A chunk that is an exception instance is raised instead of returned.
    Everything passed to sendall() is collected in `sent`.
    """

    def __init__(self, chunks: List = None, send_error: Optional[Exception] = None):
        self.chunks = list(chunks or [])
        self.send_error = send_error
        self.sent = b""
        self.recv_sizes: List[int] = []
        self.timeout = None
        self.closed = False
        self.shut_down = False

    def settimeout(self, timeout):
        self.timeout = timeout

    def recv(self, size: int) -> bytes:
        self.recv_sizes.append(size)
        if not self.chunks:
            return b""
        chunk = self.chunks.pop(0)
        if isinstance(chunk, Exception):
            raise chunk
        assert len(chunk) <= size, "test chunk larger than the recv size"
        return chunk

    def sendall(self, data: bytes):
        if self.send_error is not None:
            raise self.send_error
        self.sent += data

    def shutdown(self, how):
        self.shut_down = True

    def close(self):
        self.closed = True


@pytest.fixture
def fake_socket_factory():
    """Build FakeSocket instances inside a test."""
    return FakeSocket


class TestServer:
    """Test server helper that runs in a background thread."""

    __test__ = False  # Not a test class, despite the name

    def __init__(self, server: HTTPServer, store: ItemStore):
        self.server = server
        self.store = store
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        return self.server.socket_server.address[1]

    def start(self):
        """Start server in background thread."""
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.socket_server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        """Stop the server."""
        self.server.shutdown()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def request(self, raw: bytes, timeout: float = 5.0) -> bytes:
        """Send raw bytes, half-close, and read the reply until the server closes."""
        with socket.create_connection(("127.0.0.1", self.port), timeout=timeout) as client:
            if raw:
                client.sendall(raw)
            client.shutdown(socket.SHUT_WR)

            received = b""
            while True:
                chunk = client.recv(4096)
                if not chunk:
                    return received
                received += chunk


@pytest.fixture
def test_server() -> Generator[TestServer, None, None]:
    """Run the cost tracker on an OS-assigned port in a background thread."""
    store = ItemStore()
    server = create_app(
        ServerConfig(
            host="127.0.0.1",
            port=0,  # Let OS pick a free port
            timeout=2.0,
            log_level="WARNING",
        ),
        store,
    )

    test_srv = TestServer(server, store)
    test_srv.start()

    yield test_srv

    test_srv.stop()
