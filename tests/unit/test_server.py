"""
Unit tests for HTTPServer request handling (no real sockets).
"""

import pytest

from costtracker import ServerConfig, create_app
from costtracker.core.connection import Connection
from costtracker.handlers.items import EDIT_INDEX_INVALID_MESSAGE
from costtracker.http.request import INVALID_REQUEST_MESSAGE
from costtracker.http.response import NOT_FOUND_PAGE, ResponseBuilder
from costtracker.http.router import Router
from costtracker.http.status_codes import HTTPStatus
from costtracker.inventory.store import ItemStore
from costtracker.inventory.validation import INVALID_INDEX_MESSAGE, INVALID_QUANTITY_MESSAGE
from costtracker.server import HANDLER_ERROR_MESSAGE, HTTPServer

from conftest import build_request, form_request


@pytest.fixture
def server(store: ItemStore) -> HTTPServer:
    return create_app(ServerConfig(port=0), store)


class TestRespond:
    """Tests for HTTPServer.respond()."""

    def test_listing(self, server: HTTPServer):
        request, response = server.respond(build_request("GET", "/"))

        assert request.path == "/"
        assert response.status == HTTPStatus.OK
        assert "Tornillo" in response.body.decode("utf-8")

    def test_index_html_alias(self, server: HTTPServer):
        _, response = server.respond(build_request("GET", "/index.html"))

        assert response.status == HTTPStatus.OK

    def test_empty_buffer_gets_no_response(self, server: HTTPServer):
        assert server.respond(b"") == (None, None)

    def test_malformed_request_line(self, server: HTTPServer):
        request, response = server.respond(b"GARBAGE\r\n\r\n")

        assert request is None
        assert response.status == HTTPStatus.BAD_REQUEST
        assert response.content_type.startswith("text/plain")
        assert response.body.decode("utf-8") == INVALID_REQUEST_MESSAGE

    def test_unknown_route(self, server: HTTPServer):
        _, response = server.respond(build_request("GET", "/nope"))

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.body.decode("utf-8") == NOT_FOUND_PAGE

    def test_unknown_method(self, server: HTTPServer):
        _, response = server.respond(build_request("DELETE", "/"))

        assert response.status == HTTPStatus.NOT_FOUND

    def test_submit_then_listing(self, server: HTTPServer, store: ItemStore):
        _, response = server.respond(form_request("/submit", "itemNameSelect=Tuerca&itemCost=0.10"))

        assert response.status == HTTPStatus.SEE_OTHER
        assert len(store) == 3

        _, listing = server.respond(build_request("GET", "/"))
        assert "Tuerca" in listing.body.decode("utf-8")

    def test_static_asset(self, server: HTTPServer):
        _, response = server.respond(build_request("GET", "/static/styles.css"))

        assert response.status == HTTPStatus.OK
        assert response.content_type == "text/css; charset=utf-8"

    def test_overlong_asset_name_is_404(self, server: HTTPServer):
        _, response = server.respond(build_request("GET", "/static/" + "a" * 300 + ".css"))

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.body.decode("utf-8") == NOT_FOUND_PAGE

    def test_huge_edit_index_is_400(self, server: HTTPServer):
        _, response = server.respond(build_request("GET", "/edit?index=" + "1" * 5000))

        assert response.status == HTTPStatus.BAD_REQUEST
        assert response.body.decode("utf-8") == EDIT_INDEX_INVALID_MESSAGE

    def test_huge_update_index_is_400(self, server: HTTPServer, store: ItemStore):
        before = store.snapshot()

        _, response = server.respond(form_request(
            "/update",
            "itemIndex=" + "1" * 5000 + "&itemNameSelect=Cable&itemCost=1",
        ))

        assert response.status == HTTPStatus.BAD_REQUEST
        assert response.body.decode("utf-8") == INVALID_INDEX_MESSAGE
        assert store.snapshot() == before

    def test_huge_submit_quantity_is_400(self, server: HTTPServer, store: ItemStore):
        _, response = server.respond(form_request(
            "/submit",
            "itemNameSelect=Cable&itemQuantity=" + "1" * 5000 + "&itemCost=1",
        ))

        assert response.status == HTTPStatus.BAD_REQUEST
        assert response.body.decode("utf-8") == INVALID_QUANTITY_MESSAGE
        assert len(store) == 2


    def test_handler_exception_becomes_500(self):
        router = Router()

        @router.get("/boom")
        def boom(request):
            raise RuntimeError("secret detail")

        server = HTTPServer(ServerConfig(port=0), router)

        _, response = server.respond(build_request("GET", "/boom"))

        body = response.body.decode("utf-8")
        assert response.status == HTTPStatus.INTERNAL_SERVER_ERROR
        assert response.content_type.startswith("text/html")
        assert HANDLER_ERROR_MESSAGE in body
        assert "secret detail" not in body

    def test_invalid_config_rejected(self):
        with pytest.raises(ValueError):
            HTTPServer(ServerConfig(port=70000))


class TestProcessConnection:
    """Tests for HTTPServer.process_connection() over a fake socket."""

    def make_connection(self, sock, **kwargs) -> Connection:
        return Connection(socket=sock, address=("127.0.0.1", 40000), **kwargs)

    def test_response_written_and_closed(self, server: HTTPServer, fake_socket_factory):
        sock = fake_socket_factory([build_request("GET", "/export")])

        server.process_connection(self.make_connection(sock))

        assert sock.sent.startswith(b"HTTP/1.1 200 OK\r\nContent-Type: text/csv; charset=utf-8\r\n")
        assert b"Connection: close\r\n" in sock.sent
        assert sock.closed is True

    def test_empty_request_closes_silently(self, server: HTTPServer, fake_socket_factory):
        sock = fake_socket_factory([])

        server.process_connection(self.make_connection(sock))

        assert sock.sent == b""
        assert sock.closed is True

    def test_request_too_large_is_413(self, server: HTTPServer, fake_socket_factory):
        sock = fake_socket_factory([b"x" * 1024, b"x" * 1024])

        server.process_connection(self.make_connection(sock, buffer_size=1024, max_request_size=1500))

        assert sock.sent.startswith(b"HTTP/1.1 413 Payload Too Large\r\n")
        assert sock.closed is True

    def test_send_failure_still_closes(self, server: HTTPServer, fake_socket_factory):
        sock = fake_socket_factory([build_request("GET", "/")], send_error=BrokenPipeError())

        server.process_connection(self.make_connection(sock))

        assert sock.closed is True

    def test_handler_crash_keeps_serving(self, fake_socket_factory):
        router = Router()

        @router.get("/boom")
        def boom(request):
            raise ValueError("boom")

        @router.get("/ok")
        def ok(request):
            return ResponseBuilder().text("ok").build()

        server = HTTPServer(ServerConfig(port=0), router)

        first = fake_socket_factory([build_request("GET", "/boom")])
        second = fake_socket_factory([build_request("GET", "/ok")])
        server.process_connection(self.make_connection(first))
        server.process_connection(self.make_connection(second))

        assert first.sent.startswith(b"HTTP/1.1 500 ")
        assert second.sent.startswith(b"HTTP/1.1 200 OK")
