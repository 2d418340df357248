"""
Unit tests for request framing on a connection.
"""

import socket

import pytest

from costtracker.core.connection import Connection, ConnectionState, RequestTooLargeError
from costtracker.http.request import parse_request


FORM_REQUEST = (
    b"POST /submit HTTP/1.1\r\n"
    b"Host: localhost\r\n"
    b"Content-Type: application/x-www-form-urlencoded\r\n"
    b"Content-Length: 40\r\n"
    b"\r\n"
    b"itemNameSelect=Tuerca&itemCost=0.10&x=yz"
)


def split_every(data: bytes, size: int):
    return [data[i:i + size] for i in range(0, len(data), size)]


def make_connection(sock, **kwargs) -> Connection:
    return Connection(socket=sock, address=("127.0.0.1", 50000), **kwargs)


class TestReadRequest:
    """Tests for Connection.read_request()."""

    def test_single_chunk(self, fake_socket_factory):
        sock = fake_socket_factory([FORM_REQUEST])

        assert make_connection(sock).read_request() == FORM_REQUEST

    @pytest.mark.parametrize("size", [1, 2, 7, 16, 33, 64])
    def test_chunking_does_not_change_result(self, fake_socket_factory, size):
        """However the bytes are split in transit, the buffer is the same."""
        sock = fake_socket_factory(split_every(FORM_REQUEST, size))

        assert make_connection(sock).read_request() == FORM_REQUEST

    def test_chunked_read_parses_identically(self, fake_socket_factory):
        whole = make_connection(fake_socket_factory([FORM_REQUEST])).read_request()
        pieces = make_connection(fake_socket_factory(split_every(FORM_REQUEST, 3))).read_request()

        assert parse_request(pieces) == parse_request(whole)
        assert parse_request(pieces).body == b"itemNameSelect=Tuerca&itemCost=0.10&x=yz"

    def test_stops_once_body_complete(self, fake_socket_factory):
        """No further recv() once headers and Content-Length bytes are in."""
        sock = fake_socket_factory([FORM_REQUEST, b"never read"])

        assert make_connection(sock).read_request() == FORM_REQUEST
        assert sock.chunks == [b"never read"]

    def test_get_without_body_stops_at_headers(self, fake_socket_factory):
        raw = b"GET / HTTP/1.1\r\nHost: x\r\n\r\n"
        sock = fake_socket_factory([raw, b"extra"])

        assert make_connection(sock).read_request() == raw
        assert sock.chunks == [b"extra"]

    def test_short_body_returns_what_arrived(self, fake_socket_factory):
        """Peer closes before the declared length: return the partial buffer."""
        partial = FORM_REQUEST[:-10]
        sock = fake_socket_factory([partial])

        assert make_connection(sock).read_request() == partial

    def test_no_header_terminator_reads_until_close(self, fake_socket_factory):
        sock = fake_socket_factory([b"GET / HTTP/1.1\r\n", b"Host: x"])

        assert make_connection(sock).read_request() == b"GET / HTTP/1.1\r\nHost: x"

    def test_peer_closes_immediately(self, fake_socket_factory):
        sock = fake_socket_factory([])

        assert make_connection(sock).read_request() == b""

    def test_connection_reset_treated_as_close(self, fake_socket_factory):
        sock = fake_socket_factory([b"GET / HT", ConnectionResetError()])

        assert make_connection(sock).read_request() == b"GET / HT"

    def test_timeout_returns_partial_buffer(self, fake_socket_factory):
        sock = fake_socket_factory([b"POST /submit HTTP/1.1\r\n", socket.timeout()])

        conn = make_connection(sock, timeout=0.5)

        assert conn.read_request() == b"POST /submit HTTP/1.1\r\n"
        assert sock.timeout == 0.5

    def test_invalid_content_length_means_headers_only(self, fake_socket_factory):
        raw = b"POST /submit HTTP/1.1\r\nContent-Length: -3\r\n\r\n"
        sock = fake_socket_factory([raw, b"abc"])

        assert make_connection(sock).read_request() == raw

    @pytest.mark.parametrize("value", [b"1_0", b"\xd9\xa3", b"+3"])
    def test_length_must_be_plain_digits(self, fake_socket_factory, value):
        raw = b"POST /submit HTTP/1.1\r\nContent-Length: " + value + b"\r\n\r\n"
        sock = fake_socket_factory([raw, b"abcdefghij"])

        assert make_connection(sock).read_request() == raw

    def test_recv_size_is_buffer_size(self, fake_socket_factory):
        sock = fake_socket_factory([FORM_REQUEST])

        make_connection(sock, buffer_size=4096).read_request()

        assert sock.recv_sizes[0] == 4096

    def test_request_too_large(self, fake_socket_factory):
        sock = fake_socket_factory([b"x" * 600, b"x" * 600])

        with pytest.raises(RequestTooLargeError) as exc_info:
            make_connection(sock, buffer_size=1024, max_request_size=1000).read_request()

        assert exc_info.value.limit == 1000
        assert exc_info.value.size == 1200

    def test_byte_counters(self, fake_socket_factory):
        sock = fake_socket_factory(split_every(FORM_REQUEST, 10))
        conn = make_connection(sock)

        conn.read_request()

        assert conn.bytes_received == len(FORM_REQUEST)
        assert conn.state == ConnectionState.READING


class TestSendAndClose:
    """Tests for sending responses and closing."""

    def test_send_response(self, fake_socket_factory):
        sock = fake_socket_factory()
        conn = make_connection(sock)

        assert conn.send_response(b"HTTP/1.1 200 OK\r\n\r\n") is True
        assert sock.sent == b"HTTP/1.1 200 OK\r\n\r\n"
        assert conn.bytes_sent == len(sock.sent)

    def test_send_failure_reported(self, fake_socket_factory):
        sock = fake_socket_factory(send_error=BrokenPipeError())
        conn = make_connection(sock)

        assert conn.send_response(b"data") is False
        assert conn.bytes_sent == 0

    def test_close_is_idempotent(self, fake_socket_factory):
        sock = fake_socket_factory()
        conn = make_connection(sock)

        conn.close()
        conn.close()

        assert sock.shut_down is True
        assert sock.closed is True
        assert conn.state == ConnectionState.CLOSED

    def test_context_manager_closes(self, fake_socket_factory):
        sock = fake_socket_factory()

        with make_connection(sock) as conn:
            assert conn.state == ConnectionState.NEW

        assert sock.closed is True

    def test_client_address_properties(self, fake_socket_factory):
        conn = make_connection(fake_socket_factory())

        assert conn.client_ip == "127.0.0.1"
        assert conn.client_port == 50000
        assert len(conn.id) == 8
