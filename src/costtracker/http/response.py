"""
=============================================================================
HTTP RESPONSE BUILDER
=============================================================================

Builds HTTP/1.1 responses and serializes them in a fixed wire layout.

=============================================================================
WIRE LAYOUT
=============================================================================

Every response this server sends has the same shape, in this exact order:

    ┌─────────────────────────────────────────────────────────────────────┐
    │  HTTP/1.1 200 OK\r\n                         ← status line          │
    │  Content-Type: text/html; charset=utf-8\r\n  ← only when set        │
    │  Content-Disposition: attachment; ...\r\n    ← extra headers, in    │
    │                                                 insertion order     │
    │  Content-Length: 1234\r\n                    ← always, real size    │
    │  Connection: close\r\n                       ← always               │
    │  \r\n                                        ← separator            │
    │  <html>...                                   ← body bytes           │
    └─────────────────────────────────────────────────────────────────────┘

Content-Length and Connection are never taken from the caller: the length
is computed from the body and every connection is closed after one
response, so they are appended last during serialization.

A redirect carries no Content-Type at all:

    HTTP/1.1 303 See Other\r\n
    Location: /\r\n
    Content-Length: 0\r\n
    Connection: close\r\n
    \r\n

=============================================================================
BUILDER PATTERN
=============================================================================

    ResponseBuilder()
        .status(HTTPStatus.OK)
        .content_type("text/csv; charset=utf-8")
        .header("Content-Disposition", 'attachment; filename="items.csv"')
        .body(csv_text)
        .build()

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict, Optional, Union

from .status_codes import HTTPStatus


HTML_CONTENT_TYPE = "text/html; charset=utf-8"
TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"
CSV_CONTENT_TYPE = "text/csv; charset=utf-8"

NOT_FOUND_PAGE = "<html><body><h1>404 - Recurso no encontrado</h1></body></html>"
UNSUPPORTED_MEDIA_MESSAGE = "Contenido no soportado"

# Computed during serialization, never accepted from callers
_RESERVED_HEADERS = {"content-type", "content-length", "connection"}


@dataclass
class HTTPResponse:
    """
    Represents an HTTP response to be sent to the client.

    Use ResponseBuilder or the helper functions below for construction.

        Handler returns          to_bytes()              Connection sends
        HTTPResponse    ─────►   serializes    ─────►    with sendall()
    """

    status: HTTPStatus = HTTPStatus.OK
    content_type: Optional[str] = None
    headers: Dict[str, str] = field(default_factory=dict)  # Extra headers, ordered
    body: bytes = b""
    version: str = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """
        Get the HTTP status line.

        Example: "HTTP/1.1 303 See Other"
        """
        return f"{self.version} {int(self.status)} {self.status.phrase}"

    def set_header(self, name: str, value: str) -> "HTTPResponse":
        """
        Set an extra response header.

        Content-Type goes through content_type; Content-Length and
        Connection are always computed, so all three are rejected here.
        """
        if name.lower() in _RESERVED_HEADERS:
            raise ValueError(f"{name} is managed by the response serializer")
        self.headers[name] = value
        return self

    def set_body(self, body: Union[str, bytes]) -> "HTTPResponse":
        """Set the response body (strings are encoded as UTF-8)."""
        self.body = body.encode("utf-8") if isinstance(body, str) else body
        return self

    def to_bytes(self) -> bytes:
        """
        Serialize the response to bytes for sending over the socket.

        Returns:
            Complete HTTP response as bytes ready for socket.sendall()
        """
        lines = [self.status_line]

        if self.content_type is not None:
            lines.append(f"Content-Type: {self.content_type}")

        for name, value in self.headers.items():
            lines.append(f"{name}: {value}")

        lines.append(f"Content-Length: {len(self.body)}")
        lines.append("Connection: close")

        # Empty line separates headers from body
        lines.append("")

        header_bytes = "\r\n".join(lines).encode("utf-8") + b"\r\n"
        return header_bytes + self.body


class ResponseBuilder:
    """
    Fluent builder for constructing HTTP responses.

    Each method returns the builder, so calls chain; build() produces the
    final HTTPResponse.
    """

    def __init__(self):
        self._status = HTTPStatus.OK           # Default to 200 OK
        self._content_type: Optional[str] = None
        self._headers: Dict[str, str] = {}     # Extra headers, in order
        self._body: bytes = b""

    # =========================================================================
    # STATUS AND HEADERS
    # =========================================================================

    def status(self, status: HTTPStatus) -> "ResponseBuilder":
        self._status = status
        return self

    def header(self, name: str, value: str) -> "ResponseBuilder":
        """
        Add an extra response header.

        Extra headers are written after Content-Type and before
        Content-Length, in the order they were added.
        """
        if name.lower() in _RESERVED_HEADERS:
            raise ValueError(f"{name} is managed by the response serializer")
        self._headers[name] = value
        return self

    def content_type(self, content_type: str) -> "ResponseBuilder":
        self._content_type = content_type
        return self

    # =========================================================================
    # BODY METHODS
    # =========================================================================

    def body(self, body: Union[str, bytes]) -> "ResponseBuilder":
        """Set the response body (string auto-encoded to UTF-8)."""
        self._body = body.encode("utf-8") if isinstance(body, str) else body
        return self

    def text(self, text: str) -> "ResponseBuilder":
        """Set a plain text body with a UTF-8 text/plain Content-Type."""
        return self.content_type(TEXT_CONTENT_TYPE).body(text)

    def html(self, html: str) -> "ResponseBuilder":
        """Set an HTML body with a UTF-8 text/html Content-Type."""
        return self.content_type(HTML_CONTENT_TYPE).body(html)

    def csv(self, csv_text: str, filename: str) -> "ResponseBuilder":
        """
        Set a CSV body offered to the browser as a download.

        Content-Disposition: attachment makes the browser save the body as
        a file named `filename` instead of rendering it.
        """
        return (self.content_type(CSV_CONTENT_TYPE)
                .header("Content-Disposition", f'attachment; filename="{filename}"')
                .body(csv_text))

    def redirect(self, location: str) -> "ResponseBuilder":
        """
        Configure a 303 See Other redirect.

        =====================================================================
        POST / REDIRECT / GET
        =====================================================================

            Browser                              Server
               │  POST /submit (form data)          │
               │ ─────────────────────────────────► │  item appended
               │  303 See Other, Location: /        │
               │ ◄───────────────────────────────── │
               │  GET /                             │
               │ ─────────────────────────────────► │
               │  200 OK (listing)                  │
               │ ◄───────────────────────────────── │

        Reloading the final page repeats the GET, not the POST.
        =====================================================================
        """
        self._status = HTTPStatus.SEE_OTHER
        self._content_type = None
        self._body = b""
        self._headers["Location"] = location
        return self

    # =========================================================================
    # BUILD METHODS
    # =========================================================================

    def build(self) -> HTTPResponse:
        return HTTPResponse(
            status=self._status,
            content_type=self._content_type,
            headers=dict(self._headers),
            body=self._body,
        )

    def to_bytes(self) -> bytes:
        """Build and serialize the response to bytes in one step."""
        return self.build().to_bytes()


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================

def ok_html(html: str) -> HTTPResponse:
    """Create a 200 OK HTML response."""
    return ResponseBuilder().html(html).build()


def see_other(location: str) -> HTTPResponse:
    """Create a 303 See Other redirect with an empty body."""
    return ResponseBuilder().redirect(location).build()


def plain_error(status: HTTPStatus, message: str) -> HTTPResponse:
    """Create an error response with a plain text message body."""
    return ResponseBuilder().status(status).text(message).build()


def bad_request(message: str) -> HTTPResponse:
    """
    Create a 400 Bad Request response.

    The message is sent verbatim as text/plain; validation messages are
    meant to be read by the person who filled in the form.
    """
    return plain_error(HTTPStatus.BAD_REQUEST, message)


def not_found(message: str) -> HTTPResponse:
    """Create a 404 Not Found response with a plain text message."""
    return plain_error(HTTPStatus.NOT_FOUND, message)


def not_found_page() -> HTTPResponse:
    """Create the fixed HTML 404 page sent for unknown routes."""
    return ResponseBuilder().status(HTTPStatus.NOT_FOUND).html(NOT_FOUND_PAGE).build()


def unsupported_media_type() -> HTTPResponse:
    """Create a 415 response for a POST that is not a urlencoded form."""
    return plain_error(HTTPStatus.UNSUPPORTED_MEDIA_TYPE, UNSUPPORTED_MEDIA_MESSAGE)


def payload_too_large(message: str) -> HTTPResponse:
    return plain_error(HTTPStatus.PAYLOAD_TOO_LARGE, message)


def internal_error(page: str) -> HTTPResponse:
    """
    Create a 500 Internal Server Error response.

    Args:
        page: Pre-rendered HTML error page
    """
    return (ResponseBuilder()
            .status(HTTPStatus.INTERNAL_SERVER_ERROR)
            .html(page)
            .build())
