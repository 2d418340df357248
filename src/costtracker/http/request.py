"""
=============================================================================
HTTP REQUEST PARSER
=============================================================================

Turns the raw bytes buffered by the connection reader into a structured
HTTPRequest. No HTTP library is involved: the request line, header block
and body are located and split by hand.

=============================================================================
HTTP REQUEST ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP REQUEST STRUCTURE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                     │
    │  ┌─ REQUEST LINE ─────────────────────────────────────────────────┐ │
    │  │                                                                │ │
    │  │    GET /edit?index=2 HTTP/1.1\r\n                              │ │
    │  │    ─┬─ ──────┬────── ────┬───                                  │ │
    │  │     │        │           │                                     │ │
    │  │   Method   Target     Version                                  │ │
    │  │              │                                                 │ │
    │  │       ┌──────┴──────┐                                          │ │
    │  │     Path          Query                                        │ │
    │  │    /edit         index=2                                       │ │
    │  │                                                                │ │
    │  └────────────────────────────────────────────────────────────────┘ │
    │                                                                     │
    │  ┌─ HEADERS ──────────────────────────────────────────────────────┐ │
    │  │    Host: localhost:8080\r\n                                    │ │
    │  │    Content-Type: application/x-www-form-urlencoded\r\n         │ │
    │  │    Content-Length: 37\r\n                                      │ │
    │  └────────────────────────────────────────────────────────────────┘ │
    │                                                                     │
    │  ┌─ EMPTY LINE (separator) ───────────────────────────────────────┐ │
    │  │    \r\n                                                        │ │
    │  └────────────────────────────────────────────────────────────────┘ │
    │                                                                     │
    │  ┌─ BODY (optional) ──────────────────────────────────────────────┐ │
    │  │    itemNameSelect=Tornillo&itemCost=1.50                       │ │
    │  └────────────────────────────────────────────────────────────────┘ │
    │                                                                     │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
PARSING RULES
=============================================================================

1. EMPTY INPUT: a client that connects and closes without sending
   anything produces no request at all. parse() returns None and the
   server simply closes the socket.

2. REQUEST LINE: everything up to the first CRLF. Tokens are split on
   whitespace; the first is the method, the second the target. A buffer
   with no CRLF at all, or a line with fewer than two tokens, is a 400.

3. TARGET: split on the FIRST "?". The path is kept exactly as sent (no
   percent-decoding); the query string is kept raw for the form codec.

4. HEADERS: split on the FIRST ":" so values like "localhost:8080"
   survive intact. Names are trimmed and lowercased, values trimmed.
   Lines without a colon are ignored. A repeated header overwrites the
   earlier one (last write wins).

5. BODY: whatever follows CRLFCRLF, capped at the declared
   Content-Length. No (or an unparseable) Content-Length means no body.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Dict, Optional
import re


HEADER_TERMINATOR = b"\r\n\r\n"
LINE_TERMINATOR = b"\r\n"

# Sent verbatim as the body of every framing error
INVALID_REQUEST_MESSAGE = "Petición inválida"

_DIGITS = re.compile(r"[0-9]+")


class HTTPParseError(Exception):
    """
    Raised when HTTP request parsing fails.

    Carries the status code and the message that should be returned to
    the client, so the server can answer without knowing what went wrong:

        400 Bad Request       - Missing or malformed request line

    Oversized requests are rejected earlier, by the connection reader
    (RequestTooLargeError → 413).
    """

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code  # HTTP status to return


@dataclass(frozen=True)
class HTTPRequest:
    """
    Represents a parsed HTTP request.

    =========================================================================
    ATTRIBUTES
    =========================================================================

        method:         Request-line method, exactly as sent ("GET", "POST")

        path:           Target up to the first "?", NOT percent-decoded
                        "/edit" for "/edit?index=2"

        query:          Raw text after the first "?" ("" when absent)
                        Decoded on demand with the form codec

        headers:        Header name → value, names LOWERCASE
                        {"content-type": "application/x-www-form-...", ...}

        body:           Request body bytes, at most Content-Length long

        version:        Third request-line token ("HTTP/1.1"), may be ""
                        Informational only: every response closes

        client_address: Tuple of (ip, port) identifying the client

        path_params:    Values captured by the route pattern
                        {"path": "styles.css"} for /static/styles.css

    =========================================================================
    """

    method: str
    path: str
    query: str = ""
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    version: str = ""
    client_address: tuple[str, int] = ("", 0)

    # Filled in by the router for patterns such as /static/*path
    path_params: Dict[str, str] = field(default_factory=dict)

    @property
    def content_type(self) -> str:
        """Raw Content-Type header value ("" when absent)."""
        return self.headers.get("content-type", "")

    @property
    def content_length(self) -> int:
        """Declared Content-Length, or 0 when missing or invalid."""
        return parse_content_length(self.headers.get("content-length"))

    def get_header(self, name: str, default: str = "") -> str:
        """
        Get a header value (case-insensitive lookup).

        Example:
            request.get_header("Content-Type")
            # Works because headers are stored lowercase
        """
        return self.headers.get(name.lower(), default)

    def has_form_body(self) -> bool:
        """True when the Content-Type announces a urlencoded form."""
        return "application/x-www-form-urlencoded" in self.content_type.lower()


def parse_content_length(value: Optional[str]) -> int:
    """
    Interpret a Content-Length header value.

    Only plain ASCII digits count. Missing, signed, non-numeric or
    absurdly long values all mean "no body" and map to 0. Never raises:
    framing must not fail on a bad length.
    """
    if value is None:
        return 0
    text = value.strip()
    if not _DIGITS.fullmatch(text):
        return 0
    try:
        return int(text)
    except ValueError:
        # Past the interpreter's integer-string limit
        return 0


def parse_header_lines(header_block: str) -> Dict[str, str]:
    """
    Parse a CRLF-separated header block into a dictionary.

    Each line is split on its first colon. Blank lines and lines without
    a colon are skipped; duplicate names keep the last value.

        >>> parse_header_lines("Host: a:8080\\r\\nX-A: 1\\r\\nx-a: 2")
        {'host': 'a:8080', 'x-a': '2'}
    """
    headers: Dict[str, str] = {}

    for line in header_block.split("\r\n"):
        name, colon, value = line.partition(":")
        if not colon:
            continue  # Skip malformed headers (lenient parsing)
        headers[name.strip().lower()] = value.strip()

    return headers


class RequestParser:
    """
    Parses raw HTTP request bytes into HTTPRequest objects.

    ==========================================================================
    PARSER ARCHITECTURE
    ==========================================================================

        Raw Request Bytes
              │
              ▼
        ┌───────────────────────────────────────────────────────────────────┐
        │  REQUEST PARSER                                                   │
        ├───────────────────────────────────────────────────────────────────┤
        │  1. Empty buffer? ──────────────────────────► None (silent close) │
        │  2. Find first CRLF ────────────────────────► none? 400           │
        │  3. Request line: METHOD TARGET [VERSION] ──► < 2 tokens? 400     │
        │  4. Split target on first "?" into path / query                   │
        │  5. Header block up to CRLFCRLF, parsed line by line              │
        │  6. Body after CRLFCRLF, capped at Content-Length                 │
        └───────────────────────────────────────────────────────────────────┘
              │
              ▼
        HTTPRequest dataclass

    ==========================================================================
    """

    def parse(
        self,
        data: bytes,
        client_address: tuple[str, int] = ("", 0)
    ) -> Optional[HTTPRequest]:
        """
        Parse raw HTTP request data into an HTTPRequest object.

        Args:
            data: Raw bytes returned by the connection reader.
            client_address: Client's (ip, port) tuple for logging.

        Returns:
            Parsed HTTPRequest, or None if the buffer is empty.

        Raises:
            HTTPParseError: If the request line is missing or malformed.
        """
        if not data:
            return None

        # =====================================================================
        # STEP 1: Request line (everything before the first CRLF)
        # =====================================================================
        line_end = data.find(LINE_TERMINATOR)
        if line_end == -1:
            raise HTTPParseError(INVALID_REQUEST_MESSAGE)

        request_line = data[:line_end].decode("utf-8", errors="replace")
        tokens = request_line.split()
        if len(tokens) < 2:
            raise HTTPParseError(INVALID_REQUEST_MESSAGE)

        method, target = tokens[0], tokens[1]
        version = tokens[2] if len(tokens) > 2 else ""
        path, _, query = target.partition("?")

        # =====================================================================
        # STEP 2: Header block and body
        # =====================================================================
        # The header block starts right after the request line's CRLF. When
        # the request line is immediately followed by the blank line the
        # terminator search starts at the request line's own CRLF.
        #
        header_end = data.find(HEADER_TERMINATOR, line_end)
        if header_end == -1:
            headers: Dict[str, str] = {}
            body = b""
        else:
            header_block = data[line_end + 2:header_end].decode(
                "utf-8", errors="replace"
            )
            headers = parse_header_lines(header_block)
            body = data[header_end + 4:]

        # Only a declared length admits a body; anything past it is dropped
        body = body[:parse_content_length(headers.get("content-length"))]

        return HTTPRequest(
            method=method,
            path=path,
            query=query,
            headers=headers,
            body=body,
            version=version,
            client_address=client_address,
        )


def parse_request(
    data: bytes,
    client_address: tuple[str, int] = ("", 0)
) -> Optional[HTTPRequest]:
    """
    Convenience function to parse an HTTP request.

    Creates a RequestParser instance and parses the data in one call.
    """
    return RequestParser().parse(data, client_address)
