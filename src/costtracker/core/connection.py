"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket: read exactly one HTTP request, send
exactly one response, close.

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL!
=============================================================================

TCP does NOT preserve message boundaries. A request sent as one write
may arrive as any number of recv() chunks:

    Client sends:
        POST /submit HTTP/1.1\r\nContent-Length: 13\r\n\r\nitemCost=1.50

    Server might receive:
        recv() → "POST /sub"
        recv() → "mit HTTP/1.1\r\nContent-Le"
        recv() → "ngth: 13\r\n\r\nitemCo"
        recv() → "st=1.50"

The reader keeps appending chunks to a buffer until the buffer holds a
complete request, so the result does not depend on how the bytes were
split in transit.

=============================================================================
FRAMING ALGORITHM
=============================================================================

    ┌─────────────────────────────────────────────────────────────────┐
    │                    read_request() Flow                          │
    ├─────────────────────────────────────────────────────────────────┤
    │                                                                 │
    │   ┌──────────────────────────┐                                  │
    │   │ recv(buffer_size)        │◄────────────────────┐            │
    │   └────────────┬─────────────┘                     │            │
    │                │ b"" / reset / timeout → stop      │            │
    │   ┌────────────▼─────────────┐                     │            │
    │   │ append to buffer         │                     │            │
    │   └────────────┬─────────────┘                     │            │
    │   ┌────────────▼─────────────┐  not yet            │            │
    │   │ \r\n\r\n located?        │─────────────────────┤            │
    │   └────────────┬─────────────┘                     │            │
    │                │ first time: read Content-Length   │            │
    │   ┌────────────▼─────────────┐  body short         │            │
    │   │ body >= Content-Length?  │─────────────────────┘            │
    │   └────────────┬─────────────┘                                  │
    │                ▼                                                │
    │          return buffer                                          │
    │                                                                 │
    └─────────────────────────────────────────────────────────────────┘

Whatever is buffered when the peer stops sending is returned as-is, even
a request whose body is shorter than its Content-Length or one that never
reached the blank line. Deciding what to do with it is the parser's job.

=============================================================================
CONNECTION STATE MACHINE
=============================================================================

    NEW ──────► READING ──────► PROCESSING ──────► WRITING
                   │                                   │
                   ▼                                   ▼
                CLOSING ◄──────────────────────────────┘
                   │
                   ▼
                 CLOSED

There is no keep-alive: one request per connection, then close.

=============================================================================
"""

import socket
import time
import logging
from enum import Enum
from dataclasses import dataclass, field
from typing import Optional
import uuid

from ..http.request import (
    HEADER_TERMINATOR,
    parse_content_length,
    parse_header_lines,
)

logger = logging.getLogger(__name__)


class RequestTooLargeError(Exception):
    """Raised when a request grows past the configured size limit."""

    def __init__(self, size: int, limit: int):
        super().__init__(f"Request too large: {size} bytes (limit {limit})")
        self.size = size
        self.limit = limit


class ConnectionState(Enum):
    """
    Connection lifecycle states.

    Tracked for logging and to make close() idempotent.
    """

    NEW = "new"                # Just accepted, haven't read anything yet
    READING = "reading"        # Currently reading request data
    PROCESSING = "processing"  # Request parsed, handler is executing
    WRITING = "writing"        # Sending response data
    CLOSING = "closing"        # About to close (shutdown sequence)
    CLOSED = "closed"          # Connection closed, socket released


@dataclass
class Connection:
    """
    Represents a client connection.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short connection identifier (for logging).
        state: Current connection state.
        created_at: Timestamp when connection was accepted.
        buffer_size: Maximum bytes requested per recv() call.
        timeout: Socket timeout in seconds, None to block indefinitely.
        max_request_size: Largest request accepted before giving up.
    """

    # Required parameters
    socket: socket.socket
    address: tuple[str, int]

    # Generated/default parameters
    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)
    bytes_received: int = 0
    bytes_sent: int = 0

    # Configuration (passed from ServerConfig)
    buffer_size: int = 4096
    timeout: Optional[float] = None
    max_request_size: int = 10 * 1024 * 1024  # 10 MB max request

    def __post_init__(self):
        """Apply the configured timeout (None means blocking reads)."""
        self.socket.settimeout(self.timeout)

    # =========================================================================
    # PROPERTIES: Convenient accessors
    # =========================================================================

    @property
    def client_ip(self) -> str:
        """Get the client IP address."""
        return self.address[0]

    @property
    def client_port(self) -> int:
        return self.address[1]

    @property
    def age(self) -> float:
        """Get connection age in seconds."""
        return time.time() - self.created_at

    # =========================================================================
    # READING: Buffer one HTTP request from the socket
    # =========================================================================

    def read_request(self) -> bytes:
        """
        Read one HTTP request from the socket.

        Returns:
            Everything buffered for this request. b"" when the client
            closed without sending anything.

        Raises:
            RequestTooLargeError: If the request exceeds max_request_size.
        """
        self.state = ConnectionState.READING

        buffer = bytearray()
        header_end: Optional[int] = None
        content_length = 0

        while True:
            try:
                chunk = self._recv()
            except socket.timeout:
                logger.warning(
                    f"[{self.id}] Read timed out after {len(buffer)} bytes"
                )
                break

            if not chunk:
                break  # Connection closed by client

            buffer += chunk
            self.bytes_received += len(chunk)

            # Safety check: don't let buffer grow forever
            if len(buffer) > self.max_request_size:
                raise RequestTooLargeError(len(buffer), self.max_request_size)

            # ─────────────────────────────────────────────────────────────
            # Locate the header/body boundary once, then read the length
            # ─────────────────────────────────────────────────────────────
            #
            #   POST /submit HTTP/1.1\r\n
            #   Content-Length: 5\r\n
            #   \r\n                ← header_end points here
            #   a=b&c               ← body starts 4 bytes later
            #
            if header_end is None:
                found = buffer.find(HEADER_TERMINATOR)
                if found == -1:
                    continue
                header_end = found
                content_length = self._parse_content_length(bytes(buffer[:header_end]))

            if len(buffer) - header_end - 4 >= content_length:
                break

        if header_end is not None and len(buffer) - header_end - 4 < content_length:
            logger.debug(
                f"[{self.id}] Peer stopped after "
                f"{len(buffer) - header_end - 4} of {content_length} body bytes"
            )

        return bytes(buffer)

    def _recv(self) -> bytes:
        """
        Receive data from socket with error handling.

        Returns:
            Received bytes, or empty bytes if the connection was lost.
        """
        try:
            return self.socket.recv(self.buffer_size)
        except (ConnectionResetError, BrokenPipeError):
            # Client disconnected abruptly
            return b""

    def _parse_content_length(self, header_section: bytes) -> int:
        """
        Parse Content-Length from the raw header section.

        Missing, malformed or negative values count as 0. Never raises.
        """
        headers = parse_header_lines(
            header_section.decode("utf-8", errors="replace")
        )
        return parse_content_length(headers.get("content-length"))

    # =========================================================================
    # WRITING: Send response data to the client
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Send response data to the client.

        Uses sendall() so the whole response goes out in one call. A
        failed send is logged and not retried.

        Returns:
            True if send succeeded, False if connection lost.
        """
        self.state = ConnectionState.WRITING

        try:
            self.socket.sendall(data)
            self.bytes_sent += len(data)
            return True
        except OSError as e:
            # Client disconnected
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    # =========================================================================
    # CLOSING: Properly terminate the connection
    # =========================================================================

    def close(self):
        """
        Close the connection gracefully.

        1. shutdown(SHUT_WR): send FIN so the client sees end-of-response
        2. Drain briefly: discard anything the client still sends
        3. close(): release the file descriptor
        """
        if self.state == ConnectionState.CLOSED:
            return  # Already closed

        self.state = ConnectionState.CLOSING

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Already disconnected

        try:
            self.socket.settimeout(0.5)  # Quick timeout
            while self.socket.recv(1024):
                pass  # Discard any remaining data
        except OSError:
            pass  # Reset or timeout, we're closing anyway

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    # =========================================================================
    # CONTEXT MANAGER: For use with 'with' statement
    # =========================================================================

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit - ensure connection is closed."""
        self.close()
        return False  # Don't suppress exceptions
