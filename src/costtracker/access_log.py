"""
=============================================================================
ACCESS LOG
=============================================================================

One log line per answered request, on its own logger so it can be routed
or silenced separately from the server's diagnostic messages:

    logging.getLogger("costtracker.access").setLevel(logging.WARNING)

Two formats:

    text   127.0.0.1 - - [19/Oct/2026:10:31:02 +0000] "POST /submit" 303 0 1.42ms
    json   {"request_id": "3f9a1c2e", "method": "POST", "path": "/submit", ...}

Nothing sensitive is logged: no bodies and no form values. The query
string only carries the item index.

=============================================================================
"""

import json
import logging
import time
from dataclasses import dataclass
from typing import Optional

from .http.request import HTTPRequest
from .http.response import HTTPResponse


logger = logging.getLogger("costtracker.access")


@dataclass
class RequestLog:
    """
    Structured log entry for a request.

    =========================================================================
    FIELDS
    =========================================================================

    request_id:     Connection identifier, also used in server debug logs
    method:         Request method ("GET", "POST")
    path:           Request path, without the query string
    query:          Raw query string ("index=2")
    client_ip:      Client's IP address
    user_agent:     Browser/client identifier
    status_code:    HTTP response code
    content_length: Response body size in bytes
    duration_ms:    Time from parsed request to serialized response
    timestamp:      When the request was processed

    =========================================================================
    """

    request_id: str
    method: str
    path: str
    query: str
    client_ip: str
    user_agent: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "request_id": self.request_id,
            "method": self.method,
            "path": self.path,
            "query": self.query,
            "client_ip": self.client_ip,
            "user_agent": self.user_agent,
            "status_code": self.status_code,
            "content_length": self.content_length,
            "duration_ms": round(self.duration_ms, 2),
            "timestamp": self.timestamp,
        }

    def to_text(self) -> str:
        """Format in the style of the Apache combined log format."""
        target = f"{self.path}?{self.query}" if self.query else self.path
        return (
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"{self.method} {target}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms'
        )


class AccessLogger:
    """
    Emits RequestLog entries in the configured format.

        access_log = AccessLogger(log_format="json")
        access_log.log(request, response, duration_ms=1.4, request_id=conn.id)
    """

    def __init__(self, log_format: str = "text", log_level: int = logging.INFO):
        self.log_format = log_format
        self.log_level = log_level

    def build_entry(
        self,
        request: Optional[HTTPRequest],
        response: HTTPResponse,
        duration_ms: float,
        request_id: str = "-",
        client_address: tuple[str, int] = ("", 0),
    ) -> RequestLog:
        """
        Build the log entry for one response.

        request is None when the bytes could not be parsed into a request
        (a 400 or 413 answered straight from the framing layer).
        """
        return RequestLog(
            request_id=request_id,
            method=request.method if request else "-",
            path=request.path if request else "-",
            query=request.query if request else "",
            client_ip=client_address[0] or "-",
            user_agent=(request.get_header("user-agent") if request else "") or "-",
            status_code=int(response.status),
            content_length=len(response.body),
            duration_ms=duration_ms,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )

    def log(
        self,
        request: Optional[HTTPRequest],
        response: HTTPResponse,
        duration_ms: float,
        request_id: str = "-",
        client_address: tuple[str, int] = ("", 0),
    ) -> RequestLog:
        """Build the entry and write it to the access logger."""
        entry = self.build_entry(request, response, duration_ms, request_id, client_address)

        if self.log_format == "json":
            logger.log(self.log_level, json.dumps(entry.to_dict(), ensure_ascii=False))
        else:
            logger.log(self.log_level, entry.to_text())

        return entry
