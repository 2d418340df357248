"""
=============================================================================
HTTP PROTOCOL LAYER
=============================================================================

Hand-rolled HTTP/1.1 handling: bytes in, bytes out. Nothing here knows
about items or costs.

    ┌─────────────────────────────────────────────────────────────────────┐
    │ request.py      raw bytes → HTTPRequest (request line, headers,     │
    │                 body capped at Content-Length)                      │
    │ forms.py        application/x-www-form-urlencoded decode/encode     │
    │ router.py       (method, path) → handler, fixed 404 page fallback   │
    │ response.py     HTTPResponse → bytes in a fixed header order        │
    │ status_codes.py HTTPStatus enum with reason phrases                 │
    │ mime_types.py   file extension → Content-Type                       │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
"""

from .request import HTTPRequest, RequestParser, HTTPParseError, parse_request
from .forms import decode_component, encode_component, parse_form, encode_form
from .response import (
    HTTPResponse,
    ResponseBuilder,
    ok_html,
    see_other,
    bad_request,
    not_found,
    not_found_page,
    unsupported_media_type,
    payload_too_large,
    internal_error,
)
from .router import Router, Route
from .status_codes import HTTPStatus
from .mime_types import get_mime_type, get_content_type

# Public API - what you get when you do:
# from costtracker.http import *
__all__ = [
    # Request parsing
    "HTTPRequest",
    "RequestParser",
    "HTTPParseError",
    "parse_request",

    # Form codec
    "decode_component",
    "encode_component",
    "parse_form",
    "encode_form",

    # Response building
    "HTTPResponse",
    "ResponseBuilder",
    "ok_html",
    "see_other",
    "bad_request",
    "not_found",
    "not_found_page",
    "unsupported_media_type",
    "payload_too_large",
    "internal_error",

    # Routing
    "Router",
    "Route",

    # Status codes
    "HTTPStatus",

    # MIME types
    "get_mime_type",
    "get_content_type",
]
