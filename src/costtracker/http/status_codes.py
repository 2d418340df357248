"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The status codes this server actually emits, with their reason phrases.

    ┌────────┬───────────────────────────────────────────────────────────┐
    │  2xx   │ 200 OK              - Listing, edit form, CSV, assets     │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  3xx   │ 303 See Other       - After a successful POST             │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  4xx   │ 400 Bad Request     - Framing or validation failure       │
    │        │ 404 Not Found       - Unknown route or item index         │
    │        │ 413 Payload Too Large - Request over max_request_size     │
    │        │ 415 Unsupported Media Type - POST without a form body     │
    ├────────┼───────────────────────────────────────────────────────────┤
    │  5xx   │ 500 Internal Server Error - Handler or asset failure      │
    └────────┴───────────────────────────────────────────────────────────┘

Why 303 and not 302 after a form POST? 303 tells the browser to follow
the redirect with GET, so refreshing the resulting page re-fetches the
listing instead of re-submitting the form.

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    Extends IntEnum, so codes compare equal to plain integers:

        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.SEE_OTHER.phrase
        'See Other'
    """

    OK = 200
    SEE_OTHER = 303                 # Redirect to GET another URL (after POST)
    BAD_REQUEST = 400
    NOT_FOUND = 404
    PAYLOAD_TOO_LARGE = 413
    UNSUPPORTED_MEDIA_TYPE = 415
    INTERNAL_SERVER_ERROR = 500

    @property
    def phrase(self) -> str:
        """Reason phrase used in the status line ("HTTP/1.1 200 OK")."""
        return _STATUS_PHRASES.get(self, "Unknown")


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.SEE_OTHER: "See Other",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.PAYLOAD_TOO_LARGE: "Payload Too Large",
    HTTPStatus.UNSUPPORTED_MEDIA_TYPE: "Unsupported Media Type",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}
