"""
=============================================================================
FORM CODEC (application/x-www-form-urlencoded)
=============================================================================

Browsers submit HTML forms as a single line of key=value pairs:

    itemNameSelect=Otro...&itemName=Caf%C3%A9+molido&itemCost=1%27250.00
    ──────┬─────── ──┬───  ───┬──── ─────────┬───────
         key       value     key           value

    • Pairs are separated by "&"
    • Key and value are separated by the FIRST "="
    • "+" means a space
    • "%XY" is a byte given as two hex digits (UTF-8 for non-ASCII)

The same encoding is used for query strings (/edit?index=2).

=============================================================================
DECODING RULES
=============================================================================

    "a+b"       → "a b"
    "%41"       → "A"
    "%C3%A9"    → "é"
    "100%"      → "100%"      (truncated escape kept literally)
    "%zz"       → "%zz"       (non-hex escape kept literally)
    "flag"      → dropped     (token without "=")
    "a=1&a=2"   → {"a": "2"}  (last duplicate wins)

Decoding is total: any input produces a result, never an exception.
Bytes that are not valid UTF-8 become U+FFFD.

=============================================================================
"""

from typing import Mapping, Union
from urllib.parse import quote_plus, unquote_plus


def decode_component(text: str) -> str:
    """
    Decode one form key or value.

        >>> decode_component("Caf%C3%A9+molido")
        'Café molido'
        >>> decode_component("50%")
        '50%'
    """
    return unquote_plus(text, encoding="utf-8", errors="replace")


def parse_form(data: Union[str, bytes]) -> dict[str, str]:
    """
    Parse a urlencoded form body or query string into a dict.

    Accepts the raw request body (bytes) or a query string (str).

        >>> parse_form(b"itemName=Tuerca&itemCost=0.25")
        {'itemName': 'Tuerca', 'itemCost': '0.25'}
        >>> parse_form("index=3&debug")
        {'index': '3'}
    """
    if isinstance(data, bytes):
        data = data.decode("utf-8", errors="replace")

    values: dict[str, str] = {}
    if not data:
        return values

    for token in data.split("&"):
        key, equals, value = token.partition("=")
        if not equals:
            continue
        values[decode_component(key)] = decode_component(value)

    return values


def encode_component(text: str) -> str:
    """
    Encode one form key or value (inverse of decode_component).

        >>> encode_component("Café molido")
        'Caf%C3%A9+molido'
    """
    return quote_plus(text, safe="", encoding="utf-8")


def encode_form(values: Mapping[str, object]) -> str:
    """
    Encode a mapping as a urlencoded form body or query string.

        >>> encode_form({"index": 2})
        'index=2'
    """
    return "&".join(
        f"{encode_component(str(key))}={encode_component(str(value))}"
        for key, value in values.items()
    )
