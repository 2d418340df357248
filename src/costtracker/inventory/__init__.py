"""
Inventory domain: the in-memory item list, form validation and the
HTML/CSV renderers. No HTTP in here.
"""

from .store import Item, ItemStore
from .validation import FieldResult, ItemSubmission, validate_item_form, parse_index
from .render import (
    render_listing,
    render_edit_page,
    render_error_page,
    render_csv,
    format_currency,
    format_currency_grouped,
)

__all__ = [
    "Item",
    "ItemStore",
    "FieldResult",
    "ItemSubmission",
    "validate_item_form",
    "parse_index",
    "render_listing",
    "render_edit_page",
    "render_error_page",
    "render_csv",
    "format_currency",
    "format_currency_grouped",
]
