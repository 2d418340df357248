"""
=============================================================================
ITEM HANDLERS
=============================================================================

The inventory routes:

    ┌────────┬──────────────┬──────────────────────────────────────────────┐
    │ GET    │ /            │ Listing page (add form + table + total)      │
    │ GET    │ /index.html  │ Same page                                    │
    │ GET    │ /export      │ CSV download of every item                   │
    │ GET    │ /edit?index= │ Edit form for one item                       │
    │ POST   │ /submit      │ Append an item, then 303 → /                 │
    │ POST   │ /update      │ Replace an item, then 303 → /                │
    └────────┴──────────────┴──────────────────────────────────────────────┘

Both POST routes only accept application/x-www-form-urlencoded bodies;
anything else gets 415 before the body is even looked at.

=============================================================================
"""

import logging
from pathlib import Path
from typing import Optional

from ..http.forms import parse_form
from ..http.request import HTTPRequest
from ..http.response import (
    HTTPResponse,
    ResponseBuilder,
    bad_request,
    not_found,
    ok_html,
    see_other,
    unsupported_media_type,
)
from ..inventory.render import render_csv, render_edit_page, render_listing
from ..inventory.store import ItemStore
from ..inventory.validation import parse_index, validate_item_form

logger = logging.getLogger(__name__)

EXPORT_FILENAME = "items.csv"

INDEX_REQUIRED_MESSAGE = "Índice de item requerido"
EDIT_INDEX_INVALID_MESSAGE = "Índice de item inválido"
EDIT_ITEM_MISSING_MESSAGE = "El item solicitado no existe"
UPDATE_ITEM_MISSING_MESSAGE = "El item solicitado no existe."


class ItemHandlers:
    """
    Route handlers bound to one ItemStore.

        store = ItemStore()
        items = ItemHandlers(store)
        router.get("/")(items.listing)
        router.post("/submit")(items.submit)
    """

    def __init__(self, store: ItemStore, template_dir: Optional[Path] = None):
        self.store = store
        self.template_dir = template_dir

    # =========================================================================
    # READ-ONLY PAGES
    # =========================================================================

    def listing(self, request: HTTPRequest) -> HTTPResponse:
        return ok_html(render_listing(self.store.snapshot(), self.template_dir))

    def export(self, request: HTTPRequest) -> HTTPResponse:
        """CSV export, offered as an items.csv download."""
        return (ResponseBuilder()
                .csv(render_csv(self.store.snapshot()), EXPORT_FILENAME)
                .build())

    def edit(self, request: HTTPRequest) -> HTTPResponse:
        """
        Edit form for the item at ?index=N.

            missing index         → 400 "Índice de item requerido"
            non-numeric index     → 400 "Índice de item inválido"
            index past the end    → 404 "El item solicitado no existe"
        """
        query = parse_form(request.query)

        raw_index = query.get("index")
        if raw_index is None:
            return bad_request(INDEX_REQUIRED_MESSAGE)

        index = parse_index(raw_index, EDIT_INDEX_INVALID_MESSAGE)
        if not index.ok:
            return bad_request(index.error)

        item = self.store.get(index.value)
        if item is None:
            return not_found(EDIT_ITEM_MISSING_MESSAGE)

        return ok_html(render_edit_page(index.value, item, self.template_dir))

    # =========================================================================
    # FORM POSTS
    # =========================================================================

    def submit(self, request: HTTPRequest) -> HTTPResponse:
        """Append a new item (Post/Redirect/Get)."""
        if not request.has_form_body():
            return unsupported_media_type()

        result = validate_item_form(parse_form(request.body))
        if not result.ok:
            logger.info(f"Rejected new item: {result.error}")
            return bad_request(result.error)

        index = self.store.append(result.value.item)
        logger.info(f"Added item #{index}: {result.value.item.name!r}")
        return see_other("/")

    def update(self, request: HTTPRequest) -> HTTPResponse:
        """Replace the item at itemIndex (Post/Redirect/Get)."""
        if not request.has_form_body():
            return unsupported_media_type()

        result = validate_item_form(parse_form(request.body), require_index=True)
        if not result.ok:
            logger.info(f"Rejected item update: {result.error}")
            return bad_request(result.error)

        submission = result.value
        if not self.store.replace(submission.index, submission.item):
            return not_found(UPDATE_ITEM_MISSING_MESSAGE)

        logger.info(f"Updated item #{submission.index}: {submission.item.name!r}")
        return see_other("/")
