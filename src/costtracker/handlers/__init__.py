"""
=============================================================================
REQUEST HANDLERS
=============================================================================

1. ItemHandlers
   - Listing page, CSV export, edit form
   - Add (/submit) and edit (/update) form posts

2. StaticFileHandler
   - Serves styles.css / formatter.js from the static directory
   - Path traversal protection

=============================================================================
USAGE
=============================================================================

    store = ItemStore()
    items = ItemHandlers(store)
    static = StaticFileHandler()

    router.get("/")(items.listing)
    router.get("/static/*path")(static.handle)

=============================================================================
"""

from .items import ItemHandlers
from .static import StaticFileHandler

__all__ = [
    "ItemHandlers",
    "StaticFileHandler",
]
