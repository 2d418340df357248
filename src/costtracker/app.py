"""
Application factory: builds the router for the cost tracker and wraps it
in an HTTPServer.

    server = create_app(ServerConfig(port=8080))
    server.run()
"""

from typing import Optional

from .config import ServerConfig
from .handlers import ItemHandlers, StaticFileHandler
from .http import Router
from .inventory import ItemStore
from .server import HTTPServer


def build_router(store: ItemStore, static_dir: Optional[str] = None) -> Router:
    """
    Register every route against one store.

    Static assets are registered first, then the pages, then the form
    posts. Anything else falls through to the 404 page.
    """
    items = ItemHandlers(store)
    static = StaticFileHandler(static_dir)

    router = Router()
    router.get("/static/*path")(static.handle)
    router.get("/")(items.listing)
    router.get("/index.html")(items.listing)
    router.get("/export")(items.export)
    router.get("/edit")(items.edit)
    router.post("/submit")(items.submit)
    router.post("/update")(items.update)
    return router


def create_app(
    config: Optional[ServerConfig] = None,
    store: Optional[ItemStore] = None,
) -> HTTPServer:
    """
    Create the cost tracker server.

    Args:
        config: Server configuration (defaults if omitted).
        store: Item store to serve; a fresh empty one if omitted.

    Raises:
        ValueError: If the configuration is invalid.
    """
    config = config or ServerConfig()
    config.validate()

    store = store if store is not None else ItemStore()
    return HTTPServer(config, build_router(store, config.static_dir))
