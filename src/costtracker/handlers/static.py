"""
=============================================================================
STATIC ASSETS
=============================================================================

Serves the stylesheet and script the pages link to:

    GET /static/styles.css    → costtracker/static/styles.css
    GET /static/formatter.js  → costtracker/static/formatter.js

The root directory defaults to the assets bundled with the package and
can be pointed elsewhere with --static / HTTP_STATIC_DIR.

=============================================================================
PATH TRAVERSAL
=============================================================================

    GET /static/../../etc/passwd
                 │
                 ▼
    root_dir / "../../etc/passwd" → resolve() → /etc/passwd
                                                     │
                          not inside root_dir ◄──────┘  → 404

Every requested path is resolved (following ".." and symlinks) and must
still be inside the root directory. Escapes are answered exactly like a
missing file, so they reveal nothing about the filesystem.

=============================================================================
"""

import logging
from pathlib import Path
from typing import Optional, Union

from ..http.mime_types import get_content_type
from ..http.request import HTTPRequest
from ..http.response import HTTPResponse, ResponseBuilder, internal_error, not_found_page
from ..inventory.render import render_error_page

logger = logging.getLogger(__name__)

PACKAGE_STATIC_DIR = Path(__file__).resolve().parent.parent / "static"

ASSET_ERROR_MESSAGE = "No se pudo abrir el activo estático: {name}"


class StaticFileHandler:
    """
    Handler for serving static files.

        static = StaticFileHandler()          # bundled assets
        router.get("/static/*path")(static.handle)
    """

    def __init__(self, root_dir: Optional[Union[str, Path]] = None):
        """
        Args:
            root_dir: Directory to serve. All files MUST be inside it.

        Raises:
            ValueError: If root_dir is not a directory.
        """
        self.root_dir = Path(root_dir or PACKAGE_STATIC_DIR).resolve()

        if not self.root_dir.is_dir():
            raise ValueError(f"Static root directory does not exist: {root_dir}")

    def resolve(self, relative: str) -> Optional[Path]:
        """
        Map a request path below /static/ to a file inside root_dir.

        Returns None for anything that is not a regular file inside the
        root (missing, a directory, or outside it).
        """
        relative = relative.lstrip("/")
        if not relative:
            return None

        try:
            full_path = (self.root_dir / relative).resolve()
            full_path.relative_to(self.root_dir)
        except ValueError:
            # Outside root_dir, or a path the OS cannot represent
            logger.warning(f"Rejected static path: {relative!r}")
            return None

        try:
            if not full_path.is_file():
                return None
        except OSError as e:
            # e.g. ENAMETOOLONG
            logger.warning(f"Cannot stat static path {relative!r}: {e}")
            return None
        return full_path

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Serve the file named by the route's *path parameter.

        Unknown files get the site's 404 page; a file that exists but
        cannot be read gets the 500 error page.
        """
        relative = request.path_params.get("path", "")
        full_path = self.resolve(relative)

        if full_path is None:
            return not_found_page()

        try:
            content = full_path.read_bytes()
        except OSError as e:
            logger.error(f"Error serving file {full_path}: {e}")
            return internal_error(render_error_page(ASSET_ERROR_MESSAGE.format(name=relative)))

        return (ResponseBuilder()
                .content_type(get_content_type(full_path))
                .body(content)
                .build())
