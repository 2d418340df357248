"""
=============================================================================
HTTP ROUTER
=============================================================================

Maps (method, path) pairs to handler functions.

=============================================================================
ROUTE PATTERNS
=============================================================================

1. STATIC: exact match, character for character

   Pattern: /export
   Matches: /export
   Doesn't match: /export/, /Export, /export.csv

2. WILDCARD (*param): match the remaining path

   Pattern: /static/*path
   Matches: /static/styles.css   → {"path": "styles.css"}
            /static/js/app.js    → {"path": "js/app.js"}
   Must be the LAST segment in the pattern.

Paths are compared exactly as they appear in the request line. There is
no trailing-slash normalization and no percent-decoding, so "/index.html"
and "/index.html/" are different resources.

=============================================================================
FALLBACK
=============================================================================

A request that matches no route, including a known path requested with
the wrong method, gets the same fixed HTML page:

    HTTP/1.1 404 Not Found
    Content-Type: text/html; charset=utf-8

    <html><body><h1>404 - Recurso no encontrado</h1></body></html>

=============================================================================
PATTERN COMPILATION
=============================================================================

    Pattern:  /static/*path
                 │       │
                 ▼       ▼
    Regex:    ^/static/(?P<path>.*)$

Routes are tried in registration order. First match wins.

=============================================================================
"""

from dataclasses import dataclass, field, replace
from typing import Callable, Dict, List, Optional
import logging
import re

from .request import HTTPRequest
from .response import HTTPResponse, not_found_page


logger = logging.getLogger(__name__)

# Handler: a function that takes a request and returns a response
Handler = Callable[[HTTPRequest], HTTPResponse]


@dataclass
class Route:
    """
    A registered route: method + path pattern → handler.

    Attributes:
        path: Original pattern ("/static/*path")
        method: HTTP method, uppercase
        handler: Function called with the request
    """

    path: str
    method: str
    handler: Handler
    _pattern: Optional[re.Pattern] = field(default=None, repr=False)

    def match(self, method: str, path: str) -> Optional[Dict[str, str]]:
        """Return captured parameters if this route matches, else None."""
        if self.method != method:
            return None
        found = self._pattern.match(path) if self._pattern else None
        return found.groupdict() if found else None


@dataclass
class RouteMatch:
    """Result of a successful route lookup."""

    route: Route
    params: Dict[str, str] = field(default_factory=dict)


class Router:
    """
    HTTP request router.

        router = Router()

        @router.get("/")
        def listing(request):
            return ok_html(render_listing(store.snapshot()))

        router.add_route("/submit", submit_handler, method="POST")

        response = router.handle(request)
    """

    def __init__(self):
        self._routes: List[Route] = []

    @property
    def routes(self) -> List[Route]:
        return list(self._routes)

    def add_route(self, path: str, handler: Handler, method: str = "GET") -> Route:
        """
        Register a route.

        Args:
            path: URL pattern ("/edit", "/static/*path")
            handler: Function that takes a request and returns a response
            method: HTTP method

        Returns:
            The registered Route object
        """
        route = Route(
            path=path,
            method=method.upper(),
            handler=handler,
            _pattern=self._compile_pattern(path),
        )
        self._routes.append(route)
        logger.debug(f"Registered route {route.method} {path}")
        return route

    def _compile_pattern(self, path: str) -> re.Pattern:
        """
        Compile a path pattern into an anchored regex.

        Every segment is kept, including empty ones, so "/" compiles to
        ^/$ and trailing slashes stay significant.
        """
        regex_parts = ["^"]

        for segment in path.split("/")[1:]:
            regex_parts.append("/")
            if segment.startswith("*"):
                param_name = segment[1:] or "wildcard"
                regex_parts.append(f"(?P<{param_name}>.*)")
                break  # Wildcard consumes everything, stop here
            regex_parts.append(re.escape(segment))

        regex_parts.append("$")
        return re.compile("".join(regex_parts))

    def match(self, method: str, path: str) -> Optional[RouteMatch]:
        """
        Find the first route matching the method and path.

        Method names are case-sensitive, as in the request line.
        """
        for route in self._routes:
            params = route.match(method, path)
            if params is not None:
                return RouteMatch(route=route, params=params)
        return None

    def handle(self, request: HTTPRequest) -> HTTPResponse:
        """
        Route a request to its handler, or answer with the 404 page.

        Captured pattern parameters are attached to a copy of the request
        as path_params.
        """
        found = self.match(request.method, request.path)

        if found is None:
            logger.debug(f"No route for {request.method} {request.path}")
            return not_found_page()

        if found.params:
            request = replace(request, path_params=found.params)
        return found.route.handler(request)

    # =========================================================================
    # DECORATOR-STYLE ROUTE REGISTRATION
    # =========================================================================

    def route(self, path: str, method: str = "GET") -> Callable[[Handler], Handler]:
        """Decorator form of add_route()."""
        def decorator(handler: Handler) -> Handler:
            self.add_route(path, handler, method)
            return handler
        return decorator

    def get(self, path: str) -> Callable[[Handler], Handler]:
        return self.route(path, "GET")

    def post(self, path: str) -> Callable[[Handler], Handler]:
        return self.route(path, "POST")
