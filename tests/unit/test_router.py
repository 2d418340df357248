"""
Unit tests for HTTP router.
"""

import pytest

from costtracker.http.router import Router
from costtracker.http.request import HTTPRequest
from costtracker.http.response import NOT_FOUND_PAGE, ResponseBuilder
from costtracker.http.status_codes import HTTPStatus


def make_request(method: str, path: str, query: str = "") -> HTTPRequest:
    """Helper to create test requests."""
    return HTTPRequest(method=method, path=path, query=query)


def echo(label: str):
    """Handler that answers with a fixed label."""
    def handler(request: HTTPRequest):
        return ResponseBuilder().text(label).build()
    return handler


class TestRouter:
    """Tests for Router class."""

    def test_exact_match(self):
        """Test exact path matching."""
        router = Router()
        router.add_route("/export", echo("export"))

        response = router.handle(make_request("GET", "/export"))

        assert response.status == HTTPStatus.OK
        assert response.body == b"export"

    def test_root_only_matches_root(self):
        router = Router()
        router.add_route("/", echo("root"))

        assert router.match("GET", "/") is not None
        assert router.match("GET", "/x") is None
        assert router.match("GET", "") is None

    def test_trailing_slash_is_significant(self):
        router = Router()
        router.add_route("/index.html", echo("index"))

        assert router.match("GET", "/index.html") is not None
        assert router.match("GET", "/index.html/") is None

    def test_no_match_returns_404_page(self):
        """Test that unmatched routes return the HTML 404 page."""
        router = Router()
        router.add_route("/", echo("root"))

        response = router.handle(make_request("GET", "/nonexistent"))

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.content_type.startswith("text/html")
        assert response.body.decode("utf-8") == NOT_FOUND_PAGE

    def test_wrong_method_returns_404_page(self):
        """A known path with the wrong method is not a match."""
        router = Router()
        router.add_route("/submit", echo("submit"), method="POST")

        response = router.handle(make_request("GET", "/submit"))

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.body.decode("utf-8") == NOT_FOUND_PAGE

    def test_method_is_case_sensitive(self):
        router = Router()
        router.add_route("/", echo("root"))

        assert router.match("get", "/") is None

    def test_registered_method_uppercased(self):
        router = Router()
        route = router.add_route("/", echo("root"), method="post")

        assert route.method == "POST"

    def test_first_match_wins(self):
        router = Router()
        router.add_route("/static/*path", echo("wildcard"))
        router.add_route("/static/styles.css", echo("exact"))

        response = router.handle(make_request("GET", "/static/styles.css"))

        assert response.body == b"wildcard"

    def test_query_not_part_of_match(self):
        router = Router()
        router.add_route("/edit", echo("edit"))

        response = router.handle(make_request("GET", "/edit", query="index=0"))

        assert response.body == b"edit"


class TestWildcardRoutes:
    """Tests for /prefix/*name patterns."""

    @pytest.mark.parametrize("path,captured", [
        ("/static/styles.css", "styles.css"),
        ("/static/js/app.js", "js/app.js"),
        ("/static/", ""),
    ])
    def test_wildcard_captures_rest(self, path, captured):
        router = Router()
        router.add_route("/static/*path", echo("static"))

        found = router.match("GET", path)

        assert found is not None
        assert found.params == {"path": captured}

    def test_wildcard_needs_prefix(self):
        router = Router()
        router.add_route("/static/*path", echo("static"))

        assert router.match("GET", "/static") is None
        assert router.match("GET", "/staticfoo") is None

    def test_params_attached_to_request(self):
        router = Router()
        seen = {}

        @router.get("/static/*path")
        def handler(request: HTTPRequest):
            seen.update(request.path_params)
            return ResponseBuilder().text("ok").build()

        router.handle(make_request("GET", "/static/formatter.js"))

        assert seen == {"path": "formatter.js"}


class TestDecoratorRegistration:
    """Tests for decorator-style route registration."""

    def test_get_and_post_decorators(self):
        router = Router()

        @router.get("/")
        def listing(request):
            return ResponseBuilder().text("listing").build()

        @router.post("/submit")
        def submit(request):
            return ResponseBuilder().text("submit").build()

        assert [(r.method, r.path) for r in router.routes] == [
            ("GET", "/"),
            ("POST", "/submit"),
        ]
        assert router.handle(make_request("POST", "/submit")).body == b"submit"

    def test_decorator_returns_handler(self):
        router = Router()

        def listing(request):
            return ResponseBuilder().text("listing").build()

        assert router.get("/")(listing) is listing
