"""
Unit tests for the static asset handler.
"""

from pathlib import Path

import pytest

from costtracker.handlers.static import ASSET_ERROR_MESSAGE, StaticFileHandler
from costtracker.http.request import HTTPRequest
from costtracker.http.response import NOT_FOUND_PAGE
from costtracker.http.status_codes import HTTPStatus


def asset_request(relative: str) -> HTTPRequest:
    return HTTPRequest(
        method="GET",
        path=f"/static/{relative}",
        path_params={"path": relative},
    )


@pytest.fixture
def static_root(tmp_path):
    (tmp_path / "styles.css").write_text("body { color: red; }", encoding="utf-8")
    (tmp_path / "formatter.js").write_text("console.log('hola');", encoding="utf-8")
    (tmp_path / "logo.png").write_bytes(b"\x89PNG\r\n")
    (tmp_path / "sub").mkdir()
    return tmp_path


class TestStaticFileHandler:
    """Tests for StaticFileHandler."""

    def test_serves_css(self, static_root):
        response = StaticFileHandler(static_root).handle(asset_request("styles.css"))

        assert response.status == HTTPStatus.OK
        assert response.content_type == "text/css; charset=utf-8"
        assert response.body == b"body { color: red; }"

    def test_serves_js(self, static_root):
        response = StaticFileHandler(static_root).handle(asset_request("formatter.js"))

        assert response.content_type == "application/javascript; charset=utf-8"

    def test_binary_type_has_no_charset(self, static_root):
        response = StaticFileHandler(static_root).handle(asset_request("logo.png"))

        assert response.content_type == "image/png"
        assert response.body == b"\x89PNG\r\n"

    @pytest.mark.parametrize("relative", ["missing.css", "", "sub", "../secret.txt", "sub/../../x"])
    def test_not_served(self, static_root, relative):
        (static_root.parent / "secret.txt").write_text("secret", encoding="utf-8")

        response = StaticFileHandler(static_root).handle(asset_request(relative))

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.body.decode("utf-8") == NOT_FOUND_PAGE

    def test_overlong_name_is_404(self, static_root):
        response = StaticFileHandler(static_root).handle(asset_request("a" * 300 + ".css"))

        assert response.status == HTTPStatus.NOT_FOUND
        assert response.body.decode("utf-8") == NOT_FOUND_PAGE

    def test_stat_failure_is_404(self, static_root, monkeypatch):
        handler = StaticFileHandler(static_root)

        def fail(self):
            raise OSError(36, "File name too long")

        monkeypatch.setattr(Path, "is_file", fail)

        assert handler.resolve("styles.css") is None
        assert handler.handle(asset_request("styles.css")).status == HTTPStatus.NOT_FOUND


    def test_unreadable_file_is_500(self, static_root, monkeypatch):
        handler = StaticFileHandler(static_root)

        def fail(self):
            raise PermissionError("denied")

        monkeypatch.setattr(Path, "read_bytes", fail)

        response = handler.handle(asset_request("styles.css"))

        assert response.status == HTTPStatus.INTERNAL_SERVER_ERROR
        assert response.content_type.startswith("text/html")
        assert ASSET_ERROR_MESSAGE.format(name="styles.css") in response.body.decode("utf-8")

    def test_bundled_assets(self):
        handler = StaticFileHandler()

        assert handler.handle(asset_request("styles.css")).status == HTTPStatus.OK
        assert handler.handle(asset_request("formatter.js")).status == HTTPStatus.OK

    def test_missing_root_rejected(self, tmp_path):
        with pytest.raises(ValueError):
            StaticFileHandler(tmp_path / "nope")
