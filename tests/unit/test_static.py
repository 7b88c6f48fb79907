"""
Unit tests for static directory mounting and MIME types.
"""

import pytest

from wilson.exceptions import ConfigurationError
from wilson.handlers.static import StaticFileHandler, mount_static_directory
from wilson.http.mime_types import get_content_type
from wilson.http.request import HTTPRequest
from wilson.http.response import HTTPResponse
from wilson.http.router import Router


@pytest.fixture
def site(tmp_path):
    """A small static site."""
    (tmp_path / "index.html").write_text("<h1>Home</h1>")
    (tmp_path / "favicon.ico").write_bytes(b"\x00\x00\x01\x00")
    (tmp_path / "css").mkdir()
    (tmp_path / "css" / "app.css").write_text("body {}")
    (tmp_path / "js").mkdir()
    (tmp_path / "js" / "app.js").write_text("console.log(1)")
    return tmp_path


def get(router: Router, path: str) -> HTTPResponse:
    return router.dispatch(HTTPRequest(method="GET", path=path))


class TestMimeTypes:
    """Tests for get_content_type()."""

    @pytest.mark.parametrize("name,expected", [
        ("index.html", "text/html"),
        ("style.css", "text/css"),
        ("app.js", "text/javascript"),
        ("favicon.ico", "image/x-icon"),
        ("logo.svg", "image/svg+xml"),
        ("notes.txt", "text/plain"),
        ("data.json", "application/json"),
        ("app.js.map", "application/json"),
        ("photo.png", "image/png"),
    ])
    def test_known_extensions(self, name: str, expected: str):
        assert get_content_type(name) == expected

    def test_case_insensitive(self):
        assert get_content_type("LOGO.PNG") == "image/png"

    def test_unknown_defaults_to_text_plain(self):
        assert get_content_type("Makefile") == "text/plain"
        assert get_content_type("archive.xyz") == "text/plain"


class TestMountStaticDirectory:
    """Tests for mount_static_directory()."""

    def test_registers_every_file(self, site):
        router = Router()

        count = mount_static_directory(router, site)

        assert count == 5
        assert router.routes() == [
            ("GET", "/"),
            ("GET", "/css/app.css"),
            ("GET", "/favicon.ico"),
            ("GET", "/index.html"),
            ("GET", "/js/app.js"),
        ]

    def test_mount_point_serves_index(self, site):
        router = Router()
        mount_static_directory(router, site)

        response = get(router, "/")

        assert response.status == 200
        assert response.headers["Content-Type"] == "text/html"
        assert response.body == b"<h1>Home</h1>"

    def test_files_typed_by_extension(self, site):
        router = Router()
        mount_static_directory(router, site)

        assert get(router, "/css/app.css").headers["Content-Type"] == "text/css"
        assert get(router, "/js/app.js").headers["Content-Type"] == "text/javascript"

        icon = get(router, "/favicon.ico")
        assert icon.headers["Content-Type"] == "image/x-icon"
        assert icon.body == b"\x00\x00\x01\x00"

    def test_custom_mount_point(self, site):
        router = Router()
        mount_static_directory(router, site, mount_point="/docs")

        assert get(router, "/docs").body == b"<h1>Home</h1>"
        assert get(router, "/docs/css/app.css").body == b"body {}"
        assert get(router, "/css/app.css").status == 404

    def test_enables_static_mode(self, site):
        router = Router()
        mount_static_directory(router, site)

        assert router.static_mode
        with pytest.raises(ConfigurationError):
            router.get("/api", lambda req, res: None)

    def test_unknown_file_is_404(self, site):
        router = Router()
        mount_static_directory(router, site)

        assert get(router, "/../../etc/passwd").status == 404

    def test_missing_directory(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not a directory"):
            mount_static_directory(Router(), tmp_path / "nope")

    def test_empty_directory(self, tmp_path):
        with pytest.raises(ConfigurationError, match="empty"):
            mount_static_directory(Router(), tmp_path)

    def test_directory_without_index(self, tmp_path):
        (tmp_path / "about.html").write_text("about")

        with pytest.raises(ConfigurationError, match="index.html"):
            mount_static_directory(Router(), tmp_path)

    def test_failed_validation_leaves_router_usable(self, tmp_path):
        router = Router()

        with pytest.raises(ConfigurationError):
            mount_static_directory(router, tmp_path)

        router.get("/", lambda req, res: None)
        assert not router.static_mode


class TestStaticFileHandler:
    """Tests for StaticFileHandler."""

    def test_reads_file_on_each_request(self, tmp_path):
        f = tmp_path / "live.txt"
        f.write_text("v1")
        handler = StaticFileHandler(f)
        request = HTTPRequest(method="GET", path="/live.txt")

        first = HTTPResponse()
        handler.handle(request, first)
        f.write_text("v2")
        second = HTTPResponse()
        handler.handle(request, second)

        assert first.body == b"v1"
        assert second.body == b"v2"

    def test_content_type_override(self, tmp_path):
        f = tmp_path / "page"
        f.write_text("<p>")

        handler = StaticFileHandler(f, "text/html")

        assert handler.content_type == "text/html"

    def test_deleted_file_raises(self, tmp_path):
        f = tmp_path / "gone.txt"
        f.write_text("x")
        handler = StaticFileHandler(f)
        f.unlink()

        with pytest.raises(OSError):
            handler.handle(HTTPRequest(method="GET", path="/gone.txt"), HTTPResponse())
