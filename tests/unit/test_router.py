"""
Unit tests for the router.
"""

import threading

import pytest

from wilson.exceptions import ConfigurationError
from wilson.handlers import FunctionHandler, Handler, RedirectHandler
from wilson.http.request import HTTPRequest
from wilson.http.response import HTTPResponse
from wilson.http.router import DEFAULT_NOT_FOUND_TEXT, Router


def make_request(method: str, path: str) -> HTTPRequest:
    """Helper to create a request for testing."""
    return HTTPRequest(method=method, path=path)


def hello_handler(request: HTTPRequest, response: HTTPResponse):
    response.text("Hello, World!")


class TestRegistration:
    """Tests for adding routes."""

    def test_register_wraps_function(self):
        router = Router()
        handler = router.register("GET", "/", hello_handler)

        assert isinstance(handler, FunctionHandler)
        assert router.lookup("GET", "/") is handler

    def test_register_accepts_handler_object(self):
        router = Router()
        redirect = RedirectHandler("/new")

        router.register("GET", "/old", redirect)

        assert router.lookup("GET", "/old") is redirect

    def test_decorator_style(self):
        router = Router()

        @router.post("/items")
        def create(request, response):
            response.set_status(201)

        assert router.lookup("POST", "/items") is not None
        # The decorator hands back the original function
        assert create.__name__ == "create"

    def test_direct_style(self):
        router = Router()
        router.put("/items", hello_handler)
        router.delete("/items", hello_handler)

        assert router.routes() == [("DELETE", "/items"), ("PUT", "/items")]

    def test_duplicate_registration_replaces(self):
        """The later handler for the same (method, path) wins."""
        router = Router()
        router.get("/", lambda req, res: res.text("first"))
        router.get("/", lambda req, res: res.text("second"))

        response = router.dispatch(make_request("GET", "/"))

        assert response.body == b"second"
        assert router.routes() == [("GET", "/")]

    def test_unsupported_method_rejected(self):
        router = Router()

        with pytest.raises(ConfigurationError):
            router.register("PATCH", "/", hello_handler)

    def test_non_callable_rejected(self):
        router = Router()

        with pytest.raises(ConfigurationError):
            router.register("GET", "/", "not a handler")

    def test_static_mode_rejects_registration(self):
        router = Router()
        router.enable_static_mode()

        with pytest.raises(ConfigurationError):
            router.get("/api", hello_handler)

    def test_internal_register_bypasses_static_mode(self):
        router = Router()
        router.enable_static_mode()

        router._register("GET", "/index.html", hello_handler)

        assert router.lookup("GET", "/index.html") is not None


class TestDispatch:
    """Tests for Router.dispatch()."""

    def test_found_route(self):
        router = Router()
        router.get("/", hello_handler)

        response = router.dispatch(make_request("GET", "/"))

        assert response.status == 200
        assert response.body == b"Hello, World!"
        assert response.headers["x-powered-by"] == "Wilson-Server"

    def test_handler_gets_fresh_response_each_time(self):
        seen = []

        def record(request, response):
            seen.append(response)
            response.set_header("X-Count", str(len(seen)))

        router = Router()
        router.get("/", record)
        router.dispatch(make_request("GET", "/"))
        router.dispatch(make_request("GET", "/"))

        assert seen[0] is not seen[1]
        assert seen[1].headers["X-Count"] == "2"

    def test_unknown_method_is_405(self):
        """No routes at all for the method: 405 with an empty body."""
        router = Router()
        router.get("/", hello_handler)

        response = router.dispatch(make_request("BREW", "/"))

        assert response.status == 405
        assert response.body == b""
        assert response.headers["x-powered-by"] == "Wilson-Server"

    def test_method_without_routes_is_405(self):
        router = Router()
        router.get("/", hello_handler)

        assert router.dispatch(make_request("POST", "/")).status == 405

    def test_unknown_path_is_404_default_text(self):
        router = Router()
        router.get("/", hello_handler)

        response = router.dispatch(make_request("GET", "/missing"))

        assert response.status == 404
        assert response.body == DEFAULT_NOT_FOUND_TEXT.encode()
        assert response.headers["Content-Type"] == "text/plain"

    def test_custom_not_found_forced_to_404(self):
        router = Router()
        router.get("/", hello_handler)
        router.set_not_found(HTTPResponse(status=200).html_string("<h1>Gone</h1>"))

        response = router.dispatch(make_request("GET", "/nope"))

        assert response.status == 404
        assert response.body == b"<h1>Gone</h1>"

    def test_not_found_template_never_mutated(self):
        """x-powered-by goes on a copy, never on the shared template."""
        router = Router()
        router.get("/", hello_handler)

        for _ in range(3):
            router.dispatch(make_request("GET", "/missing"))

        assert "x-powered-by" not in router.not_found.headers
        assert router.not_found.status == 404

    def test_set_not_found_copies_argument(self):
        router = Router()
        template = HTTPResponse().text("x")
        router.set_not_found(template)

        template.set_header("X-Late", "1")

        assert "X-Late" not in router.not_found.headers

    def test_handler_exception_propagates(self):
        router = Router()
        router.get("/boom", lambda req, res: 1 / 0)

        with pytest.raises(ZeroDivisionError):
            router.dispatch(make_request("GET", "/boom"))

    def test_custom_powered_by(self):
        router = Router(powered_by="Test/1.0")
        router.get("/", hello_handler)

        assert router.dispatch(make_request("GET", "/")).headers["x-powered-by"] == "Test/1.0"

    def test_paths_match_exactly(self):
        router = Router()
        router.get("/users", hello_handler)

        assert router.dispatch(make_request("GET", "/users/")).status == 404
        assert router.dispatch(make_request("GET", "/users?x=1")).status == 404

    def test_concurrent_404s_leave_template_intact(self):
        router = Router()
        router.get("/", hello_handler)
        errors = []

        def hammer():
            try:
                for i in range(200):
                    response = router.dispatch(make_request("GET", f"/missing/{i}"))
                    assert response.status == 404
                    assert response.headers["x-powered-by"] == "Wilson-Server"
            except AssertionError as e:
                errors.append(e)

        threads = [threading.Thread(target=hammer) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert router.not_found.headers == {"Content-Type": "text/plain"}


class TestHandlerObjects:
    """Handlers implemented as classes."""

    def test_custom_handler_subclass(self):
        class Greeter(Handler):
            def __init__(self, name):
                self.name = name

            def handle(self, request, response):
                response.text(f"Hi {self.name}")

        router = Router()
        router.get("/", Greeter("Ada"))

        assert router.dispatch(make_request("GET", "/")).body == b"Hi Ada"

    def test_redirect_handler(self):
        router = Router()
        router.get("/old", RedirectHandler("/new", 302))

        response = router.dispatch(make_request("GET", "/old"))

        assert response.status == 302
        assert response.headers["Location"] == "/new"
