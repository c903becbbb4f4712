"""Shared fixtures: a fake vault backend behind httpx.MockTransport."""

import json
from typing import Any, Callable, Dict, List, Optional, Tuple

import httpx
import pytest

from wpcloud.config import Settings
from wpcloud.controller import VaultController
from wpcloud.models import Identity, Session

API_BASE = "https://vault.test/api"
SAS_URL = "https://blob.test/uploads/alice%40example.com/cat.png?sv=2024&sig=s3cret"


class FakeBackend:
    """Routes requests by (method, host, path) and records every request."""

    def __init__(self) -> None:
        self.routes: Dict[Tuple[str, str, str], Callable[[httpx.Request], httpx.Response]] = {}
        self.requests: List[httpx.Request] = []
        self.transport = httpx.MockTransport(self.handle)

    def on(
        self,
        method: str,
        url: str,
        status: int = 200,
        json_body: Any = None,
        text: Optional[str] = None,
        handler: Optional[Callable[[httpx.Request], httpx.Response]] = None,
    ) -> None:
        if not url.startswith("http"):
            url = f"{API_BASE}{url}"
        parsed = httpx.URL(url)

        def respond(request: httpx.Request) -> httpx.Response:
            if json_body is not None:
                return httpx.Response(status, json=json_body)
            return httpx.Response(status, text=text or "")

        self.routes[(method, parsed.host, parsed.path)] = handler or respond

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.host, request.url.path))
        if route is None:
            return httpx.Response(404, json={"error": f"no route for {request.method} {request.url.path}"})
        return route(request)

    def calls(self, method: str, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path.endswith(path)]

    @staticmethod
    def body(request: httpx.Request) -> Any:
        return json.loads(request.content.decode("utf-8"))


@pytest.fixture
def backend():
    return FakeBackend()


@pytest.fixture
def settings(tmp_path):
    return Settings(
        api_base=API_BASE,
        session_path=str(tmp_path / "session.json"),
        http_log_path=None,
        verify_object_key=True,
        preview_dir=str(tmp_path / "previews"),
    )


@pytest.fixture
def controller(settings, backend):
    ctl = VaultController(settings, transport=backend.transport)
    yield ctl
    ctl.close()


@pytest.fixture
def alice():
    return Session(
        token="tok-alice",
        identity=Identity(owner_id="alice@example.com", email="alice@example.com", user_id="u-1", display_name="Alice"),
    )


@pytest.fixture
def logged_in(controller, alice):
    controller.sessions.save(alice)
    controller.restore()
    return controller


@pytest.fixture
def alice_files(backend):
    backend.on("GET", "/files", json_body={"files": [
        {"key": "alice@example.com/a.png", "size": 10, "last_modified": "2024-05-01T10:00:00Z"},
        {"key": "bob@example.com/secret.png", "size": 20},
        {"key": "alice@example.com/b.jpg", "size": 30},
        {"key": "alice@example.com.evil/c.png"},
    ]})
    return backend
