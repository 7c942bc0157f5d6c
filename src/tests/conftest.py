"""Фикстуры и конфиг Pytest."""
import sys
from pathlib import Path

import httpx
import pytest

# добавить src в path при запуске тестов из корня репозитория (src/tests/conftest.py -> root = репо, src = root/src)
root = Path(__file__).resolve().parent.parent.parent
src = root / "src"
if str(src) not in sys.path:
    sys.path.insert(0, str(src))

from studysphere.settings import Settings  # noqa: E402
from studysphere.upstream.rag_client import RagClient  # noqa: E402

API_BASE = "https://rag.test/api"
KB_ID = "kb-test"
KB = f"/api/v1/kb/{KB_ID}"


def make_settings(**overrides) -> Settings:
    values = {"rag_api_base": API_BASE, "rag_key": "test-key", "kb_id": KB_ID}
    values.update(overrides)
    return Settings(_env_file=None, **values)


class FakeUpstream:
    """
    Фейковый upstream для httpx.MockTransport: ответы по (method, path).
    Значение маршрута — httpx.Response, исключение (бросается) или callable(request).
    Незарегистрированный маршрут — 404.
    """

    def __init__(self):
        self.routes: dict[tuple[str, str], object] = {}
        self.calls: list[httpx.Request] = []

    def add(self, method: str, path: str, response) -> None:
        self.routes[(method, path)] = response

    def paths(self) -> list[str]:
        return [r.url.path for r in self.calls]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, text='{"detail": "Not found"}')
        if isinstance(route, Exception):
            raise route
        if callable(route):
            return route(request)
        return httpx.Response(route.status_code, headers=route.headers, content=route.content)


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def client(upstream, settings):
    with RagClient(settings, transport=httpx.MockTransport(upstream)) as rag_client:
        yield rag_client
