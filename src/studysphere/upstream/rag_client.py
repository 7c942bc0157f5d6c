"""Синхронный клиент upstream RAG API (knowledge box: resources, search, ask, generate)."""
import json
import logging
from typing import Any

import httpx

from studysphere.rag.locator import text_from_payload
from studysphere.settings import Settings

logger = logging.getLogger(__name__)

USER_AGENT = "StudySphere/1.0"

AUTH_FAILURE_STATUSES = (401, 403)

# Подстроки тела ответа, по которым ошибка считается ошибкой аутентификации
AUTH_FAILURE_MARKERS = (
    "invalid_token",
    "Jwt verification fails",
    "kid:sa token",
    "AnonymousUser",
)


class UpstreamError(Exception):
    """Upstream ответил не-2xx или телом, которое не удалось разобрать."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class UpstreamAuthError(UpstreamError):
    """Upstream отверг учётные данные. Ретраить бессмысленно."""


class UpstreamUnavailableError(UpstreamError):
    """Upstream недоступен (DNS, соединение, таймаут)."""

    def __init__(self, url: str, cause: Exception | None = None):
        self.url = url
        self.cause = cause
        super().__init__(f"Upstream RAG API unavailable: {url} ({cause})")


def is_auth_failure(message: str | None, status_code: int | None = None) -> bool:
    """
    Ошибка аутентификации: статус 401/403 или известная сигнатура в теле ответа.
    Коды статуса в тексте тела не ищутся.
    """
    if status_code in AUTH_FAILURE_STATUSES:
        return True
    if not message:
        return False
    return any(marker in message for marker in AUTH_FAILURE_MARKERS)


class RagClient:
    """
    Обёртка над httpx.Client для одного запроса к API.
    transport: для тестов, подмена транспорта (httpx.MockTransport).
    """

    def __init__(self, settings: Settings, transport: httpx.BaseTransport | None = None):
        self.settings = settings
        self._http = httpx.Client(
            base_url=settings.rag_api_base.rstrip("/"),
            timeout=settings.upstream_timeout,
            transport=transport,
            headers={
                "X-NUCLIA-SERVICEACCOUNT": f"Bearer {settings.rag_key}",
                "User-Agent": USER_AGENT,
            },
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "RagClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        try:
            response = self._http.request(method, url, **kwargs)
        except httpx.TransportError as e:
            logger.error("[UPSTREAM] %s %s transport error: %s", method, url, e)
            raise UpstreamUnavailableError(url, e) from e
        if response.is_success:
            return response
        body = response.text[:500]
        message = f"{response.status_code} - {body}"
        logger.info("[UPSTREAM] %s %s failed status=%s", method, url, response.status_code)
        if is_auth_failure(body, response.status_code):
            raise UpstreamAuthError(message, response.status_code)
        raise UpstreamError(message, response.status_code)

    def _json(self, response: httpx.Response) -> dict[str, Any]:
        try:
            data = response.json()
        except json.JSONDecodeError as e:
            raise UpstreamError(f"JSON decode error: {e}", response.status_code) from e
        if not isinstance(data, dict):
            raise UpstreamError(f"unexpected JSON type {type(data).__name__}", response.status_code)
        return data

    def create_resource(self, payload: dict[str, Any]) -> dict[str, Any]:
        return self._json(self._request("POST", f"{self.settings.kb_path}/resources", json=payload))

    def get_resource(self, resource_id: str, show: str | None = None) -> dict[str, Any]:
        params = {"show": show} if show else None
        response = self._request("GET", f"{self.settings.kb_path}/resource/{resource_id}", params=params)
        return self._json(response)

    def get_text(self, path: str) -> str:
        """GET эндпоинта с извлечённым текстом; JSON сводится к text/body/extracted_text."""
        response = self._request("GET", path)
        content_type = response.headers.get("content-type", "")
        if "application/json" in content_type:
            try:
                payload = response.json()
            except json.JSONDecodeError:
                return response.text
            return text_from_payload(payload)
        return response.text

    def search(self, payload: dict[str, Any]) -> dict[str, Any]:
        return self._json(self._request("POST", f"{self.settings.kb_path}/search", json=payload))

    def ask(self, payload: dict[str, Any]) -> str:
        """POST /ask. Возвращает сырое NDJSON-тело потока."""
        response = self._request("POST", self.settings.ask_url, json=payload)
        return response.text

    def generate(self, payload: dict[str, Any]) -> dict[str, Any]:
        return self._json(self._request("POST", f"{self.settings.kb_path}/generate", json=payload))

    def resource_status(self, resource_id: str) -> dict[str, Any]:
        response = self._request("GET", f"{self.settings.kb_path}/resource/{resource_id}/status")
        return self._json(response)
