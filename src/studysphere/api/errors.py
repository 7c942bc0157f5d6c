"""Ошибки HTTP API: клиентские (4xx) и предусловия конфигурации (500)."""


class ApiError(Exception):
    """Ошибка, которая отдаётся клиенту как {"error": ..., "details": ...}."""

    def __init__(self, status_code: int, error: str, details: str | None = None):
        self.status_code = status_code
        self.error = error
        self.details = details
        super().__init__(error if details is None else f"{error}: {details}")

    def to_content(self) -> dict:
        content = {"error": self.error}
        if self.details is not None:
            content["details"] = self.details
        return content


class ConfigurationError(ApiError):
    """Не заданы RAG_KEY / KB_ID. Не ретраится, чинится деплоем."""

    def __init__(self, details: str = "RAG_KEY or KB_ID not configured"):
        super().__init__(500, "Configuration missing", details)


def require_configured(settings) -> None:
    """Бросить ConfigurationError, если нет ключа или knowledge box."""
    if not settings.is_configured:
        raise ConfigurationError()
