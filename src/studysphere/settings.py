"""Конфигурация приложения из переменных окружения."""
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Корень проекта: src/studysphere/settings.py -> parent.parent.parent
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=_ENV_FILE,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Upstream RAG API: базовый URL, ключ сервисного аккаунта, knowledge box
    rag_api_base: str = ""
    rag_key: str = ""
    kb_id: str = ""
    user_id: str = "user1"
    # /ask может жить на другом региональном хосте; пусто = {rag_api_base}/v1/kb/{kb_id}/ask
    rag_ask_url: str = ""
    upstream_timeout: float = 30.0
    # Загрузка: лимит размера PDF
    max_upload_bytes: int = 10 * 1024 * 1024
    # Пороги: текст короче min_content_chars считается отсутствующим
    min_content_chars: int = 10
    min_summary_answer_chars: int = 100
    min_answer_chars: int = 10
    # Прокси-контент из параграфов поиска
    proxy_max_chars: int = 4000
    proxy_max_paragraphs: int = 10
    max_sources: int = 3

    @property
    def is_configured(self) -> bool:
        return bool(self.rag_key and self.kb_id)

    @property
    def kb_path(self) -> str:
        return f"/v1/kb/{self.kb_id}"

    @property
    def ask_url(self) -> str:
        if self.rag_ask_url:
            return self.rag_ask_url
        return f"{self.rag_api_base.rstrip('/')}{self.kb_path}/ask"
