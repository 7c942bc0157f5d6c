"""Шаги получения текста документа из upstream: ресурс, эндпоинты извлечённого текста, поиск."""
import logging
from dataclasses import dataclass, field

from studysphere.rag.locator import generated_answer, has_content, locate_text, paragraph_proxy, paragraph_results
from studysphere.settings import Settings
from studysphere.upstream.rag_client import (
    RagClient,
    UpstreamAuthError,
    UpstreamError,
    UpstreamUnavailableError,
)

logger = logging.getLogger(__name__)

BROAD_QUERY = "document content text"
SEARCH_FEATURES = ["fulltext", "semantic"]


def content_endpoints(settings: Settings, document_id: str) -> list[str]:
    """Эндпоинты, которые в разных версиях API отдают извлечённый текст файла."""
    base = f"{settings.kb_path}/resource/{document_id}"
    return [
        f"{base}/file/file/extracted",
        f"{base}/extracted",
        f"{base}/download/field/file/extracted",
        f"{base}/text",
    ]


def filter_variants(document_id: str) -> list[str]:
    """Варианты синтаксиса фильтра по ресурсу; какой из них верный, upstream не документирует."""
    return [
        f"/uuid:{document_id}",
        f"/uuid/{document_id}",
        f"uuid:{document_id}",
        f"/resource/uuid:{document_id}",
    ]


@dataclass
class SearchContent:
    """Полезное из ответа /search: сгенерированный ответ, прокси-текст из параграфов, параграфы."""

    answer: str = ""
    proxy: str = ""
    paragraphs: list[dict] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.answer and not self.paragraphs


def resource_text(client: RagClient, settings: Settings, document_id: str) -> str:
    """Текст ресурса (?show=extracted) через locator; короче порога — пустая строка."""
    resource = client.get_resource(document_id, show="extracted")
    text = locate_text(resource)
    if not has_content(text, settings.min_content_chars):
        return ""
    return text


def endpoint_text(client: RagClient, settings: Settings, document_id: str) -> tuple[str, str] | None:
    """Первый эндпоинт с текстом: (имя эндпоинта, текст). Мягкие ошибки — следующий эндпоинт."""
    for path in content_endpoints(settings, document_id):
        try:
            text = client.get_text(path)
        except (UpstreamAuthError, UpstreamUnavailableError):
            raise
        except UpstreamError as e:
            logger.info("[CONTENT] endpoint %s failed: %s", path, e)
            continue
        if has_content(text, settings.min_content_chars):
            name = path.rsplit("/", 1)[-1]
            logger.info("[CONTENT] endpoint %s ok length=%d", path, len(text))
            return name, text
    return None


def _search_payload(query: str, filters: list[str] | None = None) -> dict:
    payload: dict = {
        "query": query,
        "features": SEARCH_FEATURES,
        "generative_answer": True,
        "max_tokens": 300,
    }
    if filters:
        payload["filters"] = filters
    return payload


def _to_content(result: dict, settings: Settings) -> SearchContent:
    return SearchContent(
        answer=generated_answer(result),
        proxy=paragraph_proxy(result, settings.proxy_max_chars, settings.proxy_max_paragraphs),
        paragraphs=paragraph_results(result),
    )


def search(client: RagClient, settings: Settings, query: str = BROAD_QUERY) -> SearchContent:
    """Широкий поиск по всему knowledge box."""
    content = _to_content(client.search(_search_payload(query)), settings)
    logger.info(
        "[CONTENT] search answer_len=%d paragraphs=%d proxy_len=%d",
        len(content.answer), len(content.paragraphs), len(content.proxy),
    )
    return content


def filtered_search(client: RagClient, settings: Settings, query: str, document_id: str) -> SearchContent | None:
    """
    Поиск с фильтром по документу, перебирая варианты синтаксиса фильтра.
    Первый результат с ответом или параграфами; None, если ни один не дал контента.
    """
    for variant in filter_variants(document_id):
        try:
            result = client.search(_search_payload(query, [variant]))
        except (UpstreamAuthError, UpstreamUnavailableError):
            raise
        except UpstreamError as e:
            logger.info("[CONTENT] filter %s failed: %s", variant, e)
            continue
        content = _to_content(result, settings)
        if not content.is_empty:
            logger.info("[CONTENT] filter %s ok paragraphs=%d", variant, len(content.paragraphs))
            return content
    logger.warning("[CONTENT] all filter variants failed document_id=%s", document_id)
    return None
