"""Квиз по документу: текст из upstream -> резервный генератор вопросов."""
import logging

from studysphere.api.errors import ApiError, require_configured
from studysphere.contracts.schemas import QuizResponse
from studysphere.rag.fallback import document_info, generate_quiz
from studysphere.rag.locator import has_content
from studysphere.services import content
from studysphere.services.cascade import MODE_OFFLINE, Strategy, run_cascade
from studysphere.settings import Settings
from studysphere.upstream.rag_client import RagClient

logger = logging.getLogger(__name__)

QUIZ_QUERY = "key facts, definitions and concepts of this document"


def build_quiz(client: RagClient, settings: Settings, document_id: str, question_count: int = 5) -> QuizResponse:
    require_configured(settings)
    logger.info("[QUIZ] start document_id=%s question_count=%s", document_id, question_count)

    def from_text(text: str, source: str, mode: str | None = None) -> QuizResponse:
        questions = generate_quiz(text, question_count)
        return QuizResponse(
            quiz=questions,
            total_questions=len(questions),
            source=source,
            document_id=document_id,
            processing_status="completed" if mode is None else "simulated",
            mode=mode,
            content_length=len(text),
            document_info=document_info(text),
        )

    def from_search(found: content.SearchContent | None) -> QuizResponse | None:
        if found is None or not has_content(found.proxy, settings.min_content_chars):
            return None
        return from_text(found.proxy, "search_paragraphs")

    def direct_resource() -> QuizResponse | None:
        text = content.resource_text(client, settings, document_id)
        return from_text(text, "direct_content_extraction") if text else None

    def content_endpoints() -> QuizResponse | None:
        found = content.endpoint_text(client, settings, document_id)
        if found is None:
            return None
        name, text = found
        return from_text(text, f"endpoint_{name}")

    def fallback(mode: str) -> QuizResponse:
        if mode == MODE_OFFLINE:
            return from_text("", "simulated", mode)
        raise ApiError(
            500,
            "Failed to extract document content for quiz generation",
            "Could not retrieve text content from the document",
        )

    strategies = [
        Strategy("direct_resource", direct_resource),
        Strategy("content_endpoints", content_endpoints),
        Strategy(
            "filtered_search",
            lambda: from_search(content.filtered_search(client, settings, QUIZ_QUERY, document_id)),
        ),
        Strategy("search", lambda: from_search(content.search(client, settings))),
    ]
    return run_cascade("quiz", strategies, fallback)
