"""Саммари документа: каскад от прямого извлечения текста до симулированного ответа."""
import logging

from studysphere.api.errors import require_configured
from studysphere.contracts.schemas import SummaryResponse
from studysphere.rag.fallback import generate_summary, indexing_summary, simulated_summary
from studysphere.rag.locator import has_content
from studysphere.rag.stream import to_citations
from studysphere.services import content
from studysphere.services.cascade import Strategy, run_cascade
from studysphere.settings import Settings
from studysphere.upstream.rag_client import RagClient

logger = logging.getLogger(__name__)

SUMMARY_QUERY = "summarize the main concepts and key points of this document"


def summarize(client: RagClient, settings: Settings, document_id: str) -> SummaryResponse:
    require_configured(settings)
    logger.info("[SUMMARY] start document_id=%s", document_id)

    def from_text(text: str, source: str) -> SummaryResponse:
        return SummaryResponse(
            summary=generate_summary(text),
            document_id=document_id,
            source=source,
            content_length=len(text),
        )

    def from_search(found: content.SearchContent | None) -> SummaryResponse | None:
        if found is None:
            return None
        sources = to_citations(found.paragraphs, settings.max_sources)
        if len(found.answer) >= settings.min_summary_answer_chars:
            return SummaryResponse(
                summary=found.answer,
                document_id=document_id,
                source="rag_search_generative",
                content_length=len(found.proxy),
                sources=sources,
            )
        if has_content(found.proxy, settings.min_content_chars):
            response = from_text(found.proxy, "search_paragraphs")
            response.sources = sources
            return response
        return None

    def direct_resource() -> SummaryResponse | None:
        text = content.resource_text(client, settings, document_id)
        return from_text(text, "direct_content_extraction") if text else None

    def content_endpoints() -> SummaryResponse | None:
        found = content.endpoint_text(client, settings, document_id)
        if found is None:
            return None
        name, text = found
        return from_text(text, f"endpoint_{name}")

    def indexing_status() -> SummaryResponse | None:
        status = client.resource_status(document_id)
        if status.get("indexed") is not False:
            return None
        return SummaryResponse(
            summary=indexing_summary(),
            document_id=document_id,
            source="indexing_in_progress",
            processing_status="indexing",
        )

    def fallback(mode: str) -> SummaryResponse:
        return SummaryResponse(
            summary=simulated_summary(),
            document_id=document_id,
            source="simulated",
            processing_status="simulated",
            mode=mode,
        )

    strategies = [
        Strategy("direct_resource", direct_resource),
        Strategy("content_endpoints", content_endpoints),
        Strategy(
            "filtered_search",
            lambda: from_search(content.filtered_search(client, settings, SUMMARY_QUERY, document_id)),
        ),
        Strategy("search", lambda: from_search(content.search(client, settings))),
        Strategy("indexing_status", indexing_status),
    ]
    return run_cascade("summarize", strategies, fallback)
