"""Ответ на вопрос по документу: /ask upstream, затем поиск, затем симулированный ответ."""
import logging

from studysphere.api.errors import require_configured
from studysphere.contracts.schemas import AnswerResponse, ChatMessage, Citation
from studysphere.prompts.render import render_template
from studysphere.rag.fallback import simulated_answer
from studysphere.rag.locator import has_content
from studysphere.rag.stream import parse_stream, to_citations
from studysphere.services import content
from studysphere.services.cascade import MODE_OFFLINE, Strategy, run_cascade
from studysphere.settings import Settings
from studysphere.upstream.rag_client import (
    RagClient,
    UpstreamAuthError,
    UpstreamError,
    UpstreamUnavailableError,
)

logger = logging.getLogger(__name__)

CONFIDENCE_ASK = 0.9
CONFIDENCE_SEARCH = 0.8
CONFIDENCE_CONTEXT = 0.75
CONFIDENCE_OFFLINE = 0.7
CONFIDENCE_DEGRADED = 0.5


def _generated_text(result: dict) -> str:
    for key in ("text", "response", "answer"):
        value = result.get(key)
        if isinstance(value, str) and value.strip():
            return value.strip()
    return ""


def answer_question(
    client: RagClient,
    settings: Settings,
    question: str,
    document_id: str | None = None,
) -> AnswerResponse:
    require_configured(settings)
    logger.info("[QA] start question=%r document_id=%s", question[:80], document_id)

    def build(answer: str, source: str, confidence: float, sources: list[Citation], mode: str | None = None):
        return AnswerResponse(
            answer=answer,
            question=question,
            document_id=document_id,
            sources=sources,
            confidence=confidence,
            source=source,
            mode=mode,
            message=ChatMessage(role="assistant", text=answer, confidence=confidence, sources=sources),
        )

    def document_context() -> str:
        if not document_id:
            return ""
        try:
            return content.resource_text(client, settings, document_id)
        except (UpstreamAuthError, UpstreamUnavailableError):
            raise
        except UpstreamError as e:
            logger.info("[QA] resource context unavailable: %s", e)
            return ""

    def ask() -> AnswerResponse | None:
        payload: dict = {"query": question, "features": ["semantic"], "show": ["basic"]}
        context = document_context()
        if context:
            payload["extra_context"] = [context[: settings.proxy_max_chars]]
        stream = parse_stream(client.ask(payload))
        answer = stream.answer_text.strip()
        if len(answer) < settings.min_answer_chars:
            return None
        return build(answer, "openai", CONFIDENCE_ASK, to_citations(stream.citations, settings.max_sources))

    def from_search(found: content.SearchContent | None) -> AnswerResponse | None:
        if found is None:
            return None
        sources = to_citations(found.paragraphs, settings.max_sources)
        if len(found.answer) >= settings.min_answer_chars:
            return build(found.answer, "rag_search_generative", CONFIDENCE_SEARCH, sources)
        if not has_content(found.proxy, settings.min_content_chars):
            return None
        prompt = render_template("answer_with_context_v1.txt", question=question, context=found.proxy)
        answer = _generated_text(client.generate({"prompt": prompt, "max_tokens": 500, "temperature": 0.3}))
        if len(answer) < settings.min_answer_chars:
            return None
        return build(answer, "search_context", CONFIDENCE_CONTEXT, sources)

    def fallback(mode: str) -> AnswerResponse:
        confidence = CONFIDENCE_OFFLINE if mode == MODE_OFFLINE else CONFIDENCE_DEGRADED
        return build(simulated_answer(question), "simulated", confidence, [], mode)

    strategies = [Strategy("ask", ask)]
    if document_id:
        strategies.append(
            Strategy(
                "filtered_search",
                lambda: from_search(content.filtered_search(client, settings, question, document_id)),
            )
        )
    strategies.append(Strategy("search", lambda: from_search(content.search(client, settings, question))))
    return run_cascade("question", strategies, fallback)
