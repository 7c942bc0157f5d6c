"""Загрузка PDF в knowledge box upstream; без конфигурации или при недоступности — симуляция."""
import base64
import logging
import uuid

from studysphere.api.errors import ApiError
from studysphere.contracts.schemas import UploadResponse
from studysphere.settings import Settings
from studysphere.upstream.rag_client import (
    RagClient,
    UpstreamAuthError,
    UpstreamError,
    UpstreamUnavailableError,
)

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"


def build_resource_payload(settings: Settings, document_id: str, filename: str | None, data: bytes) -> dict:
    """JSON-тело создания ресурса: файл передаётся в base64."""
    title = filename or f"Document {document_id}"
    stored_name = filename or f"document-{document_id}.pdf"
    return {
        "slug": f"document-{document_id}",
        "title": title,
        "summary": f"Uploaded PDF: {title}",
        "origin": {
            "source": "upload",
            "source_id": document_id,
            "filename": stored_name,
            "collaborators": [settings.user_id],
        },
        "files": {
            "file": {
                "file": {
                    "filename": stored_name,
                    "content_type": PDF_CONTENT_TYPE,
                    "payload": base64.b64encode(data).decode("ascii"),
                },
            },
        },
    }


def upload_document(
    client: RagClient,
    settings: Settings,
    filename: str | None,
    data: bytes,
    document_id: str | None = None,
) -> UploadResponse:
    document_id = document_id or str(uuid.uuid4())
    title = filename or f"Document {document_id}"

    if not settings.is_configured:
        logger.warning("[UPLOAD] RAG_KEY or KB_ID not set, simulating upload document_id=%s", document_id)
        return UploadResponse(
            document_id=document_id,
            title=title,
            message="PDF uploaded successfully (simulated)",
            mode="simulation",
        )

    logger.info(
        "[UPLOAD] start document_id=%s kb_id=%s size=%d key_present=%s",
        document_id, settings.kb_id, len(data), bool(settings.rag_key),
    )
    try:
        result = client.create_resource(build_resource_payload(settings, document_id, filename, data))
    except (UpstreamAuthError, UpstreamUnavailableError) as e:
        logger.warning("[UPLOAD] upstream offline, falling back to simulation: %s", e)
        return UploadResponse(
            document_id=document_id,
            title=title,
            message="PDF uploaded successfully (offline mode - RAG API unavailable)",
            mode="simulation",
        )
    except UpstreamError as e:
        logger.error("[UPLOAD] upstream error: %s", e)
        raise ApiError(500, "Failed to upload PDF to RAG system", str(e)) from e

    actual_id = result.get("uuid") or result.get("id") or document_id
    logger.info("[UPLOAD] done document_id=%s", actual_id)
    return UploadResponse(
        document_id=str(actual_id),
        title=title,
        message="PDF uploaded and processed successfully",
        knowledge_box_id=settings.kb_id,
    )
