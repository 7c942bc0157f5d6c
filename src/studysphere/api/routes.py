"""API: POST /upload, /summarize, /quiz, /question; GET /health."""
import logging

from fastapi import APIRouter, Depends, File, UploadFile

from studysphere.api.deps import get_rag_client, get_settings
from studysphere.api.errors import ApiError
from studysphere.contracts.schemas import (
    AnswerResponse,
    QuestionRequest,
    QuizRequest,
    QuizResponse,
    SummarizeRequest,
    SummaryResponse,
    UploadResponse,
)
from studysphere.rag.formats import format_file_size
from studysphere.services.question import answer_question
from studysphere.services.quiz import build_quiz
from studysphere.services.summarize import summarize
from studysphere.services.upload import PDF_CONTENT_TYPE, upload_document
from studysphere.settings import Settings
from studysphere.upstream.rag_client import RagClient

router = APIRouter()
logger = logging.getLogger(__name__)


def _require_document_id(body) -> str:
    document_id = body.resolved_document_id()
    if not document_id:
        raise ApiError(400, "Document ID is required")
    return document_id


@router.get("/health")
def get_health(settings: Settings = Depends(get_settings)):
    return {"status": "ok", "configured": settings.is_configured}


@router.post("/upload", response_model=UploadResponse, response_model_exclude_none=True)
def post_upload(
    pdf: UploadFile | None = File(default=None),
    settings: Settings = Depends(get_settings),
    client: RagClient = Depends(get_rag_client),
):
    """Принять PDF (multipart-поле pdf) и создать ресурс в knowledge box."""
    if pdf is None:
        raise ApiError(400, "No PDF file provided")
    try:
        if pdf.content_type != PDF_CONTENT_TYPE:
            raise ApiError(400, "Only PDF files are allowed")
        data = pdf.file.read()
        if len(data) > settings.max_upload_bytes:
            raise ApiError(400, f"File size must be less than {format_file_size(settings.max_upload_bytes)}")
        logger.info("[API] POST /upload filename=%r size=%d", pdf.filename, len(data))
        return upload_document(client, settings, pdf.filename, data)
    finally:
        # Спул временного файла удаляется при закрытии
        pdf.file.close()


@router.post("/summarize", response_model=SummaryResponse, response_model_exclude_none=True)
def post_summarize(
    body: SummarizeRequest,
    settings: Settings = Depends(get_settings),
    client: RagClient = Depends(get_rag_client),
):
    document_id = _require_document_id(body)
    logger.info("[API] POST /summarize document_id=%s", document_id)
    return summarize(client, settings, document_id)


@router.post("/quiz", response_model=QuizResponse, response_model_exclude_none=True)
def post_quiz(
    body: QuizRequest,
    settings: Settings = Depends(get_settings),
    client: RagClient = Depends(get_rag_client),
):
    document_id = _require_document_id(body)
    logger.info("[API] POST /quiz document_id=%s question_count=%s", document_id, body.question_count)
    return build_quiz(client, settings, document_id, body.question_count)


@router.post("/question", response_model=AnswerResponse, response_model_exclude_none=True)
def post_question(
    body: QuestionRequest,
    settings: Settings = Depends(get_settings),
    client: RagClient = Depends(get_rag_client),
):
    question = (body.question or "").strip()
    if not question:
        raise ApiError(400, "Question is required")
    logger.info("[API] POST /question question=%r", question[:80])
    return answer_question(client, settings, question, body.resolved_document_id())
