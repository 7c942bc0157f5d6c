"""HTTP API end-to-end: TestClient, настройки и upstream подменены через dependency_overrides."""
import httpx
import pytest
from fastapi.testclient import TestClient

from conftest import KB, make_settings
from studysphere.api.deps import get_rag_client, get_settings
from studysphere.main import app
from studysphere.upstream.rag_client import RagClient


@pytest.fixture
def api(upstream):
    """Фабрика TestClient для заданных настроек; upstream — FakeUpstream."""

    def make(settings):
        def rag_client():
            with RagClient(settings, transport=httpx.MockTransport(upstream)) as client:
                yield client

        app.dependency_overrides[get_settings] = lambda: settings
        app.dependency_overrides[get_rag_client] = rag_client
        return TestClient(app)

    yield make
    app.dependency_overrides.clear()


def _pdf(content: bytes = b"%PDF-1.4 test", content_type: str = "application/pdf"):
    return {"pdf": ("notes.pdf", content, content_type)}


def test_health(api):
    response = api(make_settings(rag_key="")).get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "configured": False}


def test_upload_without_credentials_is_simulated(api, upstream):
    response = api(make_settings(rag_key="", kb_id="")).post("/upload", files=_pdf())
    assert response.status_code == 200
    data = response.json()
    assert data["document_id"]
    assert "simulated" in data["message"]
    assert data["title"] == "notes.pdf"
    assert upstream.calls == []


def test_upload_returns_upstream_uuid(api, upstream):
    upstream.add("POST", f"{KB}/resources", httpx.Response(201, json={"uuid": "rid-42"}))
    response = api(make_settings()).post("/upload", files=_pdf())
    assert response.status_code == 200
    assert response.json()["document_id"] == "rid-42"


def test_upload_missing_file_is_400(api):
    response = api(make_settings()).post("/upload", data={"other": "field"})
    assert response.status_code == 400
    assert response.json() == {"error": "No PDF file provided"}


def test_upload_pdf_as_plain_form_field_is_400(api):
    response = api(make_settings()).post(
        "/upload",
        data={"pdf": "not-a-file"},
        files={"other": ("notes.txt", b"x", "text/plain")},
    )
    assert response.status_code == 400
    assert response.json() == {"error": "No PDF file provided"}


def test_other_validation_errors_stay_422(api):
    response = api(make_settings()).post("/quiz", json={"document_id": "doc-1", "question_count": "many"})
    assert response.status_code == 422


def test_upload_wrong_type_is_400(api):
    response = api(make_settings()).post("/upload", files=_pdf(b"hello", "text/plain"))
    assert response.status_code == 400
    assert response.json() == {"error": "Only PDF files are allowed"}


def test_upload_too_large_is_400(api):
    response = api(make_settings(max_upload_bytes=8)).post("/upload", files=_pdf(b"%PDF-1.4 too large"))
    assert response.status_code == 400
    assert response.json()["error"] == "File size must be less than 8 Bytes"


def test_upload_wrong_method(api):
    assert api(make_settings()).get("/upload").status_code == 405


def test_upload_upstream_error_is_500(api, upstream):
    upstream.add("POST", f"{KB}/resources", httpx.Response(500, text="disk full"))
    response = api(make_settings()).post("/upload", files=_pdf())
    assert response.status_code == 500
    assert response.json()["error"] == "Failed to upload PDF to RAG system"
    assert "disk full" in response.json()["details"]


def test_summarize_unreachable_upstream_degrades_to_simulated(api, upstream):
    upstream.add("GET", f"{KB}/resource/doc-1", httpx.ConnectError("Name or service not known"))
    response = api(make_settings()).post("/summarize", json={"document_id": "doc-1"})
    assert response.status_code == 200
    data = response.json()
    assert "simulated" in data["source"] or "offline" in data["source"]
    assert data["mode"] == "offline"
    assert data["document_id"] == "doc-1"
    assert data["summary"]


def test_summarize_missing_document_id_is_400(api):
    response = api(make_settings()).post("/summarize", json={})
    assert response.status_code == 400
    assert response.json() == {"error": "Document ID is required"}


def test_summarize_uses_session_document_id(api, upstream):
    upstream.add(
        "GET",
        f"{KB}/resource/doc-7",
        httpx.Response(200, json={"basic": {"text": "The landlord and tenant sign a lease for one year."}}),
    )
    response = api(make_settings()).post("/summarize", json={"session": {"document_id": "doc-7", "messages": []}})
    assert response.status_code == 200
    data = response.json()
    assert data["document_id"] == "doc-7"
    assert data["source"] == "direct_content_extraction"
    assert data["processing_status"] == "completed"


def test_summarize_missing_configuration_is_500(api):
    response = api(make_settings(kb_id="")).post("/summarize", json={"document_id": "doc-1"})
    assert response.status_code == 500
    assert response.json()["error"] == "Configuration missing"
    assert "details" in response.json()


def test_quiz_returns_questions(api, upstream):
    upstream.add(
        "GET",
        f"{KB}/resource/doc-1",
        httpx.Response(200, json={"extracted": {"text": "Study notes on algorithms and data structures."}}),
    )
    response = api(make_settings()).post("/quiz", json={"document_id": "doc-1", "question_count": 4})
    assert response.status_code == 200
    data = response.json()
    assert data["total_questions"] == 4
    assert data["source"] == "direct_content_extraction"
    for q in data["quiz"]:
        assert len(q["options"]) == 4
        assert q["correct_answer"] in q["options"]


def test_quiz_without_content_is_500(api):
    response = api(make_settings()).post("/quiz", json={"document_id": "doc-1"})
    assert response.status_code == 500
    assert response.json()["error"] == "Failed to extract document content for quiz generation"


def test_question_empty_is_400(api):
    response = api(make_settings()).post("/question", json={"document_id": "doc-1", "question": ""})
    assert response.status_code == 400
    assert response.json() == {"error": "Question is required"}


def test_question_missing_is_400(api):
    response = api(make_settings()).post("/question", json={"document_id": "doc-1"})
    assert response.status_code == 400
    assert response.json() == {"error": "Question is required"}


def test_question_answer_shape(api, upstream):
    upstream.add(
        "POST",
        f"{KB}/ask",
        httpx.Response(200, text='{"item": {"type": "answer", "text": "Stacks are LIFO structures."}}\n'),
    )
    response = api(make_settings()).post("/question", json={"question": "What is a stack?"})
    assert response.status_code == 200
    data = response.json()
    assert data["answer"] == "Stacks are LIFO structures."
    assert data["source"] == "openai"
    assert data["sources"] == []
    assert 0 <= data["confidence"] <= 1
    assert data["answered_at"]
    assert data["message"]["role"] == "assistant"
