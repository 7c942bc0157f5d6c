"""Контракты HTTP API: запросы, ответы, вопросы квиза, цитаты, клиентская сессия."""
from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

OPTION_LETTERS = "ABCD"
QUIZ_OPTION_COUNT = 4
# Чем добивать варианты ответа до четырёх
OPTION_PADDING = ("None of the above", "All of the above", "Not stated in the document", "Cannot be determined")


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class Citation(BaseModel):
    """Source passed through from upstream citations or search paragraphs."""

    text: str = ""
    score: float = 0.8
    page: int | None = None
    position: Any = None

    @classmethod
    def from_upstream(cls, raw: Any) -> "Citation":
        """Build from an upstream dict, defaulting every missing field."""
        if isinstance(raw, str):
            return cls(text=raw)
        if not isinstance(raw, dict):
            return cls()
        text = raw.get("text") or raw.get("content") or ""
        score = raw.get("score")
        page = raw.get("page")
        return cls(
            text=text if isinstance(text, str) else str(text),
            score=float(score) if isinstance(score, (int, float)) else 0.8,
            page=page if isinstance(page, int) else None,
            position=raw.get("position"),
        )


class QuizQuestion(BaseModel):
    """Вопрос квиза: ровно 4 варианта, correct_answer — один из них."""

    question: str
    options: list[str]
    correct_answer: str
    explanation: str = ""

    @model_validator(mode="before")
    @classmethod
    def _normalize(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        options = [str(o) for o in (data.get("options") or [])]
        options = list(dict.fromkeys(options))[:QUIZ_OPTION_COUNT]
        correct = data.get("correct_answer", data.get("correct"))
        correct = "" if correct is None else str(correct)
        # Буква A-D указывает на вариант по индексу
        if correct not in options and len(correct) == 1 and correct.upper() in OPTION_LETTERS:
            index = OPTION_LETTERS.index(correct.upper())
            if index < len(options):
                correct = options[index]
        if correct and correct not in options:
            options = options[: QUIZ_OPTION_COUNT - 1] + [correct]
        for pad in OPTION_PADDING:
            if len(options) >= QUIZ_OPTION_COUNT:
                break
            if pad not in options:
                options.append(pad)
        if not correct:
            correct = options[0]
        data.pop("correct", None)
        data["options"] = options
        data["correct_answer"] = correct
        return data

    @model_validator(mode="after")
    def _check(self) -> "QuizQuestion":
        if len(self.options) != QUIZ_OPTION_COUNT:
            raise ValueError(f"options must have exactly {QUIZ_OPTION_COUNT} entries")
        if self.correct_answer not in self.options:
            raise ValueError("correct_answer must be one of options")
        return self


class ChatMessage(BaseModel):
    """Один ход диалога. Хранится только у клиента."""

    role: Literal["user", "assistant"]
    text: str
    timestamp: str = Field(default_factory=utc_now)
    confidence: float | None = Field(default=None, ge=0.0, le=1.0)
    sources: list[Citation] = Field(default_factory=list)


class ClientSession(BaseModel):
    """Состояние, которое держит клиент: id документа и история чата."""

    document_id: str | None = None
    messages: list[ChatMessage] = Field(default_factory=list)


class _DocumentRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    document_id: str | None = None
    session: ClientSession | None = None

    def resolved_document_id(self) -> str | None:
        """Явный document_id, иначе id из клиентской сессии."""
        if self.document_id:
            return self.document_id
        if self.session is not None and self.session.document_id:
            return self.session.document_id
        return None


class SummarizeRequest(_DocumentRequest):
    pass


class QuizRequest(_DocumentRequest):
    question_count: int = 5


class QuestionRequest(_DocumentRequest):
    question: str | None = None


class UploadResponse(BaseModel):
    document_id: str
    title: str
    message: str
    knowledge_box_id: str | None = None
    mode: str | None = None


class SummaryResponse(BaseModel):
    summary: str
    document_id: str
    source: str
    processing_status: str = "completed"
    mode: str | None = None
    content_length: int = 0
    sources: list[Citation] = Field(default_factory=list)


class QuizResponse(BaseModel):
    quiz: list[QuizQuestion]
    total_questions: int
    source: str
    document_id: str
    processing_status: str = "completed"
    mode: str | None = None
    content_length: int = 0
    document_info: dict[str, Any] = Field(default_factory=dict)


class AnswerResponse(BaseModel):
    answer: str
    question: str
    document_id: str | None = None
    sources: list[Citation] = Field(default_factory=list)
    confidence: float = Field(ge=0.0, le=1.0)
    answered_at: str = Field(default_factory=utc_now)
    source: str
    mode: str | None = None
    message: ChatMessage | None = None
