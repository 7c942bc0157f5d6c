"""
Резервная генерация контента из извлечённого текста: саммари, квиз, служебные ответы.

Офлайн и детерминированно: категория документа определяется по ключевым словам,
дальше шаблон или заготовленный набор вопросов. Результат непустой для любого текста,
в том числе пустого или не на английском.
"""
import logging
import math
import re
from collections import Counter

from studysphere.contracts.schemas import QuizQuestion
from studysphere.prompts.render import render_template
from studysphere.rag.formats import flatten_text, normalize_text, truncate_preview

logger = logging.getLogger(__name__)

LEGAL = "legal"
STUDY_NOTES = "study_notes"
GENERIC = "generic"

CATEGORY_MARKERS: list[tuple[str, tuple[str, ...]]] = [
    (LEGAL, ("lease", "tenant", "landlord", "agreement")),
    (STUDY_NOTES, ("study notes", "topic:", "algorithms", "data structures")),
]

SUMMARY_HEADERS = {
    LEGAL: "⚖️ **Legal Document Summary**",
    STUDY_NOTES: "📚 **Study Notes Summary**",
    GENERIC: "📄 **Document Summary**",
}

CATEGORY_LABELS = {
    LEGAL: "Legal Document",
    STUDY_NOTES: "Study Notes",
    GENERIC: "Generic Document",
}

MAX_QUESTIONS = 10
MAX_TOPICS = 8
MAX_KEY_POINTS = 5
EXCERPT_CHARS = 200
CHARS_PER_PAGE = 500

STUDY_NOTES_QUESTIONS = [
    {
        "question": "What is the time complexity for accessing an element in an array by index?",
        "options": ["O(1)", "O(n)", "O(log n)", "O(n²)"],
        "correct": "A",
        "explanation": "Arrays provide constant time O(1) access to elements by index since they use direct memory addressing.",
    },
    {
        "question": "Which data structure follows the LIFO (Last In First Out) principle?",
        "options": ["Queue", "Stack", "Array", "Linked List"],
        "correct": "B",
        "explanation": "Stack follows LIFO principle where the last element pushed is the first one to be popped.",
    },
    {
        "question": "What is the average time complexity of Quick Sort?",
        "options": ["O(n)", "O(n log n)", "O(n²)", "O(log n)"],
        "correct": "B",
        "explanation": "Quick Sort has an average time complexity of O(n log n), though worst case is O(n²).",
    },
    {
        "question": "Which search algorithm requires the array to be sorted?",
        "options": ["Linear Search", "Binary Search", "Bubble Sort", "Hash Search"],
        "correct": "B",
        "explanation": "Binary Search requires a sorted array to work by dividing the search space in half each iteration.",
    },
    {
        "question": "What data structure does BFS (Breadth First Search) use for traversal?",
        "options": ["Stack", "Queue", "Array", "Hash Table"],
        "correct": "B",
        "explanation": "BFS uses a queue to maintain the order of nodes to visit, ensuring level-by-level traversal.",
    },
]

LEGAL_QUESTIONS = [
    {
        "question": "What type of document is this?",
        "options": ["Purchase Agreement", "Lease Agreement", "Employment Contract", "Service Agreement"],
        "correct": "B",
        "explanation": "This is a lease agreement based on the references to landlord, tenant, and rental terms.",
    },
    {
        "question": "What are the key parties typically involved in this type of document?",
        "options": ["Buyer and Seller", "Employer and Employee", "Landlord and Tenant", "Client and Service Provider"],
        "correct": "C",
        "explanation": "Lease agreements involve landlords (property owners) and tenants (renters).",
    },
    {
        "question": "What type of legal obligations does this document typically contain?",
        "options": ["Employment duties", "Rental terms and responsibilities", "Purchase conditions", "Service deliverables"],
        "correct": "B",
        "explanation": "Lease agreements outline rental terms, payment obligations, and property responsibilities.",
    },
]

GENERIC_QUESTIONS = [
    {
        "question": "What type of content processing was used to extract this information?",
        "options": ["Manual transcription", "OCR scanning", "Voice recognition", "Direct digital extraction"],
        "correct": "D",
        "explanation": "The content was extracted directly from the digital document using automated processing.",
    },
    {
        "question": "What is the primary purpose of processing this document?",
        "options": ["Entertainment", "Information extraction and analysis", "Data encryption", "File compression"],
        "correct": "B",
        "explanation": "The document was processed to extract and analyze its informational content.",
    },
]

# Термины-дистракторы для вопросов по ключевым словам
DISTRACTOR_TERMS = (
    "photosynthesis", "cryptocurrency", "volcano", "orchestra", "astronomy",
    "mortgage", "glacier", "tournament", "vaccination", "submarine",
)

STOPWORDS = frozenset((
    "about", "after", "again", "against", "because", "before", "being", "between",
    "during", "further", "having", "other", "should", "their", "there", "these",
    "those", "through", "under", "until", "where", "which", "while", "within",
    "without", "would", "could", "shall", "document",
))

_WORD_RE = re.compile(r"[^\W\d_]{6,}")
_NUMBERED_RE = re.compile(r"^\d+\.")


def classify_text(text: str | None) -> str:
    """legal / study_notes / generic по маркерам в тексте в нижнем регистре."""
    lowered = flatten_text(text or "").lower()
    for category, markers in CATEGORY_MARKERS:
        if any(marker in lowered for marker in markers):
            return category
    return GENERIC


def extract_outline(text: str) -> tuple[list[str], list[str]]:
    """Темы (строки с "Topic:" или с двоеточием в конце) и нумерованные пункты."""
    topics: list[str] = []
    key_points: list[str] = []
    for line in normalize_text(text).split("\n"):
        trimmed = line.strip()
        if not trimmed:
            continue
        if "Topic:" in trimmed or trimmed.endswith(":"):
            topic = trimmed.replace("Topic:", "", 1).replace(":", "", 1).strip()
            if topic and topic not in topics:
                topics.append(topic)
        elif _NUMBERED_RE.match(trimmed):
            key_points.append(trimmed)
    return topics[:MAX_TOPICS], key_points[:MAX_KEY_POINTS]


def page_estimate(text: str) -> int:
    return max(1, math.ceil(len(text) / CHARS_PER_PAGE))


def generate_summary(text: str | None) -> str:
    """Саммари по шаблону категории: заголовок, темы, ключевые пункты, обзор с началом текста."""
    text = text or ""
    category = classify_text(text)
    topics, key_points = extract_outline(text)
    summary = render_template(
        f"summary_{category}_v1.txt",
        header=SUMMARY_HEADERS[category],
        topics=topics,
        key_points=key_points,
        pages=page_estimate(text),
        length=len(text),
        excerpt=truncate_preview(text, EXCERPT_CHARS),
    )
    logger.info(
        "[FALLBACK] summary category=%s topics=%d key_points=%d len=%d",
        category, len(topics), len(key_points), len(summary),
    )
    return summary


def _length_question(text: str) -> dict:
    length = len(text)
    return {
        "question": "What is the total length of the document content?",
        "options": [
            f"{length} characters",
            f"{length + 100} characters",
            f"{length + 500} characters",
            f"{length * 2 + 1000} characters",
        ],
        "correct": "A",
        "explanation": f"The document contains exactly {length} characters of extracted text.",
    }


def top_keywords(text: str, limit: int = 3) -> list[tuple[str, int]]:
    """Самые частые слова от 6 букв; при равенстве — по алфавиту."""
    words = [w.lower() for w in _WORD_RE.findall(text or "")]
    counts = Counter(w for w in words if w not in STOPWORDS)
    ranked = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
    return ranked[:limit]


def keyword_questions(text: str, limit: int = 3) -> list[dict]:
    """Вопросы «какой термин встречается в документе» с дистракторами, которых в тексте нет."""
    lowered = (text or "").lower()
    distractors = [t for t in DISTRACTOR_TERMS if t not in lowered]
    questions = []
    for index, (word, count) in enumerate(top_keywords(text, limit)):
        picked = [distractors[(index * 3 + j) % len(distractors)] for j in range(3)] if len(distractors) >= 3 else []
        if len(set(picked)) < 3:
            continue
        options = list(picked)
        # Позиция правильного ответа меняется от вопроса к вопросу
        options.insert(index % 4, word)
        questions.append({
            "question": "Which of the following terms appears in the document?",
            "options": options,
            "correct_answer": word,
            "explanation": f'The term "{word}" appears {count} time{"s" if count != 1 else ""} in the extracted text.',
        })
    return questions


def _question_bank(text: str, category: str) -> list[dict]:
    if category == STUDY_NOTES:
        bank = list(STUDY_NOTES_QUESTIONS)
    elif category == LEGAL:
        bank = list(LEGAL_QUESTIONS)
    else:
        bank = [_length_question(text)]
    bank.extend(keyword_questions(text))
    if category != GENERIC:
        bank.append(_length_question(text))
    bank.extend(GENERIC_QUESTIONS)
    return bank


def generate_quiz(text: str | None, count: int = 5) -> list[QuizQuestion]:
    """Квиз из заготовок категории, добитый вопросами по ключевым словам и общими вопросами."""
    text = text or ""
    category = classify_text(text)
    bank = _question_bank(text, category)
    n = min(max(1, int(count)), MAX_QUESTIONS, len(bank))
    questions = [QuizQuestion.model_validate(q) for q in bank[:n]]
    logger.info("[FALLBACK] quiz category=%s requested=%s generated=%d", category, count, len(questions))
    return questions


def document_info(text: str | None) -> dict:
    text = text or ""
    category = classify_text(text)
    info: dict = {"type": CATEGORY_LABELS[category], "content_length": len(text)}
    if category == STUDY_NOTES:
        info["topics"] = ["Data Structures", "Algorithms", "Time Complexity"]
    elif category == LEGAL:
        info["category"] = "Lease Agreement"
    return info


def simulated_summary() -> str:
    return render_template("simulated_summary_v1.txt")


def indexing_summary(text: str | None = None) -> str:
    """Сообщение «документ ещё индексируется»."""
    text = text or ""
    return render_template(
        "indexing_v1.txt",
        length=len(text),
        category_label=CATEGORY_LABELS[classify_text(text)],
    )


def simulated_answer(question: str | None) -> str:
    """Ответ-заглушка, когда upstream недоступен; выбирается по словам в вопросе."""
    q = (question or "").lower()
    if "summar" in q:
        return (
            "The document introduces its subject, explains the key concepts with examples, "
            "and closes with the main conclusions. A live summary will be available once the "
            "document intelligence service is reachable."
        )
    if "topic" in q or "key" in q or "concept" in q:
        return (
            "The main topics appear to be the core concepts introduced in the opening sections, "
            "their practical applications, and the examples used to illustrate them."
        )
    if "example" in q:
        return "The document includes practical examples that illustrate how the described concepts are applied."
    return (
        "The answer could not be retrieved from the document right now because the document "
        "intelligence service is unavailable. Please try again in a few minutes."
    )
