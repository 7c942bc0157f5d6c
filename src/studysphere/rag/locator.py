"""
Поиск извлечённого текста в ресурсе upstream.

Схема ресурса зависит от версии пайплайна обработки, поэтому текст ищется по
списку путей в порядке приоритета: сначала более специфичные поля, потом общие.
"""
import logging
from typing import Any

logger = logging.getLogger(__name__)

# Путь: последовательность ключей; "*" — все значения словаря на этом уровне
TEXT_PATHS: list[tuple[str, tuple[str, ...]]] = [
    ("data.files.file.extracted.text.text", ("data", "files", "file", "extracted", "text", "text")),
    ("data.texts.*.body", ("data", "texts", "*", "body")),
    ("extracted.text", ("extracted", "text")),
    ("extracted.file.text", ("extracted", "file", "text")),
    ("basic.text", ("basic", "text")),
]

# Ключи, по которым JSON-ответ эндпоинта с текстом сводится к строке
PAYLOAD_TEXT_KEYS = ("text", "body", "extracted_text")


def _resolve(node: Any, keys: tuple[str, ...]) -> list[Any]:
    """Пройти путь; "*" разворачивает значения словаря. Несовпадение типа — пустой список."""
    nodes = [node]
    for key in keys:
        step = []
        for current in nodes:
            if not isinstance(current, dict):
                continue
            if key == "*":
                step.extend(current.values())
            elif key in current:
                step.append(current[key])
        nodes = step
        if not nodes:
            break
    return nodes


def _join_strings(values: list[Any]) -> str:
    return " ".join(v for v in values if isinstance(v, str) and v)


def locate_text(resource: Any) -> str:
    """Первый непустой текст по TEXT_PATHS; пустая строка, если ничего не нашлось."""
    for name, keys in TEXT_PATHS:
        text = _join_strings(_resolve(resource, keys))
        if text.strip():
            logger.info("[LOCATOR] found text path=%s length=%d", name, len(text))
            return text
    logger.info("[LOCATOR] no text in resource")
    return ""


def has_content(text: str | None, min_chars: int = 10) -> bool:
    """Текст короче порога считается отсутствующим."""
    return bool(text) and len(text) >= min_chars


def text_from_payload(payload: Any) -> str:
    """
    Свести JSON-ответ к тексту: text / body / extracted_text.
    Ответ без текстовых ключей (метаданные, статус) — пустая строка.
    """
    if isinstance(payload, str):
        return payload
    if isinstance(payload, dict):
        for key in PAYLOAD_TEXT_KEYS:
            value = payload.get(key)
            if isinstance(value, str) and value:
                return value
    return ""


def paragraph_results(search_result: Any) -> list[dict]:
    """paragraphs.results из ответа /search; отсутствие — пустой список."""
    if not isinstance(search_result, dict):
        return []
    paragraphs = search_result.get("paragraphs")
    if not isinstance(paragraphs, dict):
        return []
    results = paragraphs.get("results")
    if not isinstance(results, list):
        return []
    return [p for p in results if isinstance(p, dict)]


def generated_answer(search_result: Any) -> str:
    """answer.text из ответа /search (generative_answer)."""
    if not isinstance(search_result, dict):
        return ""
    answer = search_result.get("answer")
    if isinstance(answer, dict) and isinstance(answer.get("text"), str):
        return answer["text"].strip()
    if isinstance(answer, str):
        return answer.strip()
    return ""


def paragraph_proxy(search_result: Any, max_chars: int = 4000, max_paragraphs: int = 10) -> str:
    """
    Склеить тексты первых параграфов поиска в прокси-контент документа.
    Не больше max_paragraphs параграфов и max_chars символов.
    """
    parts: list[str] = []
    total = 0
    for paragraph in paragraph_results(search_result)[:max_paragraphs]:
        text = paragraph.get("text")
        if not isinstance(text, str) or not text.strip():
            continue
        text = text.strip()
        remaining = max_chars - total
        if remaining <= 0:
            break
        chunk = text[:remaining]
        parts.append(chunk)
        total += len(chunk) + 1
    return "\n".join(parts)[:max_chars]
