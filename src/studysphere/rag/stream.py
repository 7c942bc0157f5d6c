"""Разбор NDJSON-потока ответа /ask: склейка фрагментов ответа и цитат."""
import json
import logging
from dataclasses import dataclass, field
from typing import Any

from studysphere.contracts.schemas import Citation

logger = logging.getLogger(__name__)


@dataclass
class StreamResult:
    answer_text: str = ""
    citations: list[Any] = field(default_factory=list)


def _line_citations(obj: dict) -> list[Any]:
    found: list[Any] = []
    top = obj.get("citations")
    if isinstance(top, list):
        found.extend(top)
    item = obj.get("item")
    if isinstance(item, dict) and isinstance(item.get("citations"), list):
        found.extend(item["citations"])
    return found


def _line_text(obj: dict) -> str:
    item = obj.get("item")
    if not isinstance(item, dict):
        return ""
    item_type = item.get("type")
    if item_type is not None and item_type != "answer":
        return ""
    text = item.get("text")
    return text if isinstance(text, str) else ""


def parse_stream(raw_body: str | None) -> StreamResult:
    """
    Одна JSON-строка на строку. Нераспарсенные строки пропускаются (heartbeat/служебные).
    item.text склеивается, citations конкатенируются в порядке появления, без дедупликации.
    """
    result = StreamResult()
    if not raw_body:
        return result
    parts: list[str] = []
    skipped = 0
    for line in raw_body.splitlines():
        line = line.strip()
        if not line:
            continue
        try:
            obj = json.loads(line)
        except json.JSONDecodeError:
            skipped += 1
            logger.debug("[STREAM] skipping unparseable line: %s", line[:50])
            continue
        if not isinstance(obj, dict):
            skipped += 1
            continue
        parts.append(_line_text(obj))
        result.citations.extend(_line_citations(obj))
    result.answer_text = "".join(parts)
    logger.info(
        "[STREAM] parsed answer_len=%d citations=%d skipped=%d",
        len(result.answer_text), len(result.citations), skipped,
    )
    return result


def to_citations(raw: list[Any], limit: int | None = None) -> list[Citation]:
    """Привести сырые цитаты/параграфы upstream к Citation."""
    items = raw if limit is None else raw[:limit]
    return [Citation.from_upstream(c) for c in items]
