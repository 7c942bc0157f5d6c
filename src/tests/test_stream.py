"""Разбор NDJSON-потока /ask."""
import json

from studysphere.rag.stream import parse_stream, to_citations


def _line(obj) -> str:
    return json.dumps(obj)


def test_parse_stream_skips_invalid_lines_and_concatenates_in_order():
    body = "\n".join([
        _line({"item": {"type": "answer", "text": "Binary "}}),
        "not json at all",
        _line({"item": {"text": "search "}}),
        "{broken",
        "",
        _line({"item": {"type": "answer", "text": "halves the range."}}),
        "[1, 2, 3]",
    ])
    result = parse_stream(body)
    assert result.answer_text == "Binary search halves the range."
    assert result.citations == []


def test_parse_stream_empty_body():
    for body in ("", None, "\n\n"):
        result = parse_stream(body)
        assert result.answer_text == ""
        assert result.citations == []


def test_parse_stream_concatenates_citations_with_duplicates():
    body = "\n".join([
        _line({"citations": [{"text": "a"}]}),
        _line({"item": {"type": "citations", "citations": [{"text": "b"}]}}),
        _line({"citations": [{"text": "a"}]}),
    ])
    result = parse_stream(body)
    assert [c["text"] for c in result.citations] == ["a", "b", "a"]
    assert result.answer_text == ""


def test_parse_stream_ignores_non_answer_items():
    body = "\n".join([
        _line({"item": {"type": "status", "text": "running"}}),
        _line({"item": {"type": "answer", "text": "Done"}}),
    ])
    assert parse_stream(body).answer_text == "Done"


def test_to_citations_defaults_missing_fields():
    citations = to_citations([{"content": "quoted"}, {"text": "t", "score": 0.4, "page": 2, "position": {"start": 1}}, "raw"], limit=2)
    assert len(citations) == 2
    assert citations[0].text == "quoted"
    assert citations[0].score == 0.8
    assert citations[0].page is None
    assert citations[1].score == 0.4
    assert citations[1].page == 2
    assert citations[1].position == {"start": 1}
