"""Normalize text before templating and logging."""
import re


def normalize_text(text: str) -> str:
    """
    Normalize text: collapse whitespace, strip, remove excessive newlines.
    Used before building fallback summaries and quizzes.
    """
    if not text or not isinstance(text, str):
        return ""
    t = text.strip()
    t = re.sub(r"[ \t]+", " ", t)
    t = re.sub(r"\n{3,}", "\n\n", t)
    return t.strip()


def flatten_text(text: str) -> str:
    """Collapse all whitespace (including newlines) into single spaces."""
    if not text or not isinstance(text, str):
        return ""
    return re.sub(r"\s+", " ", text).strip()


def truncate_preview(text: str, max_chars: int = 200) -> str:
    """Truncate text for previews in summaries and logs."""
    if not text:
        return ""
    flat = flatten_text(text)
    if len(flat) <= max_chars:
        return flat
    return flat[: max_chars - 3].rstrip() + "..."


def format_file_size(size: int) -> str:
    """Human-readable size: 0 Bytes, 2.5 MB."""
    if size <= 0:
        return "0 Bytes"
    units = ["Bytes", "KB", "MB", "GB"]
    value = float(size)
    index = 0
    while value >= 1024 and index < len(units) - 1:
        value /= 1024
        index += 1
    return f"{value:.2f}".rstrip("0").rstrip(".") + f" {units[index]}"
