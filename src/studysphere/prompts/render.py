"""Рендеринг текстовых шаблонов (резервные саммари, служебные сообщения, промпты для /generate)."""
import logging
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape

logger = logging.getLogger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

_env = Environment(
    loader=FileSystemLoader(TEMPLATES_DIR),
    autoescape=select_autoescape(default=False),
    trim_blocks=True,
    lstrip_blocks=True,
)


def render_template(template_name: str, **context: Any) -> str:
    """Отрендерить шаблон из templates/ и обрезать пробелы по краям."""
    template = _env.get_template(template_name)
    text = template.render(**context).strip()
    logger.debug("[Render] template=%s len=%d", template_name, len(text))
    return text
