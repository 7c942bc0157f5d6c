"""
Каскад стратегий: пробовать источники контента по порядку до первого пригодного результата.

Стратегия возвращает результат или None («контента нет, дальше»). Ошибка upstream —
мягкий промах, каскад идёт дальше. Ошибка аутентификации или недоступность upstream
обрывают каскад: сразу терминальный fallback в режиме offline.
"""
import logging
from dataclasses import dataclass
from typing import Callable, Generic, TypeVar

from studysphere.upstream.rag_client import UpstreamAuthError, UpstreamError, UpstreamUnavailableError

logger = logging.getLogger(__name__)

T = TypeVar("T")

MODE_OFFLINE = "offline"
MODE_DEGRADED = "degraded"


@dataclass
class Strategy(Generic[T]):
    name: str
    run: Callable[[], T | None]


def run_cascade(
    action: str,
    strategies: list[Strategy[T]],
    fallback: Callable[[str], T],
) -> T:
    """
    Выполнить стратегии по очереди, вернуть первый не-None результат.
    fallback(mode) вызывается с "offline" при auth/недоступности и с "degraded" при исчерпании.
    """
    for strategy in strategies:
        logger.info("[CASCADE] %s strategy=%s start", action, strategy.name)
        try:
            result = strategy.run()
        except (UpstreamAuthError, UpstreamUnavailableError) as e:
            logger.warning("[CASCADE] %s strategy=%s upstream offline: %s", action, strategy.name, e)
            return fallback(MODE_OFFLINE)
        except UpstreamError as e:
            logger.info("[CASCADE] %s strategy=%s upstream error: %s", action, strategy.name, e)
            continue
        if result is not None:
            logger.info("[CASCADE] %s strategy=%s ok", action, strategy.name)
            return result
        logger.info("[CASCADE] %s strategy=%s no content", action, strategy.name)
    logger.warning("[CASCADE] %s all strategies exhausted -> fallback", action)
    return fallback(MODE_DEGRADED)
