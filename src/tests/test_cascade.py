"""Каскад стратегий: порядок, мягкие ошибки, обрыв по auth/недоступности."""
import httpx
import pytest

from studysphere.services.cascade import MODE_DEGRADED, MODE_OFFLINE, Strategy, run_cascade
from studysphere.upstream.rag_client import UpstreamAuthError, UpstreamError, UpstreamUnavailableError


def _recording(calls: list[str], name: str, result=None, exc: Exception | None = None):
    def run():
        calls.append(name)
        if exc is not None:
            raise exc
        return result
    return Strategy(name, run)


def test_first_non_none_result_wins():
    calls: list[str] = []
    result = run_cascade(
        "test",
        [
            _recording(calls, "a"),
            _recording(calls, "b", result="from b"),
            _recording(calls, "c", result="from c"),
        ],
        lambda mode: f"fallback {mode}",
    )
    assert result == "from b"
    assert calls == ["a", "b"]


def test_upstream_error_moves_to_next_strategy():
    calls: list[str] = []
    result = run_cascade(
        "test",
        [
            _recording(calls, "a", exc=UpstreamError("500 - boom", 500)),
            _recording(calls, "b", result="ok"),
        ],
        lambda mode: f"fallback {mode}",
    )
    assert result == "ok"
    assert calls == ["a", "b"]


@pytest.mark.parametrize(
    "exc",
    [
        UpstreamAuthError("401 - invalid_token", 401),
        UpstreamUnavailableError("https://rag.test", httpx.ConnectError("dns")),
    ],
)
def test_offline_errors_skip_remaining_strategies(exc):
    calls: list[str] = []
    result = run_cascade(
        "test",
        [_recording(calls, "a", exc=exc), _recording(calls, "b", result="never")],
        lambda mode: mode,
    )
    assert result == MODE_OFFLINE
    assert calls == ["a"]


def test_exhaustion_calls_fallback_degraded():
    calls: list[str] = []
    result = run_cascade("test", [_recording(calls, "a"), _recording(calls, "b")], lambda mode: mode)
    assert result == MODE_DEGRADED
    assert calls == ["a", "b"]


def test_fallback_may_raise():
    def fallback(mode):
        raise RuntimeError(mode)

    with pytest.raises(RuntimeError, match=MODE_DEGRADED):
        run_cascade("test", [], fallback)
