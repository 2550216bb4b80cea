"""Tests for logging context propagation."""

import contextvars
import threading

from ticket_notifier.logging.context import (
    clear_log_context,
    get_log_context,
    log_context,
    pop_log_context,
    push_log_context,
)


def test_empty_context():
    assert get_log_context() == {}


def test_push_and_pop():
    token = push_log_context(tick_id="abc123")
    assert get_log_context() == {"tick_id": "abc123"}
    pop_log_context(token)
    assert get_log_context() == {}


def test_nested_context():
    token1 = push_log_context(tick_id="abc123")
    token2 = push_log_context(job_key="ticket:update:42:1")
    assert get_log_context() == {"tick_id": "abc123", "job_key": "ticket:update:42:1"}

    pop_log_context(token2)
    assert get_log_context() == {"tick_id": "abc123"}
    pop_log_context(token1)
    assert get_log_context() == {}


def test_context_override():
    token1 = push_log_context(job_key="first")
    token2 = push_log_context(job_key="second")
    assert get_log_context() == {"job_key": "second"}
    pop_log_context(token2)
    assert get_log_context() == {"job_key": "first"}
    pop_log_context(token1)


def test_get_log_context_returns_copy():
    with log_context(tick_id="abc123"):
        context = get_log_context()
        context["tick_id"] = "mutated"
        assert get_log_context() == {"tick_id": "abc123"}


def test_log_context_manager_restores_on_exception():
    try:
        with log_context(tick_id="abc123"):
            raise RuntimeError("boom")
    except RuntimeError:
        pass
    assert get_log_context() == {}


def test_clear_log_context():
    push_log_context(tick_id="abc123")
    clear_log_context()
    assert get_log_context() == {}


def test_copied_context_carries_fields():
    seen = {}

    def worker(ctx):
        seen["context"] = ctx.run(get_log_context)

    with log_context(tick_id="abc123"):
        ctx = contextvars.copy_context()
    thread = threading.Thread(target=worker, args=(ctx,))
    thread.start()
    thread.join()

    assert seen["context"] == {"tick_id": "abc123"}
