"""Per-cycle context carried into every structured log line.

Each reconciliation cycle gets a correlation id; when tracing is enabled the
ids of the current span are added as well, so logs and traces of one cycle
can be joined.
"""

from __future__ import annotations

import contextvars
import uuid
from contextlib import contextmanager
from typing import Any, Iterator

from opentelemetry import trace

correlation_id: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "correlation_id", default=None
)


def new_correlation_id(kind: str, meta: dict[str, Any]) -> str:
    """Build a correlation id for one cycle of one resource.

    The id starts with the resource uid (or name) so that all cycles of a
    resource sort together, followed by the generation and a random suffix.
    """
    owner = meta.get("uid") or f"{kind.lower()}-{meta.get('name', 'unknown')}"
    return f"{owner}/{meta.get('generation', 0)}/{uuid.uuid4().hex[:8]}"


def get_correlation_id() -> str | None:
    return correlation_id.get()


@contextmanager
def with_correlation_id(corr_id: str) -> Iterator[str]:
    """Set the correlation id for the duration of a block."""
    token = correlation_id.set(corr_id)
    try:
        yield corr_id
    finally:
        correlation_id.reset(token)


def trace_ids() -> dict[str, str]:
    """Ids of the current span, or nothing when no span is recording."""
    span = trace.get_current_span()
    if not span.is_recording():
        return {}
    span_context = span.get_span_context()
    if not span_context.is_valid:
        return {}
    return {
        "trace_id": format(span_context.trace_id, "032x"),
        "span_id": format(span_context.span_id, "016x"),
    }


def get_context_dict() -> dict[str, Any]:
    """Correlation and trace ids for the current cycle."""
    ctx: dict[str, Any] = {}
    corr_id = get_correlation_id()
    if corr_id:
        ctx["correlation_id"] = corr_id
    ctx.update(trace_ids())
    return ctx
