"""Timing spans for service calls and the steps inside them.

Spans are recorded only while telemetry is enabled (``--verbose``) and a
root span is open. Otherwise :func:`trace_span` yields None after a single
ContextVar lookup. This module knows nothing about service results: the
services layer opens the root span and decides where the finished tree goes.
"""

from __future__ import annotations

import time
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any

import structlog

log = structlog.get_logger(__name__)

_enabled: ContextVar[bool] = ContextVar("_enabled", default=False)
_current_span: ContextVar[Span | None] = ContextVar("_current_span", default=None)


@dataclass
class Span:
    """One timed step; ``children`` are the steps it contained."""

    name: str
    children: list[Span] = field(default_factory=list)
    annotations: dict[str, Any] = field(default_factory=dict)
    started: float = field(default_factory=time.perf_counter)
    finished: float | None = None

    @property
    def duration_ms(self) -> float:
        if self.finished is None:
            return 0.0
        return (self.finished - self.started) * 1000

    def finish(self) -> None:
        self.finished = time.perf_counter()

    def annotate(self, key: str, value: Any) -> None:
        self.annotations[key] = value

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"name": self.name, "duration_ms": round(self.duration_ms, 2)}
        if self.annotations:
            out["annotations"] = dict(self.annotations)
        if self.children:
            out["children"] = [child.to_dict() for child in self.children]
        return out


def enable_telemetry() -> None:
    """Start recording spans in the current context (``--verbose``)."""
    _enabled.set(True)


def disable_telemetry() -> None:
    _enabled.set(False)


def telemetry_enabled() -> bool:
    return _enabled.get()


@contextmanager
def root_span(name: str) -> Iterator[Span]:
    """Open a span that collects every :func:`trace_span` beneath it."""
    span = Span(name=name)
    token = _current_span.set(span)
    ok = False
    try:
        yield span
        ok = True
    finally:
        span.finish()
        _current_span.reset(token)
        log.debug(
            "span.complete",
            span_name=name,
            duration_ms=round(span.duration_ms, 2),
            ok=ok,
            children=len(span.children),
        )


@contextmanager
def trace_span(name: str) -> Iterator[Span | None]:
    """Time a step under the open span; yields None when nothing is recording."""
    parent = _current_span.get() if _enabled.get() else None
    if parent is None:
        yield None
        return

    child = Span(name=name)
    parent.children.append(child)
    token = _current_span.set(child)
    try:
        yield child
    finally:
        child.finish()
        _current_span.reset(token)
