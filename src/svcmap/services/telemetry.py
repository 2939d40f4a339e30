"""Telemetry primitives — Span, @traced, trace_span.

Near-zero overhead when disabled (single ContextVar.get per call).
When enabled via --verbose, builds hierarchical span trees with timing
and injects them into ServiceResult.meta.

Coroutine functions are traced across their awaits. Tasks started inside
a traced coroutine (``asyncio.gather``) copy the context, so spans they
open are attached to the span that was current when they were created.
A span that exits with an exception, or whose ServiceResult is a
failure, records the exception type or error code in ``error``.
"""

from __future__ import annotations

import functools
import inspect
import time
from collections.abc import Awaitable, Callable, Generator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any, ParamSpec, TypeVar, cast

import structlog

from svcmap.services.result import ServiceResult

P = ParamSpec("P")
R = TypeVar("R")

log = structlog.get_logger("svcmap.telemetry")

_verbose_enabled: ContextVar[bool] = ContextVar("_verbose_enabled", default=False)
_current_span: ContextVar[Span | None] = ContextVar("_current_span", default=None)


@dataclass
class Span:
    """Timed node of a span tree with free-form annotations."""

    name: str
    parent: Span | None = None
    children: list[Span] = field(default_factory=list)
    start_time: float = field(default_factory=time.perf_counter)
    end_time: float | None = None
    annotations: dict[str, Any] = field(default_factory=dict)
    error: str | None = None

    @property
    def duration_ms(self) -> float:
        if self.end_time is None:
            return 0.0
        return (self.end_time - self.start_time) * 1000

    def end(self) -> None:
        self.end_time = time.perf_counter()

    def annotate(self, key: str, value: Any) -> None:
        self.annotations[key] = value

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "name": self.name,
            "duration_ms": round(self.duration_ms, 2),
        }
        if self.error:
            result["error"] = self.error
        if self.annotations:
            result["annotations"] = self.annotations
        if self.children:
            result["children"] = [c.to_dict() for c in self.children]
        return result


@contextmanager
def _activate(span: Span) -> Generator[Span]:
    """Make *span* current until the block exits, then close it."""
    token = _current_span.set(span)
    try:
        yield span
    except Exception as exc:
        span.error = type(exc).__name__
        raise
    finally:
        span.end()
        _current_span.reset(token)


@contextmanager
def trace_span(name: str) -> Generator[Span | None]:
    """Open a child of the current span; yields None when there is none.

    Nothing is recorded unless telemetry is enabled and a ``@traced``
    call is in progress.
    """
    parent = _current_span.get() if _verbose_enabled.get() else None
    if parent is None:
        yield None
        return

    child = Span(name=name, parent=parent)
    parent.children.append(child)
    with _activate(child):
        yield child


def _log_span(span: Span) -> None:
    log.debug(
        "span.complete",
        span_name=span.name,
        duration_ms=round(span.duration_ms, 2),
        ok=span.error is None,
        children=len(span.children),
    )


def _attach(span: Span, result: Any) -> Any:
    """Record a ServiceResult's outcome on *span* and copy the tree into its meta."""
    if isinstance(result, ServiceResult):
        if not result.ok and result.error is not None:
            span.error = result.error.code
        meta = {**(result.meta or {}), "telemetry": span.to_dict()}
        result = result.model_copy(update={"meta": meta})
    _log_span(span)
    return result


def traced(func: Callable[P, R]) -> Callable[P, R]:
    """Time every call of a service method as the root of a span tree.

    Works on plain and ``async def`` functions. A ServiceResult return
    value gets the finished tree under ``meta["telemetry"]``. No-op when
    telemetry is disabled.
    """
    if inspect.iscoroutinefunction(func):
        async_func = cast("Callable[P, Awaitable[Any]]", func)

        @functools.wraps(func)
        async def async_wrapper(*args: P.args, **kwargs: P.kwargs) -> Any:
            if not _verbose_enabled.get():
                return await async_func(*args, **kwargs)
            span = Span(name=func.__qualname__)
            try:
                with _activate(span):
                    result = await async_func(*args, **kwargs)
            except Exception:
                _log_span(span)
                raise
            return _attach(span, result)

        return cast("Callable[P, R]", async_wrapper)

    @functools.wraps(func)
    def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
        if not _verbose_enabled.get():
            return func(*args, **kwargs)
        span = Span(name=func.__qualname__)
        try:
            with _activate(span):
                result = func(*args, **kwargs)
        except Exception:
            _log_span(span)
            raise
        return cast("R", _attach(span, result))

    return wrapper


def enable_telemetry() -> None:
    """Enable verbose telemetry (called by AppContext at startup)."""
    _verbose_enabled.set(True)


def disable_telemetry() -> None:
    _verbose_enabled.set(False)


def get_current_span() -> Span | None:
    """The active span, for manual annotation; None when telemetry is off."""
    if not _verbose_enabled.get():
        return None
    return _current_span.get()
