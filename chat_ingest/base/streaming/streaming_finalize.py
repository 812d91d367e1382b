"""Finalize stream helper.

Seals the accumulated message, merges citations into the visible text,
persists the result once and emits the consolidated ``stream.finalize`` log
event carrying session metrics.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from ...config.defaults import REFERENCES_HEADING, REFERENCES_SEPARATOR
from ...persistence.interfaces.repos import IMessageRepository
from ..logging import LogContext, log_event, normalized_log_event
from .accumulator import Accumulator
from .events import Reference
from .session import StreamStatus
from .streaming_metrics import StreamMetrics


@dataclass(frozen=True)
class FinalizeResult:
    """Outcome of finalizing one session.

    ``content`` is exactly what was written to the repository. ``persisted`` is
    ``False`` when the repository raised; the message is still complete in
    memory in that case.
    """

    message_id: str
    status: StreamStatus
    content: str
    thinking: str
    references: tuple
    error: Optional[str]
    error_code: Optional[str]
    persisted: bool
    persist_error: Optional[str]
    metrics: StreamMetrics


def render_references(references: Sequence[Reference]) -> str:
    """Render citations ordered by ascending index; empty when there are none."""
    if not references:
        return ""
    lines = "".join(f"\n{r.render()}\n" for r in sorted(references, key=lambda r: r.index))
    return f"{REFERENCES_SEPARATOR}{REFERENCES_HEADING}{lines}"


def render_content(text: str, references: Sequence[Reference]) -> str:
    return text + render_references(references)


def finalize_message(
    *,
    logger: logging.Logger,
    ctx: LogContext,
    accumulator: Accumulator,
    repository: IMessageRepository,
    message_id: str,
    provider_id: str,
    model_id: str,
    status: StreamStatus,
    metrics: StreamMetrics,
) -> FinalizeResult:
    """Seal, render and persist the message of a finished session.

    Called exactly once per session by the controller. Repository failures are
    logged as ``stream.persist_failed`` and reported on the result.
    """
    message = accumulator.seal()
    metrics.finish()
    content = render_content(message.text, message.references)
    error = message.error
    persist_error: Optional[str] = None
    try:
        repository.update(
            message_id,
            content=content,
            thinking=message.thinking,
            provider_id=provider_id,
            model_id=model_id,
            status=status.value,
            error=error.message if error else None,
            error_code=error.code if error else None,
        )
        repository.save()
    except Exception as exc:  # noqa: BLE001 - any backend failure is reported, never raised
        persist_error = f"{type(exc).__name__}: {exc}"
        log_event(
            logger,
            "stream.persist_failed",
            ctx,
            level=logging.WARNING,
            failure_class=type(exc).__name__,
            error=str(exc),
        )

    normalized_log_event(
        logger,
        "stream.finalize",
        ctx,
        phase="finalize",
        error_code=error.code if error else None,
        emitted=metrics.emitted > 0,
        tokens=None,
        status=status.value,
        text_chars=len(message.text),
        thinking_chars=len(message.thinking),
        references=len(message.references),
        persisted=persist_error is None,
        error=error.message if error else None,
        events_applied=metrics.emitted,
        **{k: v for k, v in metrics.to_dict().items() if k != "emitted"},
    )
    return FinalizeResult(
        message_id=message_id,
        status=status,
        content=content,
        thinking=message.thinking,
        references=tuple(message.sorted_references()),
        error=error.message if error else None,
        error_code=error.code if error else None,
        persisted=persist_error is None,
        persist_error=persist_error,
        metrics=metrics,
    )


__all__ = ["FinalizeResult", "finalize_message", "render_content", "render_references"]
