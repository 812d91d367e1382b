"""Stream session controller.

Owns at most one active network stream per conversation and wires the
pipeline for it::

    httpx response bytes -> FrameDemultiplexer -> StreamDialect -> Accumulator

Lifecycle of a session: ``IDLE -> REQUESTING -> STREAMING -> FINALIZING ->
TERMINATED``. Whatever ends the stream (``[DONE]``, transport EOF, an HTTP or
transport error, a provider error frame, or cancellation) the session goes
through the same finalize step exactly once: pending reasoning is flushed,
references are merged into the text and the repository is updated.

Cancellation is cooperative. ``cancel`` sets the session token and closes the
live response; the worker checks the token after every chunk. While the
request is still waiting for response headers the worker stops waiting and
leaves the send to finish on its own thread. A cancelled session keeps its
partial text and never records an error. A cancel that arrives after the
stream already ended on its own does not change the final status.
"""
from __future__ import annotations

import logging
import threading
import time
import uuid
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Sequence

import httpx

from ...config.env import get_engine_settings
from ...persistence.interfaces.repos import IMessageRepository, StoredMessage
from ..dto.chat import ChatMessageDTO
from ..dto.provider_config import ProviderConfig
from ..errors import ErrorCode, ProviderError, classify_exception, is_retryable
from ..http.client import get_httpx_client
from ..interfaces_parts.request_builder import RequestBuilder
from ..interfaces_parts.stream_dialect import StreamDialect
from ..logging import LogContext, get_logger, log_event, normalized_log_event
from ..routing.selector import select_dialect
from .accumulator import Accumulator, Clock, MessageSnapshot
from .events import Done, ErrorEvent
from .frames import Frame, FrameDemultiplexer, parse_error_body
from .session import SessionState, StreamSession, StreamStatus, StreamUpdate
from .streaming_finalize import FinalizeResult, finalize_message
from .streaming_metrics import StreamMetrics

Listener = Callable[[StreamUpdate], None]

DEFAULT_CONVERSATION = "default"


@dataclass
class _SessionRun:
    """Everything the worker needs for one session."""

    session: StreamSession
    config: ProviderConfig
    request: httpx.Request
    dialect: StreamDialect
    ctx: LogContext
    metrics: StreamMetrics = field(default_factory=StreamMetrics)
    accumulator: Optional[Accumulator] = None
    status: StreamStatus = StreamStatus.LOADING
    response: Optional[httpx.Response] = None
    result: Optional[FinalizeResult] = None
    thread: Optional[threading.Thread] = None
    worker_ident: Optional[int] = None
    stream_ended: bool = False

    def close_response(self, _reason: Optional[str] = None) -> None:
        if self.response is not None:
            self.response.close()


@dataclass
class _PendingSend:
    """Hand-off between a worker and the thread blocked in ``client.send``."""

    wake: threading.Event = field(default_factory=threading.Event)
    lock: threading.Lock = field(default_factory=threading.Lock)
    finished: bool = False
    abandoned: bool = False
    response: Optional[httpx.Response] = None
    error: Optional[Exception] = None


class StreamSessionController:
    """Run streaming chat sessions and commit their results.

    Parameters
    ----------
    request_builder:
        Builds the outbound ``httpx.Request`` for a config and message list.
    repository:
        Receives the placeholder message at start and the final message once.
    client:
        ``httpx.Client`` used to send requests; defaults to the shared pool.
    listener:
        Receives a ``StreamUpdate`` after every observable change. Called on
        the session's worker thread.
    clock:
        Monotonic time source for reasoning micro-batching.
    flush_interval:
        Reasoning flush interval in seconds; defaults to engine settings.
    """

    def __init__(
        self,
        request_builder: RequestBuilder,
        repository: IMessageRepository,
        *,
        client: Optional[httpx.Client] = None,
        listener: Optional[Listener] = None,
        clock: Clock = time.monotonic,
        flush_interval: Optional[float] = None,
    ) -> None:
        settings = get_engine_settings()
        self._builder = request_builder
        self._repository = repository
        self._client = client
        self._listener = listener
        self._clock = clock
        self._flush_interval = (
            flush_interval if flush_interval is not None else settings.thinking_flush_interval_seconds
        )
        self._join_timeout = settings.cancel_join_timeout_seconds
        self._runs: Dict[str, _SessionRun] = {}
        self._finished: List[_SessionRun] = []
        self._lock = threading.RLock()
        self._start_locks: Dict[str, threading.Lock] = {}
        self._logger = get_logger("chat_ingest.streaming")

    # API -----------------------------------------------------------------
    def start(
        self,
        config: ProviderConfig,
        messages: Sequence[ChatMessageDTO],
        *,
        conversation_id: str = DEFAULT_CONVERSATION,
    ) -> StreamSession:
        """Start a session on a worker thread and return it immediately.

        Any active session for ``conversation_id`` is cancelled and has
        terminated before this returns.
        """
        run = self._prepare(config, messages, conversation_id)
        thread = threading.Thread(
            target=self._execute,
            args=(run,),
            name=f"chat-ingest-{run.session.session_id[:8]}",
            daemon=True,
        )
        run.thread = thread
        thread.start()
        return run.session

    def run(
        self,
        config: ProviderConfig,
        messages: Sequence[ChatMessageDTO],
        *,
        conversation_id: str = DEFAULT_CONVERSATION,
    ) -> FinalizeResult:
        """Run a session on the calling thread and return its final result."""
        run = self._prepare(config, messages, conversation_id)
        self._execute(run)
        assert run.result is not None  # nosec B101 - _execute always finalizes
        return run.result

    def cancel(
        self,
        conversation_id: str = DEFAULT_CONVERSATION,
        reason: str = "user_cancelled",
        *,
        wait: bool = True,
    ) -> bool:
        """Cancel the active session of a conversation.

        Returns ``False`` when nothing was active. With ``wait`` the call
        blocks until the partial message has been persisted, unless it is made
        from the session's own worker thread.
        """
        with self._lock:
            run = self._runs.get(conversation_id)
        if run is None or not run.session.active:
            return False
        self._cancel_run(run, reason)
        if wait and run.worker_ident != threading.get_ident():
            run.session.wait(self._join_timeout)
        return True

    def wait(self, session: StreamSession, timeout: Optional[float] = None) -> bool:
        """Block until ``session`` terminates; ``False`` on timeout."""
        return session.wait(timeout)

    def result(self, session: StreamSession) -> Optional[FinalizeResult]:
        """Final result of a terminated session started by this controller."""
        with self._lock:
            for run in self._finished:
                if run.session is session:
                    return run.result
        return None

    def active_session(self, conversation_id: str = DEFAULT_CONVERSATION) -> Optional[StreamSession]:
        with self._lock:
            run = self._runs.get(conversation_id)
        return run.session if run is not None and run.session.active else None

    def close(self) -> None:
        """Cancel every active session and wait for each to terminate."""
        with self._lock:
            runs = list(self._runs.values())
        for run in runs:
            self._cancel_run(run, "controller_closed")
        for run in runs:
            if run.worker_ident != threading.get_ident():
                run.session.wait(self._join_timeout)

    # Lifecycle -----------------------------------------------------------
    def _prepare(
        self, config: ProviderConfig, messages: Sequence[ChatMessageDTO], conversation_id: str
    ) -> _SessionRun:
        request = self._builder.build(config, messages)
        with self._conversation_lock(conversation_id):
            self._supersede(conversation_id)
            session = StreamSession(
                conversation_id=conversation_id,
                provider_id=config.provider_id,
                model_id=config.model,
                message_id=uuid.uuid4().hex,
            )
            ctx = LogContext(
                provider=config.provider_id,
                model=config.model,
                session_id=session.session_id,
                message_id=session.message_id,
                conversation_id=conversation_id,
            )
            run = _SessionRun(
                session=session,
                config=config,
                request=request,
                dialect=select_dialect(config.provider_id),
                ctx=ctx,
            )
            run.accumulator = Accumulator(
                flush_interval=self._flush_interval,
                clock=self._clock,
                on_change=lambda snap: self._publish(run, snap),
            )
            with self._lock:
                self._runs[conversation_id] = run
            self._insert_placeholder(run)
            session.advance(SessionState.REQUESTING)
        log_event(
            self._logger,
            "stream.start",
            ctx,
            dialect=run.dialect.name,
            url=str(request.url),
            history=len(messages),
            thinking=config.thinking_enabled,
            web_search=config.web_search,
        )
        self._set_status(run, StreamStatus.LOADING)
        return run

    def _conversation_lock(self, conversation_id: str) -> threading.Lock:
        """Serialize starts within one conversation only."""
        with self._lock:
            return self._start_locks.setdefault(conversation_id, threading.Lock())

    def _supersede(self, conversation_id: str) -> None:
        with self._lock:
            prior = self._runs.get(conversation_id)
        if prior is None or not prior.session.active:
            return
        self._cancel_run(prior, "superseded")
        if prior.worker_ident == threading.get_ident():
            raise ProviderError(
                code=ErrorCode.CONFLICT,
                message="cannot start a new session from the active session's own thread",
                provider=prior.config.provider_id,
                model=prior.config.model,
            )
        if not prior.session.wait(self._join_timeout):
            log_event(self._logger, "stream.supersede_timeout", prior.ctx, level=logging.WARNING)
            raise ProviderError(
                code=ErrorCode.TIMEOUT,
                message="previous session did not terminate",
                provider=prior.config.provider_id,
                model=prior.config.model,
                retryable=True,
            )

    def _insert_placeholder(self, run: _SessionRun) -> None:
        session = run.session
        try:
            self._repository.insert(
                StoredMessage(
                    id=session.message_id,
                    conversation_id=session.conversation_id,
                    role="assistant",
                    provider_id=session.provider_id,
                    model_id=session.model_id,
                    status=StreamStatus.LOADING.value,
                    sequence=self._repository.next_sequence(session.conversation_id),
                )
            )
            self._repository.save()
        except Exception as exc:  # noqa: BLE001 - streaming proceeds without a placeholder
            log_event(
                self._logger,
                "stream.placeholder_failed",
                run.ctx,
                level=logging.WARNING,
                failure_class=type(exc).__name__,
                error=str(exc),
            )

    def _cancel_run(self, run: _SessionRun, reason: str) -> None:
        if run.session.token.cancel(reason):
            log_event(self._logger, "stream.cancel_requested", run.ctx, reason=reason, state=run.session.state.value)

    def _execute(self, run: _SessionRun) -> None:
        run.worker_ident = threading.get_ident()
        try:
            self._stream(run)
        finally:
            self._finish(run)

    def _stream(self, run: _SessionRun) -> None:
        token = run.session.token
        if token.cancelled:
            return
        client = self._client or get_httpx_client("stream")
        try:
            response = self._send(run, client)
        except Exception as exc:
            self._handle_transport_failure(run, exc)
            return
        if response is None:
            log_event(self._logger, "stream.send_abandoned", run.ctx, level=logging.DEBUG, reason=token.reason)
            return
        run.response = response
        token.add_callback(run.close_response)
        try:
            if token.cancelled:
                return
            log_event(self._logger, "stream.headers", run.ctx, status=response.status_code)
            assert run.accumulator is not None  # nosec B101 - set in _prepare
            run.accumulator.flush()
            if response.status_code >= 400:
                error = parse_error_body(response.read(), response.status_code)
                log_event(
                    self._logger,
                    "stream.http_error",
                    run.ctx,
                    level=logging.WARNING,
                    status=response.status_code,
                    error_code=error.code,
                    error=error.message,
                )
                run.accumulator.record_error(error)
                return
            run.session.advance(SessionState.STREAMING)
            self._set_status(run, StreamStatus.STREAMING)
            self._pump(run, response.iter_bytes())
        except Exception as exc:
            self._handle_transport_failure(run, exc)
        finally:
            token.remove_callback(run.close_response)
            response.close()

    def _send(self, run: _SessionRun, client: httpx.Client) -> Optional[httpx.Response]:
        """Send the request; ``None`` when cancelled before the headers arrived.

        ``client.send`` blocks until the response headers are in and cannot
        be interrupted, so it runs on a helper thread while the worker waits
        for either the response or the session token. A response that shows
        up after the worker gave up is closed by the helper.
        """
        token = run.session.token
        pending = _PendingSend()

        def deliver() -> None:
            response: Optional[httpx.Response] = None
            error: Optional[Exception] = None
            try:
                response = client.send(run.request, stream=True)
            except Exception as exc:  # noqa: BLE001 - re-raised on the worker thread
                error = exc
            with pending.lock:
                pending.response = response
                pending.error = error
                pending.finished = True
                abandoned = pending.abandoned
            pending.wake.set()
            if abandoned and response is not None:
                response.close()

        def wake(_reason: Optional[str]) -> None:
            pending.wake.set()

        token.add_callback(wake)
        try:
            threading.Thread(
                target=deliver,
                name=f"chat-ingest-send-{run.session.session_id[:8]}",
                daemon=True,
            ).start()
            pending.wake.wait()
        finally:
            token.remove_callback(wake)
        with pending.lock:
            if not pending.finished:
                pending.abandoned = True
                return None
        if pending.error is not None:
            raise pending.error
        return pending.response

    def _pump(self, run: _SessionRun, chunks: Iterable[bytes]) -> None:
        token = run.session.token
        demux = FrameDemultiplexer()
        for chunk in chunks:
            run.metrics.chunks += 1
            if self._consume(run, demux.feed(chunk)):
                run.stream_ended = True
                return
            if token.cancelled:
                return
        if not token.cancelled:
            self._consume(run, demux.close())
            run.stream_ended = True

    def _consume(self, run: _SessionRun, frames: List[Frame]) -> bool:
        """Apply frames in order; return ``True`` once a terminal event is seen."""
        acc = run.accumulator
        assert acc is not None  # nosec B101 - set in _prepare
        for frame in frames:
            run.metrics.frames += 1
            if isinstance(frame, Done):
                return acc.apply(frame)
            events = run.dialect.parse(frame)
            if not events:
                run.metrics.skipped_frames += 1
            for event in events:
                if isinstance(event, ErrorEvent):
                    log_event(
                        self._logger,
                        "stream.provider_error",
                        run.ctx,
                        level=logging.WARNING,
                        error_code=event.code,
                        error=event.message,
                    )
                else:
                    run.metrics.mark_first_delta()
                if acc.apply(event):
                    return True
        return False

    def _handle_transport_failure(self, run: _SessionRun, exc: Exception) -> None:
        """Record a transport error, or ignore it when caused by cancellation.

        Closing the response from ``cancel`` makes the blocked read fail; that
        failure is the cancellation itself, not an error. Any other exception
        is recorded as an ``internal`` error and propagates after
        finalization.
        """
        if run.session.token.cancelled:
            log_event(
                self._logger,
                "stream.closed_after_cancel",
                run.ctx,
                level=logging.DEBUG,
                failure_class=type(exc).__name__,
            )
            return
        assert run.accumulator is not None  # nosec B101 - set in _prepare
        if not isinstance(exc, (httpx.HTTPError, httpx.StreamError, OSError)):
            normalized_log_event(
                self._logger,
                "stream.internal_error",
                run.ctx,
                phase="stream",
                error_code=ErrorCode.INTERNAL.value,
                emitted=run.accumulator.applied > 0,
                level=logging.ERROR,
                failure_class=type(exc).__name__,
                error=str(exc),
            )
            run.accumulator.record_error(
                ErrorEvent(message=f"{type(exc).__name__}: {exc}", code=ErrorCode.INTERNAL.value)
            )
            raise exc
        code = classify_exception(exc)
        normalized_log_event(
            self._logger,
            "stream.transport_error",
            run.ctx,
            phase="stream",
            error_code=code.value,
            emitted=run.accumulator.applied > 0,
            level=logging.WARNING,
            failure_class=type(exc).__name__,
            retryable=is_retryable(code),
            error=str(exc),
        )
        run.accumulator.record_error(ErrorEvent(message=str(exc) or type(exc).__name__, code=code.value))

    def _finish(self, run: _SessionRun) -> None:
        session = run.session
        acc = run.accumulator
        assert acc is not None  # nosec B101 - set in _prepare
        try:
            session.advance(SessionState.FINALIZING)
            run.metrics.emitted = acc.applied
            if acc.message.error is not None:
                status = StreamStatus.ERROR
            elif session.token.cancelled and not run.stream_ended:
                status = StreamStatus.CANCELLED
            else:
                status = StreamStatus.COMPLETED
            run.result = finalize_message(
                logger=self._logger,
                ctx=run.ctx,
                accumulator=acc,
                repository=self._repository,
                message_id=session.message_id,
                provider_id=session.provider_id,
                model_id=session.model_id,
                status=status,
                metrics=run.metrics,
            )
            self._set_status(run, status)
        finally:
            with self._lock:
                if self._runs.get(session.conversation_id) is run:
                    del self._runs[session.conversation_id]
                self._finished.append(run)
                del self._finished[:-32]
            session.advance(SessionState.TERMINATED)

    # Observers -----------------------------------------------------------
    def _set_status(self, run: _SessionRun, status: StreamStatus) -> None:
        run.status = status
        assert run.accumulator is not None  # nosec B101 - set in _prepare
        self._publish(run, run.accumulator.snapshot())

    def _publish(self, run: _SessionRun, snapshot: MessageSnapshot) -> None:
        if self._listener is None:
            return
        update = StreamUpdate(
            session_id=run.session.session_id,
            conversation_id=run.session.conversation_id,
            message_id=run.session.message_id,
            status=run.status,
            snapshot=snapshot,
        )
        try:
            self._listener(update)
        except Exception as exc:  # noqa: BLE001 - a failing observer must not break the session
            log_event(
                self._logger,
                "stream.listener_error",
                run.ctx,
                level=logging.ERROR,
                failure_class=type(exc).__name__,
                error=str(exc),
            )


__all__ = ["StreamSessionController", "Listener", "DEFAULT_CONVERSATION"]
