"""Per-call streaming connection.

Purpose:
    Own one live streaming HTTP response together with its
    :class:`FrameDecoder`, and expose the decoded frames as an ordered,
    cancellable iterator of :class:`DecodedEvent` values.

Lifecycle:
    - The connection is created unopened; the POST happens when iteration
      starts, so building a connection never raises.
    - Setup failures (connect errors, non-2xx status) become a single terminal
      ``ErrorEvent(kind=SETUP)``.
    - The iterator ends after exactly one terminal event: an ``EndMarker`` (the
      sentinel frame, or ``reason="eof"`` when the server closes the body) or
      a terminal ``ErrorEvent``. Protocol and parse errors do not end it.
    - ``close()`` is idempotent, thread-safe and valid before, during or after
      iteration. Once closed no further events are yielded, even when decoded
      frames are still pending.

Concurrency:
    A connection is consumed by one thread. ``close()`` may be called from any
    thread; from a thread other than the reader it also shuts the socket
    down, so a read blocked on a silent server returns at once. A transport
    exception caused by that close is not reported.
"""

from __future__ import annotations

import socket
import threading
import time
from contextlib import AbstractContextManager, ExitStack, suppress
from typing import Callable, Iterator, Optional

import httpx

from ..cancellation import CancellationToken
from ..errors import AgentError, ErrorCode, classify_exception
from ..http import http_error
from ..logging import LogContext, get_logger, normalized_log_event
from .decoder import FrameDecoder
from .events import DecodedEvent, EndMarker, ErrorEvent, ErrorKind

ResponseOpener = Callable[[], AbstractContextManager[httpx.Response]]


def _shutdown_socket(response: httpx.Response) -> None:
    """Shut down the socket under a live response so a blocked read returns.

    Transports that expose no ``network_stream`` (mock transports, fakes) are
    left to the regular response close.
    """
    network_stream = response.extensions.get("network_stream")
    if network_stream is None:
        return
    sock = network_stream.get_extra_info("socket")
    if sock is None:
        return
    with suppress(OSError):
        sock.shutdown(socket.SHUT_RDWR)


class StreamConnection:
    """Cancellable iterator over one agent stream.

    Parameters:
        opener: Zero-argument callable returning the ``httpx`` streaming
            context manager (``client.stream("POST", ...)``).
        decoder: Frame decoder for this connection; a fresh one by default.
        token: Optional parent cancellation token; cancelling it stops the
            stream, while closing the stream leaves the parent untouched.
        logger: Structured logger (``llmlab.stream`` by default).
        ctx: Log context (model, session id, request id).
    """

    def __init__(
        self,
        opener: ResponseOpener,
        *,
        decoder: Optional[FrameDecoder] = None,
        token: Optional[CancellationToken] = None,
        logger=None,
        ctx: Optional[LogContext] = None,
    ) -> None:
        self._opener = opener
        self._decoder = decoder or FrameDecoder()
        self._parent = token
        self._token = token.child() if token is not None else CancellationToken()
        self._logger = logger or get_logger("llmlab.stream")
        self._ctx = ctx or LogContext()
        self._lock = threading.Lock()
        self._stack: Optional[ExitStack] = None
        self._response: Optional[httpx.Response] = None
        self._reader: Optional[int] = None
        self._started = False
        self._closed = False
        self._emitted = 0
        self._t0: Optional[float] = None
        self._first_event_ms: Optional[float] = None

    # API -----------------------------------------------------------------
    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def started(self) -> bool:
        return self._started

    @property
    def cancelled(self) -> bool:
        """Whether the stream was asked to stop (closed or parent token cancelled)."""
        return self._token.cancelled

    def __iter__(self) -> Iterator[DecodedEvent]:
        return self.events()

    def __enter__(self) -> "StreamConnection":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def events(self) -> Iterator[DecodedEvent]:
        """Open the stream and yield its events; single use.

        A second call, or a call after ``close()``, yields nothing.
        """
        with self._lock:
            if self._started or self._closed:
                return
            self._started = True
            self._reader = threading.get_ident()
            self._stack = ExitStack()
        try:
            for event in self._run():
                if self._token.cancelled:
                    return
                self._record(event)
                yield event
                if event.is_terminal:
                    return
        finally:
            self.close()

    def close(self, reason: Optional[str] = None) -> bool:
        """Release the connection; returns ``True`` only on the first call."""
        with self._lock:
            if self._closed:
                return False
            self._closed = True
            stack, self._stack = self._stack, None
            response, self._response = self._response, None
        self._token.cancel(reason or "closed")
        if self._parent is not None:
            self._parent.unlink_child(self._token)
        if response is not None and self._reader != threading.get_ident():
            # a read blocked on a quiet server only returns once the socket is shut down
            _shutdown_socket(response)
        if stack is not None:
            with suppress(Exception):
                stack.close()
        normalized_log_event(
            self._logger,
            "stream.close",
            self._ctx,
            phase="finalize",
            emitted=self._emitted,
            reason=reason,
            opened=self._started,
        )
        return True

    stop = close

    # Internals -------------------------------------------------------------
    def _run(self) -> Iterator[DecodedEvent]:
        self._t0 = time.perf_counter()
        try:
            response = self._open()
        except AgentError as err:
            yield self._setup_error(err)
            return
        if response is None:
            return
        normalized_log_event(
            self._logger, "stream.open", self._ctx, phase="start", status=response.status_code
        )

        chunks = response.iter_bytes()
        while not self._token.cancelled:
            try:
                chunk = next(chunks, None)
            except Exception as exc:  # transport failure mid-stream
                if not self._token.cancelled:
                    yield self._transport_error(exc)
                return
            if chunk is None:
                break
            yield from self._decoder.feed(chunk)
            if self._decoder.ended:
                return

        if self._token.cancelled:
            return
        yield from self._decoder.finish()
        if not self._decoder.ended:
            yield EndMarker(reason="eof")

    def _open(self) -> Optional[httpx.Response]:
        stack = self._stack
        if stack is None:
            return None
        try:
            response = stack.enter_context(self._opener())
            if not response.is_success:
                response.read()
                raise http_error(response, model=self._ctx.model)
        except AgentError:
            raise
        except Exception as exc:
            code = classify_exception(exc)
            raise AgentError(
                code=code,
                message=f"Failed to start the stream: {exc}",
                model=self._ctx.model,
                retryable=code in (ErrorCode.TRANSIENT, ErrorCode.TIMEOUT),
                raw=exc,
            ) from exc
        with self._lock:
            if not self._closed:
                self._response = response
        if self._token.cancelled:
            # closed while the request was in flight
            with suppress(Exception):
                stack.close()
            return None
        return response

    def _setup_error(self, err: AgentError) -> ErrorEvent:
        normalized_log_event(
            self._logger,
            "stream.setup_error",
            self._ctx,
            phase="start",
            error_code=err.code.value,
            error=err.message,
            status=err.status_code,
        )
        return ErrorEvent(
            kind=ErrorKind.SETUP,
            message=err.message,
            code=err.code,
            status_code=err.status_code,
        )

    def _transport_error(self, exc: Exception) -> ErrorEvent:
        code = classify_exception(exc)
        normalized_log_event(
            self._logger,
            "stream.transport_error",
            self._ctx,
            phase="mid_stream",
            error_code=code.value,
            error=str(exc),
            emitted=self._emitted,
        )
        return ErrorEvent(kind=ErrorKind.TRANSPORT, message=f"Stream encountered an error: {exc}", code=code)

    def _record(self, event: DecodedEvent) -> None:
        """Log per-event diagnostics and update emission metrics."""
        if self._first_event_ms is None and self._t0 is not None:
            self._first_event_ms = (time.perf_counter() - self._t0) * 1000.0
        if isinstance(event, ErrorEvent):
            if event.kind is ErrorKind.PROTOCOL:
                normalized_log_event(
                    self._logger,
                    "stream.protocol_error",
                    self._ctx,
                    phase="mid_stream",
                    error_code=event.code.value,
                    status=event.status_code,
                    line=event.raw,
                )
            elif event.kind is ErrorKind.PARSE:
                normalized_log_event(
                    self._logger,
                    "stream.decode_error",
                    self._ctx,
                    phase="mid_stream",
                    error_code=event.code.value,
                    error=event.message,
                    line=event.raw,
                )
            return
        if isinstance(event, EndMarker):
            if event.reason == "sentinel":
                normalized_log_event(self._logger, "stream.end_marker", self._ctx, phase="mid_stream")
            duration_ms = (time.perf_counter() - self._t0) * 1000.0 if self._t0 is not None else None
            normalized_log_event(
                self._logger,
                "stream.end",
                self._ctx,
                phase="finalize",
                emitted=self._emitted,
                reason=event.reason,
                metrics={
                    "time_to_first_event_ms": self._first_event_ms,
                    "total_duration_ms": duration_ms,
                    "emitted_count": self._emitted,
                },
            )
            return
        self._emitted += 1


__all__ = ["StreamConnection", "ResponseOpener"]
