"""Callback dispatcher for a :class:`StreamConnection`.

Maps the connection's event sequence onto three caller-supplied callbacks:

    DataEvent   -> on_success(event)
    ErrorEvent  -> on_error(event)
    EndMarker   -> on_complete()

``run()`` dispatches in the calling thread; ``start()`` runs the same loop on
a daemon thread for fire-and-forget use. Either way callbacks execute one at a
time, in frame order, and ``on_complete`` fires at most once and never after a
terminal error. A callback may call ``stop()`` to end the stream; no callback
runs after that.
"""
from __future__ import annotations

import threading
from typing import Callable, Iterator, Optional

from ..logging import LogContext, get_logger, normalized_log_event
from .connection import StreamConnection
from .events import DataEvent, DecodedEvent, EndMarker, ErrorEvent

SuccessCallback = Callable[[DataEvent], None]
ErrorCallback = Callable[[ErrorEvent], None]
CompleteCallback = Callable[[], None]


def _noop(*_args) -> None:
    return None


class StreamController:
    """Drive a connection and deliver its events to callbacks.

    Responsibilities:
      * Dispatch each event to exactly one callback channel.
      * Expose `stop(reason)` for cancellation from any thread.
      * Track completion and the terminal error for post-hoc inspection.
    """

    def __init__(
        self,
        connection: StreamConnection,
        *,
        on_success: Optional[SuccessCallback] = None,
        on_error: Optional[ErrorCallback] = None,
        on_complete: Optional[CompleteCallback] = None,
        logger=None,
        ctx: Optional[LogContext] = None,
    ) -> None:
        self._connection = connection
        self._on_success = on_success or _noop
        self._on_error = on_error or _noop
        self._on_complete = on_complete or _noop
        self._logger = logger or get_logger("llmlab.stream")
        self._ctx = ctx or LogContext()
        self._thread: Optional[threading.Thread] = None
        self._done = threading.Event()
        self._completed = False
        self._terminal_error: Optional[ErrorEvent] = None
        self._callback_exception: Optional[BaseException] = None

    # API -----------------------------------------------------------------
    def run(self) -> None:
        """Dispatch every event synchronously, then close the connection.

        An exception raised by a callback closes the connection and is
        re-raised here.
        """
        try:
            self._drive()
        finally:
            self._done.set()

    def start(self) -> "StreamController":
        """Run the dispatch loop on a daemon thread and return immediately."""
        if self._thread is not None:
            return self
        self._thread = threading.Thread(target=self._run_in_thread, name="llmlab-stream", daemon=True)
        self._thread.start()
        return self

    def stop(self, reason: Optional[str] = None) -> None:
        """Stop the stream; idempotent and safe after completion."""
        self._connection.close(reason or "stopped")

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the dispatch loop to finish; returns ``True`` when it has."""
        return self._done.wait(timeout)

    def __iter__(self) -> Iterator[DecodedEvent]:  # pragma: no cover - delegation
        return iter(self._connection)

    @property
    def connection(self) -> StreamConnection:
        return self._connection

    @property
    def finished(self) -> bool:  # noqa: D401 - short property
        """Whether the dispatch loop has ended (completed, failed or stopped)."""
        return self._done.is_set()

    @property
    def completed(self) -> bool:  # noqa: D401 - short property
        """Whether ``on_complete`` has been invoked."""
        return self._completed

    @property
    def error(self) -> Optional[ErrorEvent]:  # noqa: D401 - short property
        """The terminal error event (transport/setup), if the stream failed."""
        return self._terminal_error

    @property
    def callback_exception(self) -> Optional[BaseException]:
        """Exception raised by a callback, if one aborted the stream."""
        return self._callback_exception

    # Internals -------------------------------------------------------------
    def _dispatch(self, event: DecodedEvent) -> None:
        if isinstance(event, DataEvent):
            self._on_success(event)
        elif isinstance(event, ErrorEvent):
            if event.is_terminal:
                self._terminal_error = event
            self._on_error(event)
        elif isinstance(event, EndMarker) and not self._completed:
            self._completed = True
            self._on_complete()
            self._connection.close()

    def _drive(self) -> None:
        try:
            for event in self._connection:
                self._dispatch(event)
        except Exception as exc:
            self._callback_exception = exc
            raise
        finally:
            self._connection.close()

    def _run_in_thread(self) -> None:
        try:
            self._drive()
        except Exception as exc:
            normalized_log_event(
                self._logger,
                "stream.callback_error",
                self._ctx,
                phase="mid_stream",
                error_code="internal",
                error=repr(exc),
            )
        finally:
            self._done.set()


__all__ = ["StreamController", "SuccessCallback", "ErrorCallback", "CompleteCallback"]
