"""LLMLab agent client.

Purpose:
        Talk to an LLMLab agent over its chat completions endpoint, either as a
        single request/response exchange or as a ``data: <payload>`` frame
        stream delivered through callbacks or a pull-based iterator.

External dependencies:
        - HTTP client only (``httpx``). The API key travels in the ``apikey``
          header of every request.

Timeout strategy:
        - Non-streaming calls use ``TimeoutConfig.for_request()``.
        - Streams use ``TimeoutConfig.for_stream()``; the read timeout is
          unbounded by default because agents may pause between frames.

Error handling:
        - ``chat_with_agent`` returns ``ChatResult.failed`` and never raises.
        - Stream failures are delivered as ``ErrorEvent`` values (``on_error``)
          and are never raised from ``open_chat_stream``/``start_chat_stream``.
        - Only construction raises, with ``AgentError(code=AUTH)`` when no API
          key can be resolved.

Concurrency:
        - Every stream owns its connection and decoder, so streams started from
          the same client run independently. The client tracks running
          controllers so ``stop_chat_stream()`` can stop all of them.
"""

from __future__ import annotations

import threading
from typing import Any, Iterable, List, Optional

import httpx

from ..base.cancellation import CancellationToken
from ..base.constants import MISSING_API_KEY_ERROR
from ..base.errors import AgentError, ErrorCode
from ..base.http import build_httpx_client
from ..base.logging import LogContext, get_logger
from ..base.models import ChatResult
from ..base.streaming import StreamConnection, StreamController
from ..base.streaming.stream_controller import CompleteCallback, ErrorCallback, SuccessCallback
from ..config import ClientConfig, get_client_config
from .helpers import chat_impl as _chat_impl, open_stream_impl as _open_stream_impl


class AgentClient:
    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        base_url: Optional[str] = None,
        config: Optional[ClientConfig] = None,
        http_client: Optional[httpx.Client] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        """Create a client bound to one API key and base URL.

        Parameters
        ----------
        api_key:
            LLMLab API key. Falls back to ``LLMLAB_API_KEY`` (or the config
            file) when omitted.
        base_url:
            API base URL; defaults to ``https://launch-api.com``.
        config:
            Fully resolved configuration. ``api_key``/``base_url`` still win
            when given explicitly.
        http_client:
            Caller-owned ``httpx.Client``; it is not closed by :meth:`close`.
        transport:
            Transport for the owned client (``httpx.MockTransport`` in tests).

        Raises
        ------
        AgentError
            ``code=AUTH``, ``message="missing_api_key"`` when no key resolves.
        """
        if config is None:
            cfg = get_client_config({"api_key": api_key, "base_url": base_url})
        else:
            cfg = config.with_overrides(
                api_key=api_key,
                base_url=base_url.rstrip("/") if base_url else None,
            )
        if not cfg.api_key:
            raise AgentError(code=ErrorCode.AUTH, message=MISSING_API_KEY_ERROR)

        self._config = cfg
        self._owns_http = http_client is None
        self._http = http_client or build_httpx_client(cfg.base_url, cfg.timeouts, transport=transport)
        self._logger = get_logger("llmlab.agent")
        self._stream_logger = get_logger("llmlab.stream")
        self._active: set[StreamController] = set()
        self._active_lock = threading.Lock()
        self._closed = False

    @property
    def config(self) -> ClientConfig:
        """Resolved configuration of this client."""
        return self._config

    @property
    def completions_url(self) -> str:
        return f"{self._config.base_url}{self._config.completions_path}"

    def chat_with_agent(
        self,
        *,
        model: str,
        messages: Iterable[Any],
        session_id: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> ChatResult:
        """Send one non-streaming chat request and return its result.

        ``messages`` may hold :class:`Message` objects or ``{"role", "content"}``
        mappings. Never raises; inspect ``ChatResult.success``.
        """
        return _chat_impl(
            self,
            model=model,
            messages=messages,
            session_id=session_id,
            max_tokens=max_tokens,
            temperature=temperature,
        )

    def open_chat_stream(
        self,
        *,
        model: str,
        messages: Iterable[Any],
        session_id: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        token: Optional[CancellationToken] = None,
    ) -> StreamConnection:
        """Return an unopened stream; iterate it to receive decoded events.

        The request is sent on first iteration. Use the connection as a
        context manager (or call ``close()``) to release it early.
        """
        return _open_stream_impl(
            self,
            model=model,
            messages=messages,
            session_id=session_id,
            max_tokens=max_tokens,
            temperature=temperature,
            token=token,
        )

    def start_chat_stream(
        self,
        *,
        session_id: Optional[str] = None,
        model: str,
        messages: Iterable[Any],
        on_success: Optional[SuccessCallback] = None,
        on_error: Optional[ErrorCallback] = None,
        on_complete: Optional[CompleteCallback] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
        background: bool = True,
    ) -> StreamController:
        """Start a streaming chat and dispatch its events to callbacks.

        With ``background=True`` (default) the stream runs on a daemon thread
        and the controller is returned immediately; otherwise events are
        dispatched in the calling thread before returning.
        """
        connection = self.open_chat_stream(
            model=model,
            messages=messages,
            session_id=session_id,
            max_tokens=max_tokens,
            temperature=temperature,
        )
        controller = StreamController(
            connection,
            on_success=on_success,
            on_error=on_error,
            on_complete=on_complete,
            logger=self._stream_logger,
            ctx=LogContext(
                model=model if isinstance(model, str) else None,
                session_id=session_id if isinstance(session_id, str) else None,
            ),
        )
        with self._active_lock:
            self._active = {c for c in self._active if not c.finished}
            self._active.add(controller)
        if background:
            controller.start()
        else:
            controller.run()
        return controller

    def stop_chat_stream(self, controller: Optional[StreamController] = None) -> None:
        """Stop one stream, or every stream started by this client.

        Safe to call repeatedly and after the streams have finished.
        """
        with self._active_lock:
            if controller is None:
                targets: List[StreamController] = list(self._active)
                self._active.clear()
            else:
                targets = [controller]
                self._active.discard(controller)
        for target in targets:
            target.stop("stop_chat_stream")

    def active_streams(self) -> List[StreamController]:
        """Controllers started by this client that have not finished yet."""
        with self._active_lock:
            return [c for c in self._active if not c.finished]

    def close(self) -> None:
        """Stop active streams and release the owned HTTP client."""
        if self._closed:
            return
        self._closed = True
        self.stop_chat_stream()
        if self._owns_http:
            self._http.close()

    def __enter__(self) -> "AgentClient":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = ["AgentClient"]
