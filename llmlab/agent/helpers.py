"""Agent client helpers module.

Purpose:
- Keep ``client.py`` lean by holding the request building, the non-streaming
  call and the streaming-connection wiring as plain functions.

External dependencies:
- ``httpx`` (through the client's owned ``httpx.Client``) and ``pydantic``
  for input and response validation.

Failure semantics:
- ``chat_impl`` never raises: every failure becomes ``ChatResult.failed``.
- ``open_stream_impl`` never raises: validation and connection failures
  surface as the stream's single terminal ``ErrorEvent(kind=SETUP)``.
"""

from __future__ import annotations

import time
from typing import TYPE_CHECKING, Any, Dict, Iterable, Optional

from pydantic import ValidationError

from ..base.cancellation import CancellationToken
from ..base.constants import API_KEY_HEADER
from ..base.dto import ChatRequestDTO, CompletionResponseDTO
from ..base.errors import AgentError, ErrorCode, classify_exception
from ..base.http import http_error
from ..base.logging import LogContext, normalized_log_event
from ..base.models import ChatRequest, ChatResult
from ..base.streaming import FrameDecoder, StreamConnection

if TYPE_CHECKING:
    from .client import AgentClient


def build_request(
    *,
    model: Any,
    messages: Iterable[Any],
    session_id: Any = None,
    max_tokens: Any = None,
    temperature: Any = None,
    stream: bool,
) -> ChatRequest:
    """Validate caller input and build the immutable :class:`ChatRequest`.

    Raises:
        AgentError: ``VALIDATION`` when any field is unusable.
    """
    try:
        dto = ChatRequestDTO(
            model=model,
            messages=list(messages) if messages is not None else [],
            session_id=session_id,
            max_tokens=max_tokens,
            temperature=temperature,
            stream=stream,
        )
    except (ValidationError, TypeError) as e:
        raise AgentError(
            code=ErrorCode.VALIDATION,
            message=f"invalid chat request: {e}",
            model=model if isinstance(model, str) else None,
            raw=e,
        ) from e
    return dto.to_request()


def request_headers(api_key: str) -> Dict[str, str]:
    """Headers for every agent call; the key travels only here."""
    return {"Content-Type": "application/json", API_KEY_HEADER: api_key}


def _log_context(model: Any, session_id: Any) -> LogContext:
    return LogContext(
        model=model if isinstance(model, str) else None,
        session_id=session_id if isinstance(session_id, str) else None,
    )


def error_result(agent: "AgentClient", error: AgentError, *, ctx: LogContext) -> ChatResult:
    """Log a failed non-streaming call and wrap it in a ``ChatResult``."""
    normalized_log_event(
        agent._logger,
        "chat.error",
        ctx,
        phase="finalize",
        emitted=False,
        error=error.message,
        error_code=error.code.value,
        status=error.status_code,
    )
    return ChatResult.failed(error)


def _post(agent: "AgentClient", request: ChatRequest):
    try:
        return agent._http.post(
            agent.completions_url,
            json=request.to_payload(),
            headers=request_headers(agent._config.api_key or ""),
            timeout=agent._config.timeouts.for_request(),
        )
    except Exception as e:
        code = classify_exception(e)
        raise AgentError(
            code=code,
            message=f"request failed: {e}",
            model=request.model,
            retryable=code in (ErrorCode.TRANSIENT, ErrorCode.TIMEOUT),
            raw=e,
        ) from e


def chat_impl(
    agent: "AgentClient",
    *,
    model: Any,
    messages: Iterable[Any],
    session_id: Any = None,
    max_tokens: Any = None,
    temperature: Any = None,
) -> ChatResult:
    """Single request/response exchange with the agent.

    Returns ``ChatResult.ok(choices[0].message.content)`` on a 2xx response
    with a well-formed body; ``ChatResult.failed`` otherwise.
    """
    ctx = _log_context(model, session_id)
    try:
        request = build_request(
            model=model,
            messages=messages,
            session_id=session_id,
            max_tokens=max_tokens,
            temperature=temperature,
            stream=False,
        )
        normalized_log_event(
            agent._logger,
            "chat.start",
            ctx,
            phase="start",
            messages=len(request.messages),
            max_tokens=request.max_tokens,
            temperature=request.temperature,
        )
        t0 = time.perf_counter()
        resp = _post(agent, request)
        latency_ms = (time.perf_counter() - t0) * 1000.0
        if not resp.is_success:
            return error_result(agent, http_error(resp, model=request.model), ctx=ctx)
        try:
            body = CompletionResponseDTO.model_validate(resp.json())
        except ValueError as e:  # JSONDecodeError and pydantic ValidationError
            raise AgentError(
                code=ErrorCode.PARSE,
                message=f"malformed response body: {e}",
                model=request.model,
                status_code=resp.status_code,
                raw=e,
            ) from e
        normalized_log_event(
            agent._logger,
            "chat.end",
            ctx,
            phase="finalize",
            emitted=True,
            status=resp.status_code,
            latency_ms=latency_ms,
        )
        return ChatResult.ok(body.first_content)
    except AgentError as e:
        return error_result(agent, e, ctx=ctx)
    except Exception as e:  # pragma: no cover - last resort, result must be returned
        return error_result(
            agent,
            AgentError(code=ErrorCode.INTERNAL, message=str(e), model=ctx.model, raw=e),
            ctx=ctx,
        )


def open_stream_impl(
    agent: "AgentClient",
    *,
    model: Any,
    messages: Iterable[Any],
    session_id: Any = None,
    max_tokens: Any = None,
    temperature: Any = None,
    token: Optional[CancellationToken] = None,
) -> StreamConnection:
    """Build an unopened :class:`StreamConnection` for a streaming chat.

    The POST is deferred to the connection's first iteration.
    """
    ctx = _log_context(model, session_id)
    config = agent._config
    try:
        request: Optional[ChatRequest] = build_request(
            model=model,
            messages=messages,
            session_id=session_id,
            max_tokens=max_tokens,
            temperature=temperature,
            stream=True,
        )
        invalid: Optional[AgentError] = None
    except AgentError as e:
        request, invalid = None, e

    def _opener():
        if invalid is not None:
            raise invalid
        return agent._http.stream(
            "POST",
            agent.completions_url,
            json=request.to_payload(),
            headers=request_headers(config.api_key or ""),
            timeout=config.timeouts.for_stream(),
        )

    return StreamConnection(
        _opener,
        decoder=FrameDecoder(encoding=config.encoding, mode=config.classification),
        token=token,
        logger=agent._stream_logger,
        ctx=ctx,
    )


__all__ = [
    "build_request",
    "request_headers",
    "chat_impl",
    "open_stream_impl",
    "error_result",
]
