"""HTTP client construction and error translation for the agent client.

Purpose:
    Build the ``httpx.Client`` an :class:`AgentClient` owns and translate
    unsuccessful HTTP responses into :class:`AgentError` values.

External dependencies:
    - ``httpx`` for the underlying synchronous HTTP client.

Timeout strategy:
    - The client carries the non-streaming timeout from ``TimeoutConfig``;
      streaming requests override it per call with ``TimeoutConfig.for_stream``.

Lifecycle:
    - One client per ``AgentClient``; there is no process-wide pool. The
      owner closes it via ``AgentClient.close()``.
"""

from __future__ import annotations

import json
from typing import Optional

import httpx

from ..dto.completion import ServerErrorDTO
from ..errors import AgentError, ErrorCode, code_for_status
from ..timeouts import TimeoutConfig

_RETRYABLE = (ErrorCode.TRANSIENT, ErrorCode.RATE_LIMIT, ErrorCode.TIMEOUT, ErrorCode.UNAVAILABLE)


def build_httpx_client(
    base_url: str,
    timeouts: TimeoutConfig,
    *,
    transport: Optional[httpx.BaseTransport] = None,
) -> httpx.Client:
    """Return a new ``httpx.Client`` bound to ``base_url``.

    Parameters:
        base_url: API base URL; request paths are resolved relative to it.
        timeouts: Timeout configuration; the request timeout becomes the default.
        transport: Optional transport override (``httpx.MockTransport`` in tests).
    """
    return httpx.Client(base_url=base_url, timeout=timeouts.for_request(), transport=transport)


def _server_message(response: httpx.Response) -> Optional[str]:
    """Best-effort extraction of the server's ``message`` from an error body."""
    try:
        body = response.json()
    except (json.JSONDecodeError, UnicodeDecodeError):
        text = response.text.strip()
        return text[:500] or None
    if isinstance(body, dict):
        msg = ServerErrorDTO.model_validate(body).message
        return str(msg) if msg is not None else None
    return None


def http_error(response: httpx.Response, *, model: Optional[str] = None) -> AgentError:
    """Translate an unsuccessful HTTP response into an :class:`AgentError`.

    The response body must already be read (``response.read()`` for streams).
    """
    status = response.status_code
    code = code_for_status(status)
    return AgentError(
        code=code,
        message=f"HTTP error status={status} message={_server_message(response)}",
        model=model,
        status_code=status,
        retryable=code in _RETRYABLE,
    )


__all__ = ["build_httpx_client", "http_error"]
