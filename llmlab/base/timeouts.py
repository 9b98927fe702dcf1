"""Timeout configuration for the agent client's HTTP transport.

The stream decoder enforces no timeout of its own: a stalled server is the
transport's concern. This module turns the configured durations into an
``httpx.Timeout`` for each kind of call.

Supported environment variables (all optional, positive floats):
    LLMLAB_TIMEOUT_CONNECT_SECONDS
    LLMLAB_TIMEOUT_HTTP_SECONDS
    LLMLAB_TIMEOUT_STREAM_SECONDS

``get_timeout_config()`` parses the environment on every call; the result is
frozen into the ``ClientConfig`` at client construction, so a running client
never observes later environment changes.
"""
from __future__ import annotations

from dataclasses import dataclass
import os

import httpx


@dataclass(frozen=True)
class TimeoutConfig:
    """Container for normalized timeout values (seconds).

    Attributes:
        connect_timeout_seconds: Time allowed to establish the TCP/TLS connection.
        http_timeout_seconds: Overall read/write budget of a non-streaming call.
        stream_read_timeout_seconds: Idle read timeout between stream chunks;
            ``None`` waits indefinitely.
    """

    connect_timeout_seconds: float = 10.0
    http_timeout_seconds: float = 60.0
    stream_read_timeout_seconds: float | None = None

    def for_request(self) -> httpx.Timeout:
        """Timeout used for the plain request/response call."""
        return httpx.Timeout(self.http_timeout_seconds, connect=self.connect_timeout_seconds)

    def for_stream(self) -> httpx.Timeout:
        """Timeout used for the streaming call (read bounded only if configured)."""
        return httpx.Timeout(
            connect=self.connect_timeout_seconds,
            read=self.stream_read_timeout_seconds,
            write=self.http_timeout_seconds,
            pool=self.connect_timeout_seconds,
        )


def _parse_env_float(name: str, default: float | None) -> float | None:
    """Parse an environment variable as a positive float with a fallback default."""
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        val = float(raw)
        return val if val > 0 else default
    except ValueError:  # pragma: no cover - defensive
        return default


def get_timeout_config() -> TimeoutConfig:
    """Return a `TimeoutConfig` built from defaults and environment overrides."""
    defaults = TimeoutConfig()
    return TimeoutConfig(
        connect_timeout_seconds=float(
            _parse_env_float("LLMLAB_TIMEOUT_CONNECT_SECONDS", defaults.connect_timeout_seconds)
        ),
        http_timeout_seconds=float(
            _parse_env_float("LLMLAB_TIMEOUT_HTTP_SECONDS", defaults.http_timeout_seconds)
        ),
        stream_read_timeout_seconds=_parse_env_float(
            "LLMLAB_TIMEOUT_STREAM_SECONDS", defaults.stream_read_timeout_seconds
        ),
    )


__all__ = [
    "TimeoutConfig",
    "get_timeout_config",
]
