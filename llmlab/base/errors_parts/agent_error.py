"""
Structured agent error exception type.

Wraps transport, HTTP and payload failures with a normalized `ErrorCode` so the
non-streaming result and the streaming error events carry the same shape.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from .error_code import ErrorCode


@dataclass
class AgentError(Exception):
    """Represents a structured client error with a normalized error code.

    Attributes:
        code: Normalized :class:`ErrorCode` classification for the failure.
        message: Human-readable error message suitable for logging.
        model: Optional agent id associated with the failure.
        status_code: HTTP status (or server ``statusCode``) when one is known.
        retryable: Hint for callers that implement their own retry policy.
        raw: Optional original exception for diagnostics.
    """

    code: ErrorCode
    message: str
    model: Optional[str] = None
    status_code: Optional[int] = None
    retryable: bool = False
    raw: Optional[Exception] = None

    def __str__(self) -> str:  # pragma: no cover - trivial
        """Return a compact string combining model, code, and message."""
        return f"{self.model or '-'} {self.code.value}: {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-serializable view without the raw exception."""
        return {
            "code": self.code.value,
            "message": self.message,
            "model": self.model,
            "status_code": self.status_code,
            "retryable": self.retryable,
        }


__all__ = ["AgentError"]
