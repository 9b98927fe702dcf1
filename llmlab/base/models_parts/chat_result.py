"""
ChatResult DTO returned by the non-streaming agent call.

The non-streaming call never raises; success and failure are both values of
this type. ``error`` keeps the structured :class:`AgentError` so callers can
branch on ``error.code`` without parsing messages.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from ..errors import AgentError


@dataclass(frozen=True)
class ChatResult:
    """Outcome of :meth:`AgentClient.chat_with_agent`.

    Attributes:
        success: True when the agent answered with a usable completion.
        content: Text of the first choice's message on success.
        error: Structured failure cause on error.
    """

    success: bool
    content: Optional[str] = None
    error: Optional[AgentError] = None

    @classmethod
    def ok(cls, content: Optional[str]) -> "ChatResult":
        return cls(success=True, content=content)

    @classmethod
    def failed(cls, error: AgentError) -> "ChatResult":
        return cls(success=False, error=error)

    def to_dict(self) -> Dict[str, Any]:
        """Return ``{success, content}`` or ``{success, error}``."""
        if self.success:
            return {"success": True, "content": self.content}
        return {"success": False, "error": self.error.to_dict() if self.error else None}


__all__ = ["ChatResult"]
