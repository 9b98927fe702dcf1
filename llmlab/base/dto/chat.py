"""
Pydantic DTOs validating caller input before a request is built.

Purpose
-------
Callers hand the client messages as ``Message`` instances, plain mappings or
any object exposing ``role``/``content``. These DTOs project exactly those two
fields, validate them along with the sampling parameters, and convert the
result into the frozen ``ChatRequest`` dataclass.

Failure semantics: validation either succeeds or raises
``pydantic.ValidationError``; the agent helpers translate that into an
``AgentError`` with ``ErrorCode.VALIDATION``.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, StrictStr, model_validator

from ..models import ChatRequest, Message, Role


class MessageDTO(BaseModel):
    """A single chat message reduced to its wire fields.

    Any other attribute or key on the caller's object is ignored.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    role: Role
    content: StrictStr

    @model_validator(mode="before")
    @classmethod
    def _project(cls, value: Any) -> Any:
        """Reduce mappings and arbitrary objects to ``{role, content}``."""
        if isinstance(value, Mapping):
            return {"role": value.get("role"), "content": value.get("content")}
        if hasattr(value, "role") and hasattr(value, "content"):
            return {"role": getattr(value, "role"), "content": getattr(value, "content")}
        return value

    def to_message(self) -> Message:
        return Message(role=self.role, content=self.content)


class ChatRequestDTO(BaseModel):
    """Validated chat request parameters.

    Parameters:
        model: Target agent identifier (non-empty).
        messages: Ordered, non-empty list of messages.
        session_id: Optional conversation id; passed through untouched.
        max_tokens: If provided, must be a positive integer.
        temperature: If provided, any float; the server owns range checks.
        stream: Whether a frame stream is requested.

    Raises:
        ValidationError: On unknown roles, non-string content, or bad params.
    """

    model: StrictStr = Field(..., min_length=1)
    messages: List[MessageDTO] = Field(..., min_length=1)
    session_id: Optional[StrictStr] = None
    max_tokens: Optional[int] = Field(default=None, gt=0, strict=True)
    temperature: Optional[float] = None
    stream: bool = False

    def to_request(self) -> ChatRequest:
        """Convert into the immutable request dataclass."""
        return ChatRequest(
            model=self.model,
            messages=[m.to_message() for m in self.messages],
            session_id=self.session_id,
            max_tokens=self.max_tokens,
            temperature=self.temperature,
            stream=self.stream,
        )


__all__ = [
    "MessageDTO",
    "ChatRequestDTO",
]
