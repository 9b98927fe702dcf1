"""
ChatRequest DTO for agent chat invocations.

The request holds the agent id, the ordered messages, and the optional session
and sampling parameters. ``to_payload`` renders the wire body, using the
server's camelCase keys and leaving out every optional field that was not
supplied (the server treats an explicit ``null`` differently from absence).
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .message import Message


@dataclass(frozen=True)
class ChatRequest:
    """Normalized chat request, built once per call.

    Attributes:
        model: Target agent identifier.
        messages: Ordered list of `Message` instances.
        session_id: Optional server-side conversation id (opaque to the client).
        max_tokens: Optional positive completion token cap.
        temperature: Optional sampling temperature.
        stream: Whether the server should answer with a frame stream.
    """

    model: str
    messages: List[Message] = field(default_factory=list)
    session_id: Optional[str] = None
    max_tokens: Optional[int] = None
    temperature: Optional[float] = None
    stream: bool = False

    def to_payload(self) -> Dict[str, Any]:
        """Return the JSON body for ``POST /v1/chat/completions``."""
        payload: Dict[str, Any] = {
            "model": self.model,
            "stream": self.stream,
            "messages": [m.to_dict() for m in self.messages],
        }
        if self.session_id is not None:
            payload["sessionId"] = self.session_id
        if self.max_tokens is not None:
            payload["maxTokens"] = self.max_tokens
        if self.temperature is not None:
            payload["temperature"] = self.temperature
        return payload


__all__ = [
    "ChatRequest",
]
