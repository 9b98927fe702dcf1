"""
Message DTO sent to the agent.

Defines the `Message` dataclass and the `Role` literal. Only ``role`` and
``content`` travel on the wire; whatever else a caller attaches to its own
message objects is dropped when the request is built.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Literal


# Message roles accepted by the agent API.
Role = Literal["system", "user", "assistant"]
ROLES = ("system", "user", "assistant")


@dataclass(frozen=True)
class Message:
    """A chat message addressed to (or produced by) an agent.

    Attributes:
        role: The role of the message author (``"system"``, ``"user"`` or
            ``"assistant"``).
        content: Plain text content.
    """

    role: Role
    content: str

    def to_dict(self) -> Dict[str, str]:
        """Return the wire projection ``{"role", "content"}``."""
        return {"role": self.role, "content": self.content}


__all__ = [
    "Message",
    "Role",
    "ROLES",
]
