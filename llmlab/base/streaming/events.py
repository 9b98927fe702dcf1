"""Streaming event primitives.

A stream connection turns the server's frames into a sequence of tagged
events. Exactly one terminal event ends every stream: an :class:`EndMarker`
(sentinel frame or end of input) or a terminal :class:`ErrorEvent`
(transport or setup failure). Protocol and parse errors are not terminal.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Literal, Optional, Union

from ..errors import ErrorCode


class ErrorKind(str, Enum):
    """Where in the stream lifecycle an error was observed."""

    TRANSPORT = "transport"
    PROTOCOL = "protocol"
    PARSE = "parse"
    SETUP = "setup"


@dataclass(frozen=True)
class DataEvent:
    """A data frame projected to the two fields the server contracts for.

    Both are usually strings; other JSON values are passed through unchanged.
    """

    response: Any = None
    system_prompt: Any = None

    type: Literal["data"] = "data"
    is_terminal = False

    def to_dict(self) -> Dict[str, Any]:
        """Return the server-shaped mapping ``{response, systemPrompt}``."""
        return {"response": self.response, "systemPrompt": self.system_prompt}


@dataclass(frozen=True)
class ErrorEvent:
    """An error observed on the stream.

    Fields:
      kind: lifecycle stage (`ErrorKind`)
      message: human-readable description
      raw: frame payload for protocol/parse errors, ``None`` otherwise
      code: normalized `ErrorCode`
      status_code: server/HTTP status when known
    """

    kind: ErrorKind
    message: str
    raw: Optional[str] = None
    code: ErrorCode = ErrorCode.UNKNOWN
    status_code: Optional[int] = None

    type: Literal["error"] = "error"

    @property
    def is_terminal(self) -> bool:
        return self.kind in (ErrorKind.TRANSPORT, ErrorKind.SETUP)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "kind": self.kind.value,
            "code": self.code.value,
            "message": self.message,
            "status_code": self.status_code,
        }

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.kind.value}: {self.message}"


@dataclass(frozen=True)
class EndMarker:
    """End of stream: ``reason`` is ``"sentinel"`` or ``"eof"``."""

    reason: Literal["sentinel", "eof"] = "sentinel"

    type: Literal["end"] = "end"
    is_terminal = True


DecodedEvent = Union[DataEvent, ErrorEvent, EndMarker]


__all__ = [
    "ErrorKind",
    "DataEvent",
    "ErrorEvent",
    "EndMarker",
    "DecodedEvent",
]
