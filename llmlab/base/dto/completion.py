"""
Pydantic DTOs for the server's response shapes.

- ``CompletionResponseDTO``: non-streaming body ``{choices:[{message:{content}}]}``.
- ``StreamFrameDTO``: a data frame's JSON object, projected to ``response`` and
  ``systemPrompt``; everything else the server adds is ignored.
- ``ServerErrorDTO``: the ``{statusCode, message}`` object the server sends
  both as an HTTP error body and as an in-stream error frame.
"""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class CompletionMessageDTO(BaseModel):
    model_config = ConfigDict(extra="ignore")

    content: Optional[str] = None


class CompletionChoiceDTO(BaseModel):
    model_config = ConfigDict(extra="ignore")

    message: CompletionMessageDTO


class CompletionResponseDTO(BaseModel):
    """Non-streaming completion body; at least one choice is required."""

    model_config = ConfigDict(extra="ignore")

    choices: List[CompletionChoiceDTO] = Field(..., min_length=1)

    @property
    def first_content(self) -> Optional[str]:
        return self.choices[0].message.content


class StreamFrameDTO(BaseModel):
    """Data frame payload.

    Missing fields are ``None``, not an error. Values are forwarded as the
    server sent them; agents are free to put non-string JSON in ``response``.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    response: Any = None
    system_prompt: Any = Field(default=None, alias="systemPrompt")


class ServerErrorDTO(BaseModel):
    """Error object reported by the server."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    status_code: Optional[Any] = Field(default=None, alias="statusCode")
    message: Optional[Any] = None

    @property
    def status(self) -> Optional[int]:
        """``statusCode`` as an int when the server sent something numeric."""
        try:
            return int(self.status_code) if self.status_code is not None else None
        except (TypeError, ValueError):
            return None


__all__ = [
    "CompletionMessageDTO",
    "CompletionChoiceDTO",
    "CompletionResponseDTO",
    "StreamFrameDTO",
    "ServerErrorDTO",
]
