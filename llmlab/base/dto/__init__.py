"""DTO validation package for the agent client."""

from .chat import MessageDTO, ChatRequestDTO
from .completion import CompletionResponseDTO, StreamFrameDTO, ServerErrorDTO

__all__ = [
    "MessageDTO",
    "ChatRequestDTO",
    "CompletionResponseDTO",
    "StreamFrameDTO",
    "ServerErrorDTO",
]
