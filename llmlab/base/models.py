"""
Agent-client domain models (DTOs) public surface.

This module re-exports the one-class-per-file implementations under
``llmlab.base.models_parts``.
"""

from .models_parts.message import Message, Role, ROLES
from .models_parts.chat_request import ChatRequest
from .models_parts.chat_result import ChatResult

__all__ = [
    "Message",
    "Role",
    "ROLES",
    "ChatRequest",
    "ChatResult",
]
