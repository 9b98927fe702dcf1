"""
Agent client base package.

Transport-independent building blocks shared by the agent client:
- Models (DTOs): request/result dataclasses and pydantic validators
- Errors: normalized error taxonomy
- Streaming: frame decoder, per-call connection, callback dispatcher
- Infrastructure: logging, timeouts, cancellation, HTTP helpers
"""

from .models import ChatRequest, ChatResult, Message, Role
from .errors import AgentError, ErrorCode, classify_exception
from .timeouts import TimeoutConfig, get_timeout_config
from .cancellation import CancellationToken
from .streaming import (
    DataEvent,
    DecodedEvent,
    EndMarker,
    ErrorEvent,
    ErrorKind,
    FrameDecoder,
    StreamConnection,
    StreamController,
)

__all__ = [
    # Models
    "Role",
    "Message",
    "ChatRequest",
    "ChatResult",
    # Errors
    "AgentError",
    "ErrorCode",
    "classify_exception",
    # Infrastructure
    "TimeoutConfig",
    "get_timeout_config",
    "CancellationToken",
    # Streaming
    "DataEvent",
    "DecodedEvent",
    "EndMarker",
    "ErrorEvent",
    "ErrorKind",
    "FrameDecoder",
    "StreamConnection",
    "StreamController",
]
