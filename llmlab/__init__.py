"""llmlab: Python client for LLMLab agents.

Quick start::

    from llmlab import AgentClient, Message

    with AgentClient("my-key") as client:
        result = client.chat_with_agent(
            model="my-agent",
            messages=[Message(role="user", content="Hello")],
        )
        print(result.content if result.success else result.error)
"""

from .agent import AgentClient
from .base import (
    AgentError,
    CancellationToken,
    ChatRequest,
    ChatResult,
    DataEvent,
    DecodedEvent,
    EndMarker,
    ErrorCode,
    ErrorEvent,
    ErrorKind,
    FrameDecoder,
    Message,
    StreamConnection,
    StreamController,
    TimeoutConfig,
)
from .config import ClientConfig, get_client_config

__version__ = "0.1.0"

__all__ = [
    "AgentClient",
    "AgentError",
    "CancellationToken",
    "ChatRequest",
    "ChatResult",
    "ClientConfig",
    "DataEvent",
    "DecodedEvent",
    "EndMarker",
    "ErrorCode",
    "ErrorEvent",
    "ErrorKind",
    "FrameDecoder",
    "Message",
    "StreamConnection",
    "StreamController",
    "TimeoutConfig",
    "get_client_config",
    "__version__",
]
