"""LLMLab agent client package.

Exposes :class:`AgentClient`, the entry point for non-streaming and streaming
chats with an LLMLab agent.
"""

from .client import AgentClient

__all__ = ["AgentClient"]
