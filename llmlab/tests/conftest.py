"""Shared fixtures for the llmlab test suite.

- Every test runs with a clean ``LLMLAB_*`` environment and no ``.env`` file.
- ``make_client`` builds an :class:`AgentClient` bound to an
  ``httpx.MockTransport`` handler, so no test touches the network.
- ``frames`` renders payloads into the ``data: <payload>\\n`` wire format.
"""
from __future__ import annotations

import logging
import os
from typing import Callable, Iterator, List

import httpx
import pytest

from llmlab import AgentClient
from llmlab.base.logging import BASE_LOGGER_NAME, get_logger


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch: pytest.MonkeyPatch, tmp_path) -> None:
    """Strip ``LLMLAB_*`` variables and point ``DOTENV_FILE`` at nothing."""
    for name in list(os.environ):
        if name.startswith("LLMLAB_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("DOTENV_FILE", str(tmp_path / "absent.env"))


def _render(*payloads: str) -> bytes:
    return "".join(f"data: {p}\n" for p in payloads).encode("utf-8")


@pytest.fixture()
def frames() -> Callable[..., bytes]:
    return _render


@pytest.fixture()
def make_client() -> Iterator[Callable[..., AgentClient]]:
    """Factory for clients whose HTTP calls go to a ``MockTransport`` handler."""
    created: List[AgentClient] = []

    def _make(handler, *, api_key: str = "test-key", **kwargs) -> AgentClient:
        client = AgentClient(api_key, transport=httpx.MockTransport(handler), **kwargs)
        created.append(client)
        return client

    yield _make
    for client in created:
        client.close()


class ListHandler(logging.Handler):
    """Capture formatted log messages into a list for assertions."""

    def __init__(self) -> None:
        super().__init__(level=logging.DEBUG)
        self.messages: list[str] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.messages.append(record.getMessage())


@pytest.fixture()
def log_messages() -> Iterator[list[str]]:
    """Collect every message reaching the shared ``llmlab`` logger at DEBUG."""
    base = get_logger(BASE_LOGGER_NAME)
    handler = ListHandler()
    previous = base.level
    base.addHandler(handler)
    base.setLevel(logging.DEBUG)
    try:
        yield handler.messages
    finally:
        base.removeHandler(handler)
        base.setLevel(previous)
