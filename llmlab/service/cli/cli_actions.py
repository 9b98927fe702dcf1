"""CLI action handlers.

Purpose
-------
Run the ``chat`` subcommand against an :class:`AgentClient`, keeping the
entrypoint module minimal. No top-level side effects; safe to import in tests.

Output Contract
---------------
- Non-streaming: the completion text on stdout, or with ``--json`` the
  ``ChatResult.to_dict()`` object.
- Streaming: each ``response`` delta on stdout as it arrives (with ``--json``
  one JSON object per event), error events on stderr.
- Exit codes: 0 success, 1 failure (setup, transport, server or parse error).
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any, Callable, List, Optional, TextIO

from ...agent import AgentClient
from ...base.errors import AgentError
from ...base.logging import configure_logger
from ...base.models import Message
from ...base.streaming import DataEvent, ErrorEvent

ClientFactory = Callable[..., AgentClient]


def build_messages(args: argparse.Namespace) -> List[Message]:
    """Return the message list for a ``chat`` invocation."""
    messages: List[Message] = []
    if args.system:
        messages.append(Message(role="system", content=args.system))
    messages.append(Message(role="user", content=args.prompt))
    return messages


def _emit_json(obj: Any, out: TextIO) -> None:
    out.write(json.dumps(obj, ensure_ascii=False) + "\n")
    out.flush()


def _run_chat(client: AgentClient, args: argparse.Namespace, out: TextIO, err: TextIO) -> int:
    result = client.chat_with_agent(
        model=args.model,
        messages=build_messages(args),
        session_id=args.session_id,
        max_tokens=args.max_tokens,
        temperature=args.temperature,
    )
    if args.json:
        _emit_json(result.to_dict(), out)
    elif result.success:
        out.write(f"{result.content or ''}\n")
    else:
        err.write(f"error: {result.error.message if result.error else 'unknown'}\n")
    return 0 if result.success else 1


def _run_stream(client: AgentClient, args: argparse.Namespace, out: TextIO, err: TextIO) -> int:
    errors: List[ErrorEvent] = []

    def on_success(event: DataEvent) -> None:
        if args.json:
            _emit_json(event.to_dict(), out)
        elif event.response:
            out.write(event.response)
            out.flush()

    def on_error(event: ErrorEvent) -> None:
        errors.append(event)
        if args.json:
            _emit_json(event.to_dict(), out)
        else:
            err.write(f"error[{event.kind.value}]: {event.message}\n")

    def on_complete() -> None:
        if args.json:
            _emit_json({"type": "end"}, out)
        else:
            out.write("\n")

    controller = client.start_chat_stream(
        session_id=args.session_id,
        model=args.model,
        messages=build_messages(args),
        on_success=on_success,
        on_error=on_error,
        on_complete=on_complete,
        max_tokens=args.max_tokens,
        temperature=args.temperature,
        background=False,
    )
    return 0 if controller.completed and not errors else 1


def handle_chat(
    args: argparse.Namespace,
    *,
    client_factory: Optional[ClientFactory] = None,
    out: Optional[TextIO] = None,
    err: Optional[TextIO] = None,
) -> int:
    """Execute the ``chat`` subcommand.

    Parameters
    ----------
    args: argparse.Namespace
        Parsed ``chat`` arguments.
    client_factory: Optional[ClientFactory]
        Builds the client from ``api_key``/``base_url`` keywords; tests inject
        one bound to an ``httpx.MockTransport``.
    out, err: Optional[TextIO]
        Output streams (default ``sys.stdout``/``sys.stderr``).

    Returns
    -------
    int
        0 on success, 1 on any failure.
    """
    out = out or sys.stdout
    err = err or sys.stderr
    configure_logger(level=args.log_level)
    factory = client_factory or AgentClient
    try:
        client = factory(api_key=args.api_key, base_url=args.base_url)
    except AgentError as e:
        if args.json:
            _emit_json({"success": False, "error": e.to_dict()}, out)
        else:
            err.write(f"error: {e.message}\n")
        return 1
    with client:
        if args.stream:
            return _run_stream(client, args, out, err)
        return _run_chat(client, args, out, err)


__all__ = ["build_messages", "handle_chat"]
