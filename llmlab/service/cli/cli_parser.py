"""CLI parser construction for llmlab-cli.

This module wires subparsers but contains no execution logic. Subcommand
handlers live in ``cli_actions`` to keep files small and testable.
"""

from __future__ import annotations

import argparse

from ...config.defaults import CLI_DEFAULT_LOG_LEVEL


def _str2bool(v: str | None) -> bool:
    """Best-effort conversion of common truthy/falsey strings to bool.

    Parameters
    ----------
    v: str | None
        Incoming string value (e.g., "true", "off"). ``None`` (a bare
        ``--stream``) means ``True``.

    Returns
    -------
    bool
        Parsed value; unknown strings raise ``argparse.ArgumentTypeError``.
    """
    if v is None:
        return True
    val = v.strip().lower()
    if val in {"1", "t", "true", "y", "yes", "on"}:
        return True
    if val in {"0", "f", "false", "n", "no", "off"}:
        return False
    raise argparse.ArgumentTypeError(f"expected a boolean, got {v!r}")


def _positive_int(v: str) -> int:
    try:
        n = int(v)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected an integer, got {v!r}") from None
    if n <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {n}")
    return n


def add_stream_flags(parser: argparse.ArgumentParser) -> None:
    """Attach ``--stream``/``--no-stream`` flags to a parser.

    ``--stream`` accepts an optional boolean (``--stream``, ``--stream false``);
    ``--no-stream`` is the explicit negation. Streaming is off by default.
    """
    grp = parser.add_mutually_exclusive_group()
    grp.add_argument("--stream", nargs="?", const=True, type=_str2bool, default=False)
    grp.add_argument("--no-stream", dest="stream", action="store_false")


def build_parser() -> argparse.ArgumentParser:
    """Construct the top-level CLI parser and its ``chat`` subcommand.

    No I/O or network calls occur here.
    """
    p = argparse.ArgumentParser(prog="llmlab-cli", description="Chat with an LLMLab agent")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_chat = sub.add_parser("chat", help="Send one prompt to an agent")
    p_chat.add_argument("--model", required=True, help="Agent identifier")
    p_chat.add_argument("--prompt", required=True, help="User message text")
    p_chat.add_argument("--system", default=None, help="Optional system message")
    p_chat.add_argument("--session-id", dest="session_id", default=None)
    p_chat.add_argument("--max-tokens", dest="max_tokens", type=_positive_int, default=None)
    p_chat.add_argument("--temperature", type=float, default=None)
    add_stream_flags(p_chat)
    p_chat.add_argument("--json", action="store_true", help="Print machine-readable JSON")
    p_chat.add_argument("--api-key", dest="api_key", default=None, help="Overrides LLMLAB_API_KEY")
    p_chat.add_argument("--base-url", dest="base_url", default=None, help="Overrides LLMLAB_BASE_URL")
    p_chat.add_argument("--log-level", dest="log_level", default=CLI_DEFAULT_LOG_LEVEL)

    return p


__all__ = ["build_parser", "add_stream_flags"]
