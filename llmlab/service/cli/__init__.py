"""llmlab command-line interface (package entrypoint).

Wires argument parsing to the action handlers in ``cli_actions``; it performs
no client logic directly.

Public API re-exports:
- ``main``: CLI entrypoint callable (``llmlab-cli``)
"""

from __future__ import annotations

import sys
from typing import Optional

from .cli_actions import handle_chat
from .cli_parser import build_parser


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entrypoint.

    Parameters
    ----------
    argv: Optional[list[str]]
        Argument vector; when ``None`` uses ``sys.argv[1:]``.

    Returns
    -------
    int
        Process exit code: 0 success, 1 failure, 2 usage error.
    """
    p = build_parser()
    argv_list = list(sys.argv[1:] if argv is None else argv)
    try:
        args = p.parse_args(argv_list)
    except SystemExit as e:
        return e.code if isinstance(e.code, int) else 2
    return handle_chat(args)


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
