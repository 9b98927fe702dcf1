"""Cooperative cancellation primitives (public API facade).

Purpose
-------
Expose cancellation constructs via the canonical ``llmlab.base.cancellation``
import path while the concrete implementation lives under
``cancellation_parts``.

Notes
-----
- ``CancellationToken`` is the flag a :class:`StreamConnection` polls between
  chunks; ``stop_chat_stream`` and ``StreamConnection.close`` set it.
- A caller-supplied token acts as a parent: each stream links a child to it
  and unlinks that child again when the stream closes.
"""

from .cancellation_parts.cancellation_token import CancellationToken

__all__ = ["CancellationToken"]
