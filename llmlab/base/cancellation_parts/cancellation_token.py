"""Stop flag shared between a stream's reader and whoever wants it to stop.

``StreamConnection`` checks the flag between chunks and before handing each
decoded event to the consumer. ``close()``, ``stop_chat_stream()`` or a parent
token set it from any thread.
"""

from __future__ import annotations

import threading
from contextlib import suppress
from typing import List, Optional


class CancellationToken:
    """One-shot, thread-safe stop flag with parent-to-child propagation.

    Cancelling a token cancels every child created from it (including children
    linked after the fact); cancelling a child leaves the parent untouched, so
    one stream closing never stops its siblings.
    """

    def __init__(self, *, parent: Optional["CancellationToken"] = None) -> None:
        self._event = threading.Event()
        self._reason: Optional[str] = None
        self._lock = threading.Lock()
        self._children: List[CancellationToken] = []
        if parent is not None:
            parent.link_child(self)

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> Optional[str]:
        """Reason given by the call that cancelled the token."""
        return self._reason

    def cancel(self, reason: Optional[str] = None) -> bool:
        """Set the flag and cascade to children.

        Returns ``True`` only for the call that flipped the token; later calls
        keep the first reason.
        """
        with self._lock:
            if self._event.is_set():
                return False
            self._reason = reason
            self._event.set()
            children = list(self._children)
        for child in children:
            child.cancel(reason)
        return True

    def link_child(self, token: "CancellationToken") -> "CancellationToken":
        with self._lock:
            self._children.append(token)
            cancelled, reason = self._event.is_set(), self._reason
        if cancelled:
            token.cancel(reason)
        return token

    def unlink_child(self, token: "CancellationToken") -> None:
        """Forget a child that no longer needs this token's cancellation."""
        with self._lock:
            with suppress(ValueError):
                self._children.remove(token)

    def child(self) -> "CancellationToken":
        """New token that is cancelled whenever this one is."""
        return CancellationToken(parent=self)

    def __repr__(self) -> str:  # pragma: no cover - introspection aid
        return f"CancellationToken(cancelled={self.cancelled}, reason={self._reason!r})"


__all__ = ["CancellationToken"]
