"""Unit tests for cooperative cancellation primitives.

Covers idempotent cancel, cascade to children, late link of child after
parent cancel, and unlinking children that are no longer needed.
"""
from __future__ import annotations

from llmlab.base.cancellation import CancellationToken


def test_cancel_cascades_to_children_and_is_idempotent():
    parent = CancellationToken()
    child1 = parent.child()
    child2 = parent.child()

    assert parent.cancel(reason="stop") is True
    assert parent.cancel(reason="ignored") is False

    assert parent.cancelled and parent.reason == "stop"
    assert child1.cancelled and child1.reason == "stop"
    assert child2.cancelled and child2.reason == "stop"


def test_child_cancel_does_not_reach_parent():
    parent = CancellationToken()
    child = parent.child()
    child.cancel("local")
    assert child.cancelled and not parent.cancelled


def test_link_child_after_parent_cancel_immediately_cancels_child():
    parent = CancellationToken()
    parent.cancel("done")
    late_child = CancellationToken(parent=parent)
    assert late_child.cancelled and late_child.reason == "done"


def test_unlinked_child_is_forgotten_and_not_cancelled():
    parent = CancellationToken()
    kept = parent.child()
    dropped = parent.child()

    parent.unlink_child(dropped)
    parent.unlink_child(dropped)
    assert parent._children == [kept]

    parent.cancel("stop")
    assert kept.cancelled
    assert not dropped.cancelled
