"""Streaming package for the agent client.

Exposes the frame decoder, event types, per-call connection and the callback
dispatcher under a single namespace.
"""

from .events import DataEvent, DecodedEvent, EndMarker, ErrorEvent, ErrorKind
from .decoder import FrameDecoder, classify_payload, frame_payload
from .connection import StreamConnection
from .stream_controller import StreamController

__all__ = [
    "DataEvent",
    "DecodedEvent",
    "EndMarker",
    "ErrorEvent",
    "ErrorKind",
    "FrameDecoder",
    "classify_payload",
    "frame_payload",
    "StreamConnection",
    "StreamController",
]
