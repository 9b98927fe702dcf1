"""Incremental decoder for the agent's ``data: <payload>`` frame protocol.

Purpose:
    Turn an arbitrarily chunked byte stream into an ordered list of
    :class:`DecodedEvent` values. The decoder performs no I/O: the stream
    connection feeds it bytes and forwards what comes out, which keeps every
    framing rule testable without a server.

Framing:
    - Bytes go through one persistent incremental UTF-8 decoder, so a
      multi-byte character split across chunks is reassembled.
    - Text is split on ``\\n``; the trailing partial line is buffered until the
      next chunk (or until :meth:`FrameDecoder.finish`).
    - Lines that are blank or lack the ``data: `` prefix are keep-alive noise.

Classification (``structured`` mode, the default):
    1. the whole trimmed payload equals ``undefined``: end marker;
    2. otherwise the payload must be a JSON object;
    3. an object carrying ``statusCode``: protocol error;
    4. any other object: data event with ``response`` / ``systemPrompt``.
    Anything unparseable is a parse error and decoding continues.

    ``substring`` mode reproduces the legacy server contract literally: a
    payload that merely *contains* ``statusCode`` is an error and one that
    contains ``undefined`` is the end marker. Both modes agree on every frame
    the server documents; they differ only for data whose text happens to
    include those words.

Termination:
    After an end marker the decoder is ``ended`` and ignores further input.
"""

from __future__ import annotations

import codecs
import json
from typing import Iterable, List, Optional

from ..constants import (
    CLASSIFICATION_MODES,
    CLASSIFY_STRUCTURED,
    CLASSIFY_SUBSTRING,
    END_SENTINEL,
    FRAME_PREFIX,
    STATUS_CODE_KEY,
)
from ..dto.completion import ServerErrorDTO, StreamFrameDTO
from ..errors import ErrorCode, code_for_status
from .events import DataEvent, DecodedEvent, EndMarker, ErrorEvent, ErrorKind


def frame_payload(line: str) -> Optional[str]:
    """Return the payload of a ``data: `` frame line, or ``None`` for noise."""
    line = line.rstrip("\r")
    if not line.strip() or not line.startswith(FRAME_PREFIX):
        return None
    return line[len(FRAME_PREFIX):]


def _parse_error(payload: str, reason: str) -> ErrorEvent:
    return ErrorEvent(
        kind=ErrorKind.PARSE,
        message=f"Error processing data: {reason}",
        raw=payload,
        code=ErrorCode.PARSE,
    )


def _protocol_error(payload: str, obj: object) -> ErrorEvent:
    status: Optional[int] = None
    detail: object = None
    if isinstance(obj, dict):
        err = ServerErrorDTO.model_validate(obj)
        status = err.status
        detail = err.message
    message = f"server reported statusCode={status if status is not None else '?'}"
    if detail:
        message += f": {detail}"
    return ErrorEvent(
        kind=ErrorKind.PROTOCOL,
        message=message,
        raw=payload,
        code=code_for_status(status) if status is not None else ErrorCode.PROTOCOL,
        status_code=status,
    )


def _object_event(payload: str, obj: object) -> DecodedEvent:
    """Classify an already-parsed payload that is not the end sentinel."""
    if not isinstance(obj, dict):
        return _parse_error(payload, f"expected a JSON object, got {type(obj).__name__}")
    if STATUS_CODE_KEY in obj:
        return _protocol_error(payload, obj)
    frame = StreamFrameDTO.model_validate(obj)
    return DataEvent(response=frame.response, system_prompt=frame.system_prompt)


def classify_payload(payload: str, mode: str = CLASSIFY_STRUCTURED) -> DecodedEvent:
    """Classify one frame payload into a :class:`DecodedEvent`.

    Parameters:
        payload: Frame text after the ``data: `` prefix.
        mode: ``"structured"`` (default) or ``"substring"``.
    """
    if mode == CLASSIFY_SUBSTRING:
        if STATUS_CODE_KEY in payload:
            try:
                obj: object = json.loads(payload)
            except json.JSONDecodeError:
                obj = None
            return _protocol_error(payload, obj)
        if END_SENTINEL in payload:
            return EndMarker(reason="sentinel")
    elif payload.strip() == END_SENTINEL:
        return EndMarker(reason="sentinel")

    try:
        obj = json.loads(payload)
    except json.JSONDecodeError as e:
        return _parse_error(payload, str(e))
    return _object_event(payload, obj)


class FrameDecoder:
    """Stateful chunk-to-event decoder owned by a single stream connection.

    Not thread-safe and not shareable: every stream gets its own instance so
    concurrent streams never see each other's partial lines.
    """

    def __init__(self, *, encoding: str = "utf-8", mode: str = CLASSIFY_STRUCTURED) -> None:
        if mode not in CLASSIFICATION_MODES:
            raise ValueError(f"unknown frame classification mode: {mode!r}")
        self._decoder = codecs.getincrementaldecoder(encoding)(errors="replace")
        self._mode = mode
        self._buffer = ""
        self._ended = False

    @property
    def buffer(self) -> str:
        """Text received after the last newline (a partial line)."""
        return self._buffer

    @property
    def ended(self) -> bool:
        """Whether an end marker has been produced."""
        return self._ended

    def feed(self, chunk: bytes) -> List[DecodedEvent]:
        """Consume one chunk and return the events of every completed line."""
        if self._ended:
            return []
        self._buffer += self._decoder.decode(chunk)
        *lines, self._buffer = self._buffer.split("\n")
        return self._decode_lines(lines)

    def finish(self) -> List[DecodedEvent]:
        """Flush at end of input, treating a residual partial line as complete.

        No end marker is synthesized here; the connection decides how the
        stream ends.
        """
        if self._ended:
            return []
        self._buffer += self._decoder.decode(b"", final=True)
        residual, self._buffer = self._buffer, ""
        if not residual.strip():
            return []
        return self._decode_lines([residual])

    def _decode_lines(self, lines: Iterable[str]) -> List[DecodedEvent]:
        events: List[DecodedEvent] = []
        for line in lines:
            payload = frame_payload(line)
            if payload is None:
                continue
            event = classify_payload(payload, self._mode)
            events.append(event)
            if isinstance(event, EndMarker):
                self._ended = True
                self._buffer = ""
                break
        return events


__all__ = [
    "FrameDecoder",
    "classify_payload",
    "frame_payload",
]
