"""Unit tests for the incremental ``data:`` frame decoder.

Covers classification of each frame kind, chunk-split invariance (including
splits inside multi-byte characters), end-of-input flushing, and the legacy
substring classification mode.
"""
from __future__ import annotations

import pytest

from llmlab.base.errors import ErrorCode
from llmlab.base.streaming import (
    DataEvent,
    EndMarker,
    ErrorEvent,
    ErrorKind,
    FrameDecoder,
    classify_payload,
    frame_payload,
)

STREAM = (
    'data: {"response":"héllo ✓","systemPrompt":"p"}\n'
    "\n"
    ": keep-alive\n"
    'data: {"statusCode":500,"message":"boom"}\n'
    "data: {not json\n"
    'data: {"response":"again"}\n'
    "data: undefined\n"
).encode("utf-8")


def _decode(chunks, mode: str = "structured"):
    dec = FrameDecoder(mode=mode)
    events = []
    for chunk in chunks:
        events.extend(dec.feed(chunk))
    events.extend(dec.finish())
    return events


def test_frame_payload_ignores_noise_and_strips_cr():
    assert frame_payload("") is None
    assert frame_payload("   ") is None
    assert frame_payload("event: ping") is None
    assert frame_payload("data:{}") is None
    assert frame_payload('data: {"a":1}\r') == '{"a":1}'


def test_data_frame_then_sentinel():
    events = _decode([b'data: {"response":"hi","systemPrompt":"p"}\ndata: undefined\n'])
    assert events == [DataEvent(response="hi", system_prompt="p"), EndMarker(reason="sentinel")]


def test_status_code_frame_is_protocol_error_with_mapped_code():
    (event,) = _decode([b'data: {"statusCode":503,"message":"busy"}\n'])
    assert isinstance(event, ErrorEvent)
    assert event.kind is ErrorKind.PROTOCOL
    assert event.code is ErrorCode.UNAVAILABLE
    assert event.status_code == 503
    assert "busy" in event.message
    assert not event.is_terminal


def test_malformed_json_is_parse_error_and_decoding_continues():
    events = _decode([b"data: {oops\n", b'data: {"response":"ok"}\n'])
    assert isinstance(events[0], ErrorEvent) and events[0].kind is ErrorKind.PARSE
    assert events[0].message.startswith("Error processing data:")
    assert events[0].raw == "{oops"
    assert events[1] == DataEvent(response="ok")


def test_non_object_json_is_parse_error():
    (event,) = _decode([b"data: [1, 2]\n"])
    assert isinstance(event, ErrorEvent) and event.kind is ErrorKind.PARSE


def test_missing_fields_are_none():
    (event,) = _decode([b'data: {"other":1}\n'])
    assert event == DataEvent(response=None, system_prompt=None)


def test_blank_and_unprefixed_lines_produce_nothing():
    assert _decode([b"\n\n: comment\nretry: 10\n"]) == []


def test_residual_line_is_flushed_by_finish():
    dec = FrameDecoder()
    assert dec.feed(b'data: {"response":"tail"}') == []
    assert dec.buffer == 'data: {"response":"tail"}'
    assert dec.finish() == [DataEvent(response="tail")]
    assert not dec.ended


def test_input_after_end_marker_is_ignored():
    dec = FrameDecoder()
    events = dec.feed(b'data: undefined\ndata: {"response":"late"}\n')
    assert events == [EndMarker()]
    assert dec.ended
    assert dec.feed(b'data: {"response":"later"}\n') == []
    assert dec.finish() == []


def test_chunk_split_invariance_including_multibyte():
    expected = _decode([STREAM])
    assert len(expected) == 5
    for i in range(len(STREAM) + 1):
        for j in range(i, len(STREAM) + 1, 7):
            assert _decode([STREAM[:i], STREAM[i:j], STREAM[j:]]) == expected


def test_byte_at_a_time():
    assert _decode([STREAM[i : i + 1] for i in range(len(STREAM))]) == _decode([STREAM])


def test_crlf_line_endings():
    events = _decode([b'data: {"response":"a"}\r\ndata: undefined\r\n'])
    assert events == [DataEvent(response="a"), EndMarker()]


def test_structured_mode_keeps_words_inside_data():
    payload = '{"response":"statusCode is undefined here"}'
    assert classify_payload(payload) == DataEvent(response="statusCode is undefined here")


def test_substring_mode_matches_anywhere():
    assert classify_payload('{"response":"value undefined"}', "substring") == EndMarker()
    event = classify_payload('{"response":"statusCode"}', "substring")
    assert isinstance(event, ErrorEvent) and event.kind is ErrorKind.PROTOCOL
    assert event.code is ErrorCode.PROTOCOL


def test_sentinel_tolerates_surrounding_whitespace():
    assert classify_payload("  undefined ") == EndMarker()


def test_unknown_mode_rejected():
    with pytest.raises(ValueError):
        FrameDecoder(mode="fuzzy")


@pytest.mark.parametrize(
    "payload, expected",
    [
        ('{"response": 5}', DataEvent(response=5)),
        ('{"systemPrompt": ["a"]}', DataEvent(system_prompt=["a"])),
        ('{"response": {"text": "hi"}, "systemPrompt": null}', DataEvent(response={"text": "hi"})),
    ],
)
def test_non_string_fields_are_forwarded_unchanged(payload, expected):
    assert classify_payload(payload) == expected
