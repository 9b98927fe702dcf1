"""Callback dispatch tests for ``StreamController`` and ``AgentClient.start_chat_stream``."""
from __future__ import annotations

import threading

import httpx
import pytest

from llmlab.base.streaming import DataEvent, ErrorKind, StreamController


class _Recorder:
    def __init__(self) -> None:
        self.successes: list = []
        self.errors: list = []
        self.completions = 0
        self.done = threading.Event()

    def on_success(self, event) -> None:
        self.successes.append(event)

    def on_error(self, event) -> None:
        self.errors.append(event)
        if event.is_terminal:
            self.done.set()

    def on_complete(self) -> None:
        self.completions += 1
        self.done.set()

    def callbacks(self) -> dict:
        return {"on_success": self.on_success, "on_error": self.on_error, "on_complete": self.on_complete}


def _serve(body):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=body)

    return handler


def _start(client, rec, **kwargs):
    return client.start_chat_stream(
        session_id="s1",
        model="agent",
        messages=[{"role": "user", "content": "hi"}],
        **rec.callbacks(),
        **kwargs,
    )


def test_success_then_completion(make_client, frames):
    rec = _Recorder()
    client = make_client(_serve(frames('{"response":"hi","systemPrompt":"p"}', "undefined")))
    controller = _start(client, rec, background=False)
    assert rec.successes == [DataEvent(response="hi", system_prompt="p")]
    assert rec.completions == 1
    assert rec.errors == []
    assert controller.completed and controller.finished
    assert controller.connection.closed


def test_server_error_frame_calls_on_error_only(make_client, frames):
    rec = _Recorder()
    client = make_client(_serve(frames('{"statusCode":500,"message":"boom"}', "undefined")))
    _start(client, rec, background=False)
    assert rec.successes == []
    assert len(rec.errors) == 1 and rec.errors[0].kind is ErrorKind.PROTOCOL
    assert rec.completions == 1


def test_parse_error_does_not_stop_stream(make_client, frames):
    rec = _Recorder()
    client = make_client(_serve(frames("{bad", '{"response":"next"}', "undefined")))
    _start(client, rec, background=False)
    assert [e.kind for e in rec.errors] == [ErrorKind.PARSE]
    assert rec.successes == [DataEvent(response="next")]
    assert rec.completions == 1


def test_trailing_line_dispatched_before_completion(make_client):
    order = []
    client = make_client(_serve(b'data: {"response":"a"}\ndata: {"response":"b"}'))
    client.start_chat_stream(
        model="agent",
        messages=[{"role": "user", "content": "hi"}],
        on_success=lambda e: order.append(e.response),
        on_complete=lambda: order.append("complete"),
        background=False,
    )
    assert order == ["a", "b", "complete"]


def test_setup_failure_reports_one_error_and_no_completion(make_client):
    rec = _Recorder()

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(401, json={"statusCode": 401, "message": "bad key"})

    controller = _start(make_client(handler), rec, background=False)
    assert len(rec.errors) == 1 and rec.errors[0].kind is ErrorKind.SETUP
    assert rec.completions == 0
    assert controller.error is rec.errors[0]
    assert not controller.completed


def test_stop_inside_callback_prevents_further_callbacks(make_client, frames):
    rec = _Recorder()
    holder = {}

    def on_success(event):
        rec.on_success(event)
        holder["controller"].stop()

    client = make_client(_serve(frames('{"response":"1"}', '{"response":"2"}', "undefined")))
    connection = client.open_chat_stream(model="agent", messages=[{"role": "user", "content": "hi"}])
    controller = StreamController(connection, on_success=on_success, on_complete=rec.on_complete)
    holder["controller"] = controller
    controller.run()
    assert [e.response for e in rec.successes] == ["1"]
    assert rec.completions == 0
    controller.stop()


def test_background_stream_completes(make_client, frames):
    rec = _Recorder()
    client = make_client(_serve(frames('{"response":"x"}', "undefined")))
    controller = _start(client, rec)
    assert controller.join(timeout=5)
    assert rec.completions == 1
    assert [e.response for e in rec.successes] == ["x"]


def test_stop_chat_stream_stops_all_active(make_client):
    rec = _Recorder()
    first_seen = threading.Event()
    gate = threading.Event()

    def body():
        yield b'data: {"response":"1"}\n'
        gate.wait(5)
        yield b'data: {"response":"2"}\ndata: undefined\n'

    def on_success(event):
        rec.on_success(event)
        first_seen.set()

    client = make_client(_serve(body()))
    controller = client.start_chat_stream(
        model="agent",
        messages=[{"role": "user", "content": "hi"}],
        on_success=on_success,
        on_error=rec.on_error,
        on_complete=rec.on_complete,
    )
    assert first_seen.wait(5)
    assert controller in client.active_streams()
    client.stop_chat_stream()
    client.stop_chat_stream()
    gate.set()
    assert controller.join(timeout=5)
    assert [e.response for e in rec.successes] == ["1"]
    assert rec.completions == 0
    assert rec.errors == []
    assert client.active_streams() == []


def test_callback_exception_closes_stream_and_propagates(make_client, frames):
    client = make_client(_serve(frames('{"response":"x"}', "undefined")))

    def boom(event):
        raise RuntimeError("callback failed")

    with pytest.raises(RuntimeError):
        client.start_chat_stream(
            model="agent",
            messages=[{"role": "user", "content": "hi"}],
            on_success=boom,
            background=False,
        )


def test_background_callback_exception_is_logged(make_client, frames, log_messages):
    client = make_client(_serve(frames('{"response":"x"}', "undefined")))

    def boom(event):
        raise RuntimeError("callback failed")

    controller = client.start_chat_stream(
        model="agent", messages=[{"role": "user", "content": "hi"}], on_success=boom
    )
    assert controller.join(timeout=5)
    assert isinstance(controller.callback_exception, RuntimeError)
    assert controller.connection.closed
    assert any("stream.callback_error" in m for m in log_messages)
