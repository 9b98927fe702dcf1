"""``AgentClient`` tests for construction and the non-streaming chat path.

HTTP is served by ``httpx.MockTransport``; no network is used.
"""
from __future__ import annotations

import json

import httpx
import pytest

from llmlab import AgentClient, AgentError, ErrorCode, Message
from llmlab.config import ClientConfig


def _ok(content: str = "ok"):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"choices": [{"message": {"content": content}}]})

    return handler


def test_missing_api_key_raises_auth():
    with pytest.raises(AgentError) as info:
        AgentClient()
    assert info.value.code is ErrorCode.AUTH
    assert info.value.message == "missing_api_key"


def test_api_key_from_environment(monkeypatch, make_client):
    monkeypatch.setenv("LLMLAB_API_KEY", "env-key")
    client = AgentClient(transport=httpx.MockTransport(_ok()))
    try:
        assert client.config.api_key == "env-key"
    finally:
        client.close()


def test_api_key_is_not_in_repr(make_client):
    client = make_client(_ok(), api_key="super-secret")
    assert "super-secret" not in repr(client.config)


def test_success_returns_first_choice_content(make_client):
    client = make_client(_ok("ok"))
    result = client.chat_with_agent(model="agent", messages=[Message(role="user", content="hi")])
    assert result.success is True
    assert result.content == "ok"
    assert result.to_dict() == {"success": True, "content": "ok"}


def test_request_shape_omits_absent_optionals(make_client):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["url"] = str(request.url)
        seen["headers"] = request.headers
        seen["body"] = json.loads(request.content)
        return _ok()(request)

    client = make_client(handler)
    client.chat_with_agent(model="agent", messages=[{"role": "user", "content": "hi", "name": "ignored"}])
    assert seen["method"] == "POST"
    assert seen["url"] == "https://launch-api.com/v1/chat/completions"
    assert seen["headers"]["apikey"] == "test-key"
    assert seen["headers"]["content-type"] == "application/json"
    assert seen["body"] == {
        "model": "agent",
        "stream": False,
        "messages": [{"role": "user", "content": "hi"}],
    }


def test_request_shape_includes_supplied_optionals(make_client):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["body"] = json.loads(request.content)
        return _ok()(request)

    client = make_client(handler)
    client.chat_with_agent(
        model="agent",
        messages=[{"role": "system", "content": "be brief"}, {"role": "user", "content": "hi"}],
        session_id="s1",
        max_tokens=64,
        temperature=0.2,
    )
    body = seen["body"]
    assert body["sessionId"] == "s1"
    assert body["maxTokens"] == 64
    assert body["temperature"] == 0.2
    assert [m["role"] for m in body["messages"]] == ["system", "user"]


def test_base_url_override(make_client):
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        return _ok()(request)

    client = make_client(handler, base_url="http://localhost:8080/")
    client.chat_with_agent(model="agent", messages=[{"role": "user", "content": "hi"}])
    assert seen["url"] == "http://localhost:8080/v1/chat/completions"


def test_http_failure_is_returned_not_raised(make_client):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"statusCode": 500, "message": "boom"})

    result = make_client(handler).chat_with_agent(model="agent", messages=[{"role": "user", "content": "hi"}])
    assert result.success is False
    assert result.content is None
    assert result.error.code is ErrorCode.SERVER_ERROR
    assert result.error.status_code == 500
    assert result.error.message == "HTTP error status=500 message=boom"


def test_rate_limit_is_marked_retryable(make_client):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(429, text="slow down")

    result = make_client(handler).chat_with_agent(model="agent", messages=[{"role": "user", "content": "hi"}])
    assert result.error.code is ErrorCode.RATE_LIMIT
    assert result.error.retryable is True
    assert "slow down" in result.error.message


def test_any_2xx_counts_as_success(make_client):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(201, json={"choices": [{"message": {"content": "created"}}]})

    result = make_client(handler).chat_with_agent(model="agent", messages=[{"role": "user", "content": "hi"}])
    assert result.success and result.content == "created"


@pytest.mark.parametrize(
    "body",
    [b"not json", b"{}", b'{"choices": []}', b'{"choices": [{"nope": 1}]}'],
)
def test_malformed_success_body_is_parse_failure(make_client, body):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=body)

    result = make_client(handler).chat_with_agent(model="agent", messages=[{"role": "user", "content": "hi"}])
    assert result.success is False
    assert result.error.code is ErrorCode.PARSE


def test_transport_failure_is_returned(make_client):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("refused", request=request)

    result = make_client(handler).chat_with_agent(model="agent", messages=[{"role": "user", "content": "hi"}])
    assert result.success is False
    assert result.error.code is ErrorCode.TRANSIENT
    assert result.error.retryable is True


def test_timeout_is_classified(make_client):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("too slow", request=request)

    result = make_client(handler).chat_with_agent(model="agent", messages=[{"role": "user", "content": "hi"}])
    assert result.error.code is ErrorCode.TIMEOUT


@pytest.mark.parametrize(
    "kwargs",
    [
        {"model": "", "messages": [{"role": "user", "content": "hi"}]},
        {"model": "agent", "messages": []},
        {"model": "agent", "messages": [{"role": "robot", "content": "hi"}]},
        {"model": "agent", "messages": [{"role": "user", "content": 42}]},
        {"model": "agent", "messages": [{"role": "user", "content": "hi"}], "max_tokens": 0},
        {"model": "agent", "messages": None},
    ],
)
def test_invalid_input_fails_without_request(make_client, kwargs):
    calls = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return _ok()(request)

    result = make_client(handler).chat_with_agent(**kwargs)
    assert result.success is False
    assert result.error.code is ErrorCode.VALIDATION
    assert calls == []


def test_chat_logs_start_and_end(make_client, log_messages):
    make_client(_ok()).chat_with_agent(model="agent", messages=[{"role": "user", "content": "hi"}], session_id="s9")
    payloads = [json.loads(m) for m in log_messages if m.startswith("{")]
    names = [p["event"] for p in payloads]
    assert "chat.start" in names and "chat.end" in names
    end = next(p for p in payloads if p["event"] == "chat.end")
    assert end["model"] == "agent" and end["session_id"] == "s9"
    assert all("test-key" not in m for m in log_messages)


def test_injected_http_client_is_not_closed():
    http = httpx.Client(transport=httpx.MockTransport(_ok()))
    config = ClientConfig(api_key="k")
    with AgentClient(config=config, http_client=http) as client:
        assert client.chat_with_agent(model="a", messages=[{"role": "user", "content": "x"}]).success
    assert not http.is_closed
    http.close()


def test_close_releases_owned_client(make_client):
    client = make_client(_ok())
    client.close()
    client.close()
    assert client._http.is_closed
