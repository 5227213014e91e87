"""
Tests for the DeepSeek client against a scripted upstream.
"""
import asyncio

import httpx
import pytest

from deepseek_relay.exceptions import UpstreamTransportError
from deepseek_relay.services.deepseek import DeepSeekClient
from deepseek_relay.services.deepseek import client as client_module
from tests.fakes import UPSTREAM_URL, FakeUpstream, make_settings, sse_line


def run(upstream: FakeUpstream, call, **settings):
    async def _run():
        async with httpx.AsyncClient(transport=upstream.transport()) as http:
            return await call(DeepSeekClient(http, make_settings(**settings)))

    return asyncio.run(_run())


@pytest.fixture
def sleeps(monkeypatch):
    """Record settle delays without waiting for them."""
    delays = []
    real_sleep = asyncio.sleep

    async def recording_sleep(delay, *args, **kwargs):
        delays.append(delay)
        await real_sleep(0)

    monkeypatch.setattr(client_module.asyncio, "sleep", recording_sleep)
    return delays


def test_clear_context_sends_payload_and_waits(sleeps):
    upstream = FakeUpstream()

    ack = run(
        upstream,
        lambda c: c.clear_context("deepseek_chat"),
        context_settle_seconds=2.0,
    )

    assert ack == {"code": 0, "msg": "", "data": {}}
    request = upstream.requests[0]
    assert str(request.url) == f"{UPSTREAM_URL}/clear_context"
    assert request.method == "POST"
    assert request.headers["authorization"] == "Bearer test-token"
    assert request.headers["content-type"] == "application/json"
    assert upstream.payload("clear_context") == {
        "model_class": "deepseek_chat",
        "append_welcome_message": False,
    }
    assert 2.0 in sleeps


def test_clear_context_defaults_model_class(sleeps):
    upstream = FakeUpstream()

    run(upstream, lambda c: c.clear_context())

    assert upstream.payload("clear_context")["model_class"] == "deepseek_code"


def test_clear_context_non_2xx_raises_without_waiting(sleeps):
    upstream = FakeUpstream(clear_status=503)

    with pytest.raises(UpstreamTransportError) as excinfo:
        run(upstream, lambda c: c.clear_context(), context_settle_seconds=2.0)

    assert excinfo.value.upstream_status == 503
    assert "503" in excinfo.value.message
    assert 2.0 not in sleeps


def test_clear_context_network_failure_raises():
    upstream = FakeUpstream(connect_error=httpx.ConnectError("connection refused"))

    with pytest.raises(UpstreamTransportError) as excinfo:
        run(upstream, lambda c: c.clear_context())

    assert "connection refused" in excinfo.value.message


def test_send_message_accumulates_stream():
    upstream = FakeUpstream(chunks=[sse_line("Hel"), sse_line("lo")])

    assert run(upstream, lambda c: c.send_message("hi")) == "Hello"


def test_send_message_payload():
    upstream = FakeUpstream()

    run(upstream, lambda c: c.send_message("What is 2+2?", "deepseek_chat"))

    request = upstream.requests[0]
    assert str(request.url) == f"{UPSTREAM_URL}/completions"
    assert request.headers["authorization"] == "Bearer test-token"
    assert upstream.payload("completions") == {
        "message": "What is 2+2?",
        "stream": True,
        "model_preference": None,
        "model_class": "deepseek_chat",
        "temperature": 1.0,
    }


def test_send_message_reassembles_lines_split_across_chunks():
    stream = sse_line("Hel") + sse_line("lo")
    upstream = FakeUpstream(chunks=[stream[:20], stream[20:45], stream[45:]])

    assert run(upstream, lambda c: c.send_message("hi")) == "Hello"


def test_send_message_handles_multibyte_text_split_across_chunks():
    stream = sse_line("héllo wörld").replace("\\u00e9", "é").replace("\\u00f6", "ö")
    raw = stream.encode("utf-8")
    cut = raw.index("é".encode("utf-8")) + 1

    async def body():
        yield raw[:cut]
        yield raw[cut:]

    async def handler(request):
        return httpx.Response(200, content=body())

    async def _run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            return await DeepSeekClient(http, make_settings()).send_message("hi")

    assert asyncio.run(_run()) == "héllo wörld"


def test_send_message_non_2xx_raises():
    upstream = FakeUpstream(completion_status=401)

    with pytest.raises(UpstreamTransportError) as excinfo:
        run(upstream, lambda c: c.send_message("hi"))

    assert excinfo.value.upstream_status == 401


def test_send_message_stream_error_discards_partial_text():
    upstream = FakeUpstream(
        chunks=[sse_line("partial")],
        stream_error=httpx.ReadError("connection reset"),
    )

    with pytest.raises(UpstreamTransportError) as excinfo:
        run(upstream, lambda c: c.send_message("hi"))

    assert "connection reset" in excinfo.value.message
