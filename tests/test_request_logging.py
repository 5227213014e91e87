"""
Tests for the relay request log lines.
"""
import json
import logging

import pytest

from deepseek_relay.middleware.request_logging import summarize_chat_body
from tests.fakes import CHAT_URL, FakeUpstream

LOGGER = "deepseek_relay.middleware.request_logging"


def test_summary_keeps_model_and_message_size():
    body = {"model": "deepseek_chat", "request": {"message": "Hi there"}}

    assert summarize_chat_body(body) == {
        "model": "deepseek_chat",
        "message_chars": 8,
        "message_preview": "Hi there",
    }


def test_summary_preview_is_truncated():
    summary = summarize_chat_body({"request": {"message": "x" * 500}})

    assert summary["message_chars"] == 500
    assert len(summary["message_preview"]) == 80


def test_summary_hides_message_in_production():
    summary = summarize_chat_body(
        {"model": None, "request": {"message": "secret"}}, is_production=True
    )

    assert summary == {"model": None, "message_chars": 6}


@pytest.mark.parametrize("body", [None, [], "text", 3])
def test_summary_ignores_non_object_bodies(body):
    assert summarize_chat_body(body) is None


@pytest.mark.parametrize("body", [{}, {"request": "Hi"}, {"request": {"message": 5}}])
def test_summary_without_usable_message(body):
    assert summarize_chat_body(body)["message_chars"] is None


def _log_lines(caplog):
    return [
        json.loads(r.getMessage()) for r in caplog.records if r.name == LOGGER
    ]


def test_request_and_response_are_logged(make_client, upstream, caplog):
    client = make_client(upstream)

    with caplog.at_level(logging.INFO, logger=LOGGER):
        client.post(CHAT_URL, json={"model": "deepseek_chat", "request": {"message": "Hi"}})

    request_log, response_log = _log_lines(caplog)
    assert request_log["type"] == "request"
    assert request_log["chat"] == {
        "model": "deepseek_chat",
        "message_chars": 2,
        "message_preview": "Hi",
    }
    assert response_log["type"] == "response"
    assert response_log["status_code"] == 200


def test_production_logs_never_contain_message(make_client, upstream, caplog):
    client = make_client(upstream, environment="production")

    with caplog.at_level(logging.INFO, logger=LOGGER):
        client.post(CHAT_URL, json={"request": {"message": "my private question"}})

    lines = _log_lines(caplog)
    assert all("my private question" not in json.dumps(line) for line in lines)
    request_log = lines[0]
    assert request_log["chat"]["message_chars"] == len("my private question")


def test_failed_relay_is_logged_as_error(make_client, caplog):
    client = make_client(FakeUpstream(clear_status=503))

    with caplog.at_level(logging.INFO, logger=LOGGER):
        client.post(CHAT_URL, json={"request": {"message": "Hi"}})

    response_record = [r for r in caplog.records if r.name == LOGGER][-1]
    assert response_record.levelno == logging.ERROR
    assert json.loads(response_record.getMessage())["status_code"] == 500
