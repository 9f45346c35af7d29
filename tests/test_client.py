"""Tests for the retrying HTTP client."""

import logging

import httpx
import pytest

from azure_moderator.api.client import (
    API_VERSION,
    RETRY_ATTEMPTS,
    is_retryable_status,
    json_body,
)
from azure_moderator.exceptions import InvalidInputError, RemoteAPIError, TransportError

from conftest import API_KEY, ENDPOINT


def _sequence(*responses):
    """Handler replying with *responses* in turn and recording each request."""
    calls = []

    def handler(request):
        calls.append(request)
        return responses[min(len(calls), len(responses)) - 1]

    return handler, calls


def test_retryable_statuses():
    assert all(is_retryable_status(s) for s in (429, 500, 503))
    assert not any(is_retryable_status(s) for s in (400, 401, 403, 404, 502))


def test_builds_versioned_url_and_sends_key(make_http):
    handler, calls = _sequence(httpx.Response(200, json={}))
    http = make_http(handler, endpoint=ENDPOINT + "/")
    http.post("/text:analyze", json={"text": "hi"})

    request = calls[0]
    assert request.url.host == "moderator-test.cognitiveservices.azure.com"
    assert request.url.path == "/contentsafety/text:analyze"
    assert request.url.params["api-version"] == API_VERSION
    assert request.headers["Ocp-Apim-Subscription-Key"] == API_KEY
    assert request.headers["Content-Type"] == "application/json"


def test_get_sends_no_body(make_http):
    handler, calls = _sequence(httpx.Response(200, json={"value": []}))
    make_http(handler).get("/text/blocklists")
    assert calls[0].method == "GET"
    assert calls[0].content == b""


def test_recovers_after_two_transient_failures(make_http, sleeps):
    handler, calls = _sequence(
        httpx.Response(503),
        httpx.Response(503),
        httpx.Response(200, json={"ok": True}),
    )
    response = make_http(handler).post("/text:analyze", json={})
    assert response.status_code == 200
    assert len(calls) == 3
    assert sleeps == [0.1, 0.1]


def test_gives_up_after_three_attempts(make_http, sleeps):
    handler, calls = _sequence(
        httpx.Response(503),
        httpx.Response(503),
        httpx.Response(503),
        httpx.Response(200, json={}),
    )
    with pytest.raises(TransportError) as exc_info:
        make_http(handler).post("/text:analyze", json={})

    assert len(calls) == RETRY_ATTEMPTS
    assert len(sleeps) == RETRY_ATTEMPTS - 1
    assert exc_info.value.status_code == 503


@pytest.mark.parametrize("status", [429, 500])
def test_other_retryable_statuses(make_http, status):
    handler, calls = _sequence(httpx.Response(status), httpx.Response(200, json={}))
    make_http(handler).post("/image:analyze", json={})
    assert len(calls) == 2


def test_retry_delay_comes_from_config(make_http, sleeps):
    handler, _ = _sequence(httpx.Response(429), httpx.Response(200, json={}))
    make_http(handler, retry_delay_ms=250).post("/text:analyze", json={})
    assert sleeps == [0.25]


def test_non_retryable_status_fails_immediately(make_http, sleeps):
    handler, calls = _sequence(
        httpx.Response(400, json={"error": {"code": "InvalidRequestBody", "message": "bad body"}}),
    )
    with pytest.raises(RemoteAPIError) as exc_info:
        make_http(handler).post("/text:analyze", json={})

    assert len(calls) == 1
    assert sleeps == []
    err = exc_info.value
    assert err.status_code == 400
    assert err.endpoint == ENDPOINT
    assert err.message == "Azure API request failed (HTTP 400): [InvalidRequestBody] bad body"


def test_network_error_is_not_retried(make_http):
    calls = []

    def handler(request):
        calls.append(request)
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TransportError) as exc_info:
        make_http(handler).post("/text:analyze", json={})

    assert len(calls) == 1
    assert exc_info.value.status_code is None
    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


def test_failure_log_never_contains_key(make_http, caplog):
    handler, _ = _sequence(httpx.Response(401, json={"error": {"code": "Unauthorized", "message": "no"}}))
    with caplog.at_level(logging.WARNING, logger="azure_moderator"):
        with pytest.raises(RemoteAPIError):
            make_http(handler).post("/text:analyze", json={})

    assert "401" in caplog.text
    assert ENDPOINT in caplog.text
    assert API_KEY not in caplog.text


def test_unsupported_method(make_http):
    handler, calls = _sequence(httpx.Response(200))
    with pytest.raises(InvalidInputError):
        make_http(handler).send("PUT", "/text/blocklists/x")
    assert calls == []


def test_json_body_empty_and_invalid():
    assert json_body(httpx.Response(204)) == {}
    with pytest.raises(RemoteAPIError):
        json_body(httpx.Response(200, content=b"<html>"))
    with pytest.raises(RemoteAPIError):
        json_body(httpx.Response(200, json=[1, 2]))
