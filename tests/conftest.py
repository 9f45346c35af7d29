"""Shared fixtures: a test config and services wired to an httpx mock transport."""

import json
from dataclasses import replace

import httpx
import pytest

from azure_moderator.api.client import RetryingHttpClient
from azure_moderator.config import ModeratorConfig
from azure_moderator.moderation.service import ContentSafetyService

ENDPOINT = "https://moderator-test.cognitiveservices.azure.com"
API_KEY = "test-subscription-key-123"


def analysis(*pairs, **extra):
    """Build a ``text:analyze``-style response body from (category, severity) pairs."""
    body = {"categoriesAnalysis": [{"category": c, "severity": s} for c, s in pairs]}
    body.update(extra)
    return body


def payload(request: httpx.Request) -> dict:
    return json.loads(request.content) if request.content else {}


@pytest.fixture
def config():
    return ModeratorConfig(endpoint=ENDPOINT, api_key=API_KEY)


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def make_http(config, sleeps):
    def _make(handler, **overrides):
        cfg = replace(config, **overrides)
        return RetryingHttpClient(cfg, transport=httpx.MockTransport(handler), sleep=sleeps.append)

    return _make


@pytest.fixture
def make_service(make_http):
    """Build any service class on top of a mocked HTTP client."""

    def _make(handler, cls=ContentSafetyService, **overrides):
        http = make_http(handler, **overrides)
        return cls(http.config, http=http)

    return _make
