"""Tests for protected material detection."""

import httpx
import pytest

from azure_moderator.exceptions import InvalidInputError, RemoteAPIError, TransportError
from azure_moderator.moderation.protected_material import ProtectedMaterialService

from conftest import payload


def _reply(body, status=200, calls=None):
    def handler(request):
        if calls is not None:
            calls.append(request)
        return httpx.Response(status, json=body)

    return handler


def test_detected(make_service):
    calls = []
    body = {"protectedMaterialAnalysis": {"detected": True}}
    service = make_service(_reply(body, calls=calls), cls=ProtectedMaterialService)
    result = service.detect_protected_material("Is this the real life? Is this just fantasy?")

    assert result.detected is True
    assert result.details == {"detected": True}
    assert calls[0].url.path == "/contentsafety/text:detectProtectedMaterial"
    assert payload(calls[0]) == {"text": "Is this the real life? Is this just fantasy?"}


def test_not_detected(make_service):
    body = {"protectedMaterialAnalysis": {"detected": False}}
    result = make_service(_reply(body)).detect_protected_material("original words")
    assert result.detected is False


def test_missing_analysis_means_not_detected(make_service):
    result = make_service(_reply({})).detect_protected_material("text")
    assert result.detected is False


def test_empty_text_raises(make_service):
    calls = []
    service = make_service(_reply({}, calls=calls), cls=ProtectedMaterialService)
    with pytest.raises(InvalidInputError):
        service.detect_protected_material("")
    assert calls == []


def test_api_error_propagates_with_context(make_service):
    body = {"error": {"code": "Unauthorized", "message": "Access denied"}}
    service = make_service(_reply(body, status=401), cls=ProtectedMaterialService)

    with pytest.raises(RemoteAPIError) as exc_info:
        service.detect_protected_material("text")

    err = exc_info.value
    assert err.status_code == 401
    assert err.message.startswith("Failed to detect protected material: ")
    assert "[Unauthorized] Access denied" in err.message


def test_exhausted_retries_propagate(make_service):
    service = make_service(_reply({}, status=429), cls=ProtectedMaterialService)
    with pytest.raises(TransportError):
        service.detect_protected_material("text")


@pytest.mark.parametrize("analysis", [["detected"], "yes", 1])
def test_wrongly_shaped_analysis_raises(make_service, analysis):
    service = make_service(_reply({"protectedMaterialAnalysis": analysis}), cls=ProtectedMaterialService)
    with pytest.raises(RemoteAPIError) as exc_info:
        service.detect_protected_material("text")

    assert exc_info.value.message.startswith("Failed to detect protected material: ")
    assert exc_info.value.status_code == 200
