"""Tests for blocklist management."""

import httpx
import pytest

from azure_moderator.blocklists.models import Blocklist, BlocklistItem
from azure_moderator.blocklists.service import BlocklistService
from azure_moderator.exceptions import InvalidInputError, RemoteAPIError

from conftest import payload


@pytest.fixture
def api(make_service):
    """A BlocklistService whose fake backend records every request."""
    calls = []
    routes = {}

    def handler(request):
        calls.append(request)
        key = (request.method, request.url.path)
        status, body = routes.get(key, (404, {"error": {"code": "NotFound", "message": "no route"}}))
        if body is None:
            return httpx.Response(status)
        return httpx.Response(status, json=body)

    service = make_service(handler, cls=BlocklistService)
    return service, routes, calls


BASE = "/contentsafety/text/blocklists"


def test_create_blocklist(api):
    service, routes, calls = api
    routes[("PATCH", f"{BASE}/banned")] = (201, {"blocklistName": "banned", "description": "Bad words"})

    created = service.create_blocklist("banned", "Bad words")

    assert created == Blocklist(name="banned", description="Bad words")
    assert payload(calls[0]) == {"description": "Bad words"}


def test_get_and_list_blocklists(api):
    service, routes, _ = api
    routes[("GET", f"{BASE}/banned")] = (200, {"blocklistName": "banned"})
    routes[("GET", BASE)] = (200, {"value": [
        {"blocklistName": "banned", "description": "Bad words"},
        {"blocklistName": "spam"},
    ]})

    assert service.get_blocklist("banned") == Blocklist(name="banned")
    assert [b.name for b in service.list_blocklists()] == ["banned", "spam"]


def test_delete_blocklist(api):
    service, routes, calls = api
    routes[("DELETE", f"{BASE}/banned")] = (204, None)

    assert service.delete_blocklist("banned") is True
    assert calls[0].method == "DELETE"


def test_add_items(api):
    service, routes, calls = api
    routes[("POST", f"{BASE}/banned:addOrUpdateBlocklistItems")] = (200, {"blocklistItems": [
        {"blocklistItemId": "id-1", "text": "spamword"},
        {"blocklistItemId": "id-2", "text": "scam"},
    ]})

    items = service.add_blocklist_items("banned", ["spamword", "scam"])

    assert items == [BlocklistItem("id-1", "spamword"), BlocklistItem("id-2", "scam")]
    assert payload(calls[0]) == {"blocklistItems": [{"text": "spamword"}, {"text": "scam"}]}


def test_remove_item(api):
    service, routes, calls = api
    routes[("POST", f"{BASE}/banned:removeBlocklistItems")] = (204, None)

    assert service.remove_blocklist_item("banned", "id-1") is True
    assert payload(calls[0]) == {"blocklistItemIds": ["id-1"]}


def test_list_items(api):
    service, routes, _ = api
    routes[("GET", f"{BASE}/banned/blocklistItems")] = (200, {"value": [
        {"blocklistItemId": "id-1", "text": "spamword"},
    ]})
    assert service.list_blocklist_items("banned") == [BlocklistItem("id-1", "spamword")]


def test_errors_name_the_failed_action(api):
    service, _, _ = api
    with pytest.raises(RemoteAPIError) as exc_info:
        service.get_blocklist("missing")

    assert exc_info.value.status_code == 404
    assert exc_info.value.message.startswith("Failed to get blocklist: ")


def test_malformed_response(api):
    service, routes, _ = api
    routes[("GET", BASE)] = (200, {"value": [{"description": "no name"}]})
    with pytest.raises(RemoteAPIError, match="Failed to list blocklists"):
        service.list_blocklists()


def test_invalid_arguments_make_no_request(api):
    service, _, calls = api
    with pytest.raises(InvalidInputError):
        service.create_blocklist("", "desc")
    with pytest.raises(InvalidInputError):
        service.add_blocklist_items("banned", [])
    assert calls == []
