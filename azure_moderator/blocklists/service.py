"""Custom blocklist management via the Content Safety API.

Blocklists hold exact terms that flag text regardless of the AI classifiers.
Pass their names to :meth:`ContentSafetyService.moderate_text` to apply them.
Management calls have no fallback: every failure raises a
:class:`ModerationError` describing the action that failed.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, TypeVar
from urllib.parse import quote

import httpx

from azure_moderator.api.client import RetryingHttpClient, json_body
from azure_moderator.blocklists.models import Blocklist, BlocklistItem
from azure_moderator.config import ModeratorConfig
from azure_moderator.exceptions import InvalidInputError, ModerationError, RemoteAPIError

T = TypeVar("T")


class BlocklistService:
    """Create, inspect, and edit blocklists.

    Parameters
    ----------
    config : ModeratorConfig | None
        Service settings.  Read from the environment when *None*.
    http : RetryingHttpClient | None
        Shared HTTP client.  Built from *config* when *None*.
    transport : httpx.BaseTransport | None
        Transport for the HTTP client built here.
    """

    def __init__(
        self,
        config: Optional[ModeratorConfig] = None,
        http: Optional[RetryingHttpClient] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.config = config or ModeratorConfig.from_env()
        self.http = http or RetryingHttpClient(self.config, transport=transport)

    # -- helpers -------------------------------------------------------------

    @staticmethod
    def _path(name: str, suffix: str = "") -> str:
        if not name:
            raise InvalidInputError("Blocklist name cannot be empty")
        return f"/text/blocklists/{quote(name, safe='')}{suffix}"

    def _request(
        self,
        action: str,
        method: str,
        path: str,
        json: Optional[dict[str, Any]] = None,
    ) -> tuple[httpx.Response, dict[str, Any]]:
        try:
            response = self.http.send(method, path, json=json)
            return response, json_body(response, self.config.endpoint)
        except ModerationError as exc:
            raise type(exc)(
                f"Failed to {action}: {exc.message}",
                endpoint=exc.endpoint,
                status_code=exc.status_code,
            ) from exc

    def _parse(self, action: str, parser: Callable[[], T]) -> T:
        try:
            return parser()
        except (KeyError, TypeError) as exc:
            raise RemoteAPIError(
                f"Failed to {action}: unexpected response field {exc}",
                endpoint=self.config.endpoint,
            ) from exc

    # -- blocklists ----------------------------------------------------------

    def create_blocklist(self, name: str, description: str) -> Blocklist:
        """Create (or update) the blocklist *name*."""
        action = "create blocklist"
        _, data = self._request(action, "PATCH", self._path(name), {"description": description})
        return self._parse(action, lambda: Blocklist.from_api(data))

    def get_blocklist(self, name: str) -> Blocklist:
        action = "get blocklist"
        _, data = self._request(action, "GET", self._path(name))
        return self._parse(action, lambda: Blocklist.from_api(data))

    def list_blocklists(self) -> list[Blocklist]:
        action = "list blocklists"
        _, data = self._request(action, "GET", "/text/blocklists")
        return self._parse(action, lambda: [Blocklist.from_api(b) for b in data.get("value", [])])

    def delete_blocklist(self, name: str) -> bool:
        response, _ = self._request("delete blocklist", "DELETE", self._path(name))
        return response.is_success

    # -- items ---------------------------------------------------------------

    def add_blocklist_items(self, blocklist_name: str, items: list[str]) -> list[BlocklistItem]:
        """Add (or update) *items* and return them with their assigned IDs."""
        if not items:
            raise InvalidInputError("At least one blocklist item is required")
        action = "add blocklist items"
        _, data = self._request(
            action,
            "POST",
            self._path(blocklist_name, ":addOrUpdateBlocklistItems"),
            {"blocklistItems": [{"text": text} for text in items]},
        )
        return self._parse(
            action, lambda: [BlocklistItem.from_api(i) for i in data.get("blocklistItems", [])]
        )

    def remove_blocklist_item(self, blocklist_name: str, item_id: str) -> bool:
        response, _ = self._request(
            "remove blocklist item",
            "POST",
            self._path(blocklist_name, ":removeBlocklistItems"),
            {"blocklistItemIds": [item_id]},
        )
        return response.is_success

    def list_blocklist_items(self, blocklist_name: str) -> list[BlocklistItem]:
        action = "list blocklist items"
        _, data = self._request(action, "GET", self._path(blocklist_name, "/blocklistItems"))
        return self._parse(action, lambda: [BlocklistItem.from_api(i) for i in data.get("value", [])])
