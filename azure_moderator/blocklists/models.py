"""Data models for custom blocklists."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Blocklist:
    """A named list of terms that force a flag regardless of AI scoring."""

    name: str
    description: Optional[str] = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Blocklist":
        return cls(name=data["blocklistName"], description=data.get("description"))


@dataclass(frozen=True)
class BlocklistItem:
    """A single term stored in a blocklist."""

    id: str
    text: str

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "BlocklistItem":
        return cls(id=data["blocklistItemId"], text=data["text"])
