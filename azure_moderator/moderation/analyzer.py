"""Severity analysis over category scores."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from azure_moderator.exceptions import RemoteAPIError
from azure_moderator.moderation.models import BlocklistMatch, CategoryAnalysis, ContentCategory


@dataclass(frozen=True)
class SeverityAnalysis:
    has_high_risk: bool
    reason: str = ""


def analyze_scores(scores: Iterable[CategoryAnalysis], threshold: int) -> SeverityAnalysis:
    """Flag every category whose severity reaches *threshold* (inclusive).

    The reason lists the flagged categories in the order they were reported,
    joined by ``", "``.
    """
    flagged = [s.category.value for s in scores if s.severity >= threshold]
    return SeverityAnalysis(has_high_risk=bool(flagged), reason=", ".join(flagged))


def _entries(raw: Any, field: str) -> list[dict[str, Any]]:
    if raw is None:
        return []
    if not isinstance(raw, list) or not all(isinstance(item, dict) for item in raw):
        raise RemoteAPIError(f"Azure API returned a malformed {field} array")
    return raw


def parse_category_scores(raw: Any) -> list[CategoryAnalysis]:
    """Convert the API's ``categoriesAnalysis`` array, dropping unknown categories.

    Raises :class:`RemoteAPIError` when the array or a severity is malformed.
    """
    scores: list[CategoryAnalysis] = []
    for item in _entries(raw, "categoriesAnalysis"):
        try:
            category = ContentCategory(item.get("category", ""))
        except ValueError:
            continue
        severity = item.get("severity")
        if severity is None:
            severity = 0
        if isinstance(severity, bool) or not isinstance(severity, int):
            raise RemoteAPIError(f"Azure API returned a non-integer severity for {category.value}")
        scores.append(CategoryAnalysis(category=category, severity=severity))
    return scores


def parse_blocklist_matches(raw: Any) -> list[BlocklistMatch]:
    """Convert the API's ``blocklistsMatch`` array."""
    return [
        BlocklistMatch(
            blocklist_name=str(m.get("blocklistName", "")),
            match_id=str(m.get("blocklistItemId", "")),
            match_value=str(m.get("blocklistItemText", "")),
        )
        for m in _entries(raw, "blocklistsMatch")
    ]
