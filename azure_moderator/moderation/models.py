"""Data models for the content moderation system."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Optional, Union

# Reason recorded on batch slots whose item could not be processed.
BATCH_ERROR_REASON = "batch_error"


class ContentCategory(str, Enum):
    """Harm categories scored by Azure Content Safety."""

    HATE = "Hate"
    SELF_HARM = "SelfHarm"
    SEXUAL = "Sexual"
    VIOLENCE = "Violence"

    @classmethod
    def default_categories(cls) -> list[str]:
        """Return the wire values of every category, in API order."""
        return [c.value for c in cls]

    @classmethod
    def parse(cls, categories: Optional[Iterable[Union[str, "ContentCategory"]]]) -> list[str]:
        """Normalise *categories* to wire values, defaulting to all of them.

        Raises ``ValueError`` for a name that is not a known category.
        """
        if categories is None:
            return cls.default_categories()
        return [cls(c).value for c in categories]


class ModerationStatus(str, Enum):
    """Outcome of a moderation check."""

    APPROVED = "approved"
    FLAGGED = "flagged"

    @property
    def label(self) -> str:
        return {
            ModerationStatus.APPROVED: "Approved",
            ModerationStatus.FLAGGED: "Flagged",
        }[self]


@dataclass(frozen=True)
class CategoryAnalysis:
    """Severity (0-7) reported for a single category."""

    category: ContentCategory
    severity: int


@dataclass(frozen=True)
class BlocklistMatch:
    """A blocklist term found in moderated text."""

    blocklist_name: str
    match_id: str
    match_value: str


@dataclass(frozen=True)
class ModerationResult:
    """Verdict for one piece of content.

    A flagged result always carries a reason.  Approved results carry none,
    except the ``batch_error`` marker placed on batch slots that failed.
    """

    status: ModerationStatus
    reason: Optional[str] = None
    tracking_id: Optional[str] = None
    categories_analysis: tuple[CategoryAnalysis, ...] = ()
    blocklist_matches: Optional[tuple[BlocklistMatch, ...]] = None

    def __post_init__(self) -> None:
        if isinstance(self.status, str) and not isinstance(self.status, ModerationStatus):
            object.__setattr__(self, "status", ModerationStatus(self.status))
        object.__setattr__(self, "categories_analysis", tuple(self.categories_analysis))
        if self.blocklist_matches is not None:
            object.__setattr__(self, "blocklist_matches", tuple(self.blocklist_matches))

        if self.status is ModerationStatus.FLAGGED and not self.reason:
            raise ValueError("A flagged result requires a reason")
        if (
            self.status is ModerationStatus.APPROVED
            and self.reason is not None
            and self.reason != BATCH_ERROR_REASON
        ):
            raise ValueError("An approved result cannot carry a reason")

    @classmethod
    def approved(cls, **kwargs: Any) -> "ModerationResult":
        return cls(status=ModerationStatus.APPROVED, **kwargs)

    @classmethod
    def flagged(cls, reason: str, **kwargs: Any) -> "ModerationResult":
        return cls(status=ModerationStatus.FLAGGED, reason=reason, **kwargs)

    @classmethod
    def batch_error(cls) -> "ModerationResult":
        return cls(status=ModerationStatus.APPROVED, reason=BATCH_ERROR_REASON)

    def is_approved(self) -> bool:
        return self.status is ModerationStatus.APPROVED

    def is_flagged(self) -> bool:
        return self.status is ModerationStatus.FLAGGED

    def get_severity(self, category: Union[str, ContentCategory]) -> int:
        """Return the severity for *category*, or 0 if it was not analysed."""
        category = ContentCategory(category)
        for analysis in self.categories_analysis:
            if analysis.category is category:
                return analysis.severity
        return 0

    def to_dict(self) -> dict[str, Any]:
        """Serialise using the API's camelCase field names."""
        return {
            "status": self.status.value,
            "reason": self.reason,
            "trackingId": self.tracking_id,
            "categoriesAnalysis": [
                {"category": c.category.value, "severity": c.severity}
                for c in self.categories_analysis
            ],
            "blocklistMatches": [
                {
                    "blocklistName": m.blocklist_name,
                    "matchId": m.match_id,
                    "matchValue": m.match_value,
                }
                for m in self.blocklist_matches
            ]
            if self.blocklist_matches is not None
            else None,
        }


@dataclass(frozen=True)
class ContextResult:
    """Text verdict, optional image verdict, and the combination of both."""

    text: ModerationResult
    image: Optional[ModerationResult]
    combined: ModerationResult

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text.to_dict(),
            "image": self.image.to_dict() if self.image else None,
            "combined": self.combined.to_dict(),
        }


@dataclass(frozen=True)
class ProtectedMaterialResult:
    """Protected (copyrighted) material detection outcome."""

    detected: bool
    details: dict[str, Any] = field(default_factory=dict)


@dataclass
class BatchItem:
    """One entry of a batch moderation request."""

    type: str  # "text" | "image"
    content: str
    rating: float = 5.0
    categories: Optional[list[str]] = None
    blocklist_names: Optional[list[str]] = None
    encoding: str = "url"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BatchItem":
        """Build an item from a dict, accepting camelCase keys as well."""
        return cls(
            type=data["type"],
            content=data["content"],
            rating=float(5.0 if data.get("rating") is None else data["rating"]),
            categories=data.get("categories"),
            blocklist_names=data.get("blocklist_names", data.get("blocklistNames")),
            encoding=data.get("encoding", "url"),
        )
