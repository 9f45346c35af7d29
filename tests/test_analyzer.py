"""Tests for severity analysis and response parsing."""

import pytest

from azure_moderator.exceptions import RemoteAPIError
from azure_moderator.moderation.analyzer import (
    analyze_scores,
    parse_blocklist_matches,
    parse_category_scores,
)
from azure_moderator.moderation.models import CategoryAnalysis, ContentCategory


def _scores(*pairs):
    return [CategoryAnalysis(ContentCategory(c), s) for c, s in pairs]


def test_no_scores_is_not_high_risk():
    result = analyze_scores([], 3)
    assert not result.has_high_risk
    assert result.reason == ""


def test_threshold_is_inclusive():
    result = analyze_scores(_scores(("Hate", 3), ("Violence", 2)), 3)
    assert result.has_high_risk
    assert result.reason == "Hate"


def test_reason_keeps_reported_order():
    result = analyze_scores(_scores(("Violence", 6), ("Hate", 0), ("Sexual", 4)), 3)
    assert result.reason == "Violence, Sexual"


def test_all_below_threshold():
    result = analyze_scores(_scores(("Hate", 2), ("SelfHarm", 1), ("Sexual", 0), ("Violence", 2)), 3)
    assert not result.has_high_risk


def test_parse_category_scores_skips_unknown_categories():
    scores = parse_category_scores([
        {"category": "Hate", "severity": 2},
        {"category": "Profanity", "severity": 6},
        {"category": "SelfHarm"},
    ])
    assert scores == [
        CategoryAnalysis(ContentCategory.HATE, 2),
        CategoryAnalysis(ContentCategory.SELF_HARM, 0),
    ]


def test_parse_category_scores_handles_missing_array():
    assert parse_category_scores(None) == []


def test_parse_blocklist_matches():
    matches = parse_blocklist_matches([
        {"blocklistName": "banned", "blocklistItemId": "id-1", "blocklistItemText": "spam"},
    ])
    assert len(matches) == 1
    assert matches[0].blocklist_name == "banned"
    assert matches[0].match_id == "id-1"
    assert matches[0].match_value == "spam"


@pytest.mark.parametrize(
    "raw",
    [
        [{"category": "Hate", "severity": "high"}],
        [{"category": "Hate", "severity": True}],
        ["Hate"],
        [{"category": "Hate", "severity": None}, 5],
        {"category": "Hate"},
        "Hate",
    ],
)
def test_malformed_category_scores_raise(raw):
    with pytest.raises(RemoteAPIError):
        parse_category_scores(raw)


def test_malformed_blocklist_matches_raise():
    with pytest.raises(RemoteAPIError):
        parse_blocklist_matches(["x"])
