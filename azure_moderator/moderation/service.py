"""Azure Content Safety moderation service.

Turns Content Safety severity scores, a user rating, and blocklist hits into
an approve/flag :class:`ModerationResult`.  When the API cannot be reached the
service degrades instead of raising: text falls back to the rating alone,
images are approved with empty scores.  Input validation errors always
propagate.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Iterable, Optional, Sequence, Union

import httpx

from azure_moderator.api.client import RetryingHttpClient, json_body
from azure_moderator.config import ModeratorConfig
from azure_moderator.exceptions import InvalidInputError, ModerationError
from azure_moderator.moderation.analyzer import (
    analyze_scores,
    parse_blocklist_matches,
    parse_category_scores,
)
from azure_moderator.moderation.models import (
    BatchItem,
    ContentCategory,
    ContextResult,
    ModerationResult,
    ProtectedMaterialResult,
)
from azure_moderator.moderation.multimodal import MultimodalService
from azure_moderator.moderation.protected_material import ProtectedMaterialService
from azure_moderator.utils.validator import (
    validate_categories,
    validate_image,
    validate_rating,
    validate_text,
)

logger = logging.getLogger(__name__)

LOW_RATING_REASON = "low_rating"
BLOCKLIST_MATCH_REASON = "blocklist_match"

Categories = Optional[Iterable[Union[str, ContentCategory]]]


class ContentSafetyService:
    """Moderates text and images against Azure Content Safety.

    Parameters
    ----------
    config : ModeratorConfig | None
        Service settings.  Read from the environment when *None*.
    http : RetryingHttpClient | None
        Shared HTTP client.  Built from *config* when *None*.
    transport : httpx.BaseTransport | None
        Transport for the HTTP client built here (ignored when *http* is given).
    """

    def __init__(
        self,
        config: Optional[ModeratorConfig] = None,
        http: Optional[RetryingHttpClient] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.config = config or ModeratorConfig.from_env()
        self._owns_http = http is None
        self.http = http or RetryingHttpClient(self.config, transport=transport)
        self._multimodal = MultimodalService(self.config, http=self.http)
        self._protected = ProtectedMaterialService(self.config, http=self.http)

    def close(self) -> None:
        if self._owns_http:
            self.http.close()

    def __enter__(self) -> "ContentSafetyService":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # -- text ----------------------------------------------------------------

    def moderate_text(
        self,
        text: str,
        rating: float,
        categories: Categories = None,
        blocklist_names: Optional[Sequence[str]] = None,
        halt_on_blocklist_hit: bool = False,
    ) -> ModerationResult:
        """Moderate *text* posted with a user *rating* between 0 and 5.

        Approved only when no category reaches the high severity threshold,
        no blocklist term matched, and the rating meets the low rating
        threshold.
        """
        validate_text(text)
        validate_rating(rating)

        payload: dict[str, Any] = {
            "text": text,
            "categories": validate_categories(categories),
        }
        if blocklist_names:
            payload["blocklistNames"] = list(blocklist_names)
            payload["haltOnBlocklistHit"] = halt_on_blocklist_hit

        try:
            response = self.http.post("/text:analyze", json=payload)
            data = json_body(response, self.config.endpoint)
            scores = parse_category_scores(data.get("categoriesAnalysis"))
            matches = parse_blocklist_matches(data.get("blocklistsMatch"))
        except ModerationError as exc:
            logger.error(
                "Azure moderation failed: error=%s endpoint=%s text_length=%d rating=%s",
                exc,
                self.config.endpoint,
                len(text),
                rating,
            )
            return self._rating_fallback(rating)

        analysis = analyze_scores(scores, self.config.high_severity_threshold)

        reasons: list[str] = []
        if analysis.reason:
            reasons.append(analysis.reason)
        if matches:
            reasons.append(BLOCKLIST_MATCH_REASON)

        details: dict[str, Any] = {
            "tracking_id": data.get("trackingId"),
            "categories_analysis": scores,
            "blocklist_matches": matches if blocklist_names else None,
        }
        if not reasons and rating >= self.config.low_rating_threshold:
            return ModerationResult.approved(**details)
        return ModerationResult.flagged(", ".join(reasons) or LOW_RATING_REASON, **details)

    def _rating_fallback(self, rating: float) -> ModerationResult:
        if rating >= self.config.low_rating_threshold:
            return ModerationResult.approved()
        return ModerationResult.flagged(LOW_RATING_REASON)

    # -- image ---------------------------------------------------------------

    def moderate_image(
        self,
        image: str,
        categories: Categories = None,
        encoding: str = "url",
    ) -> ModerationResult:
        """Moderate an image given as a URL or base64 content.

        API failures approve the image with empty scores.
        """
        validate_image(image, encoding)

        image_payload = {"url": image} if encoding == "url" else {"content": image}
        payload = {
            "image": image_payload,
            "categories": validate_categories(categories),
        }

        try:
            response = self.http.post("/image:analyze", json=payload)
            data = json_body(response, self.config.endpoint)
            scores = parse_category_scores(data.get("categoriesAnalysis"))
        except ModerationError as exc:
            logger.error(
                "Azure image moderation failed: error=%s endpoint=%s encoding=%s",
                exc,
                self.config.endpoint,
                encoding,
            )
            return ModerationResult.approved()

        analysis = analyze_scores(scores, self.config.high_severity_threshold)
        details: dict[str, Any] = {
            "tracking_id": data.get("trackingId"),
            "categories_analysis": scores,
        }
        if analysis.has_high_risk:
            return ModerationResult.flagged(analysis.reason, **details)
        return ModerationResult.approved(**details)

    # -- delegated -----------------------------------------------------------

    def analyze_multimodal(
        self,
        image: str,
        text: Optional[str] = None,
        encoding: str = "base64",
        categories: Categories = None,
        enable_ocr: bool = True,
    ) -> ModerationResult:
        """See :meth:`MultimodalService.analyze`."""
        return self._multimodal.analyze(
            image,
            text=text,
            encoding=encoding,
            categories=categories,
            enable_ocr=enable_ocr,
        )

    def detect_protected_material(self, text: str) -> ProtectedMaterialResult:
        """See :meth:`ProtectedMaterialService.detect_protected_material`."""
        return self._protected.detect_protected_material(text)

    # -- aggregation ---------------------------------------------------------

    def moderate_batch(
        self,
        items: Sequence[Union[BatchItem, dict[str, Any]]],
        max_workers: int = 1,
    ) -> list[ModerationResult]:
        """Moderate several items, one result per item in input order.

        An item that cannot be processed gets an approved ``batch_error``
        result; the batch itself never raises.
        """
        if max_workers > 1 and len(items) > 1:
            with ThreadPoolExecutor(max_workers=max_workers) as pool:
                return list(pool.map(self._moderate_item_safely, items))
        return [self._moderate_item_safely(item) for item in items]

    def _moderate_item_safely(self, item: Union[BatchItem, dict[str, Any]]) -> ModerationResult:
        try:
            return self._moderate_item(item)
        except Exception as exc:
            logger.warning("Batch item moderation failed: %s", exc)
            return ModerationResult.batch_error()

    def _moderate_item(self, item: Union[BatchItem, dict[str, Any]]) -> ModerationResult:
        if isinstance(item, dict):
            item = BatchItem.from_dict(item)
        if item.type == "text":
            return self.moderate_text(
                item.content,
                item.rating,
                categories=item.categories,
                blocklist_names=item.blocklist_names,
            )
        if item.type == "image":
            return self.moderate_image(
                item.content,
                categories=item.categories,
                encoding=item.encoding,
            )
        raise InvalidInputError(f"Invalid content type: {item.type}")

    def moderate_with_context(
        self,
        text: str,
        rating: float,
        image_url: Optional[str] = None,
        categories: Categories = None,
        blocklist_names: Optional[Sequence[str]] = None,
    ) -> ContextResult:
        """Moderate text together with an optional accompanying image URL.

        The combined verdict is flagged when either part is flagged.
        """
        text_result = self.moderate_text(
            text,
            rating,
            categories=categories,
            blocklist_names=blocklist_names,
        )
        image_result = None
        if image_url:
            image_result = self.moderate_image(image_url, categories=categories, encoding="url")

        reasons: list[str] = []
        if text_result.is_flagged() and text_result.reason:
            reasons.append(f"Text: {text_result.reason}")
        if image_result is not None and image_result.is_flagged() and image_result.reason:
            reasons.append(f"Image: {image_result.reason}")

        if text_result.is_flagged() or (image_result is not None and image_result.is_flagged()):
            combined = ModerationResult.flagged(", ".join(reasons))
        else:
            combined = ModerationResult.approved()

        return ContextResult(text=text_result, image=image_result, combined=combined)
