"""Combined image + text analysis (Content Safety multimodal preview API).

Analysing an image together with its caption, optionally with OCR over the
image, gives the service more context than two separate calls.  The preview
endpoint uses its own API version and may change.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Optional, Union

import httpx

from azure_moderator.api.client import MULTIMODAL_API_VERSION, RetryingHttpClient, json_body
from azure_moderator.config import ModeratorConfig
from azure_moderator.exceptions import ModerationError
from azure_moderator.moderation.analyzer import analyze_scores, parse_category_scores
from azure_moderator.moderation.models import ContentCategory, ModerationResult
from azure_moderator.utils.validator import validate_categories, validate_image

logger = logging.getLogger(__name__)


class MultimodalService:
    def __init__(
        self,
        config: Optional[ModeratorConfig] = None,
        http: Optional[RetryingHttpClient] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.config = config or ModeratorConfig.from_env()
        self.http = http or RetryingHttpClient(self.config, transport=transport)

    def analyze(
        self,
        image: str,
        text: Optional[str] = None,
        encoding: str = "base64",
        categories: Optional[Iterable[Union[str, ContentCategory]]] = None,
        enable_ocr: bool = True,
    ) -> ModerationResult:
        """Analyse *image* (base64 or URL) with optional accompanying *text*.

        Flagged when any category reaches the high severity threshold.  API
        failures approve the content with empty scores.
        """
        validate_image(image, encoding)

        payload: dict[str, Any] = {
            "image": {"blobUrl": image} if encoding == "url" else {"content": image},
            "categories": validate_categories(categories),
            "enableOcr": enable_ocr,
        }
        if text:
            payload["text"] = text

        try:
            response = self.http.post(
                "/imageWithText:analyze",
                json=payload,
                api_version=MULTIMODAL_API_VERSION,
            )
            data = json_body(response, self.config.endpoint)
            scores = parse_category_scores(data.get("categoriesAnalysis"))
        except ModerationError as exc:
            logger.error(
                "Azure multimodal analysis failed: error=%s endpoint=%s encoding=%s",
                exc,
                self.config.endpoint,
                encoding,
            )
            return ModerationResult.approved()

        analysis = analyze_scores(scores, self.config.high_severity_threshold)
        if analysis.has_high_risk:
            return ModerationResult.flagged(analysis.reason, categories_analysis=scores)
        return ModerationResult.approved(categories_analysis=scores)
