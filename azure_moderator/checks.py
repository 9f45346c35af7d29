"""Upload safety checks for form and API handlers.

Each check returns ``None`` when the value is acceptable, or a user-facing
failure message.  They never raise for API trouble: a degraded or failed
moderation call only fails the check when ``fail_on_api_error`` is set on
the service's config.

    error = safe_text(service, request_body["comment"], attribute="comment")
    if error:
        return {"errors": {"comment": error}}, 422
"""

from __future__ import annotations

import base64
import logging
from typing import Iterable, Optional, Union

from azure_moderator.exceptions import InvalidInputError, ModerationError
from azure_moderator.moderation.models import ContentCategory, ModerationResult
from azure_moderator.moderation.multimodal import MultimodalService
from azure_moderator.moderation.protected_material import ProtectedMaterialService
from azure_moderator.moderation.service import ContentSafetyService

logger = logging.getLogger(__name__)

Categories = Optional[Iterable[Union[str, ContentCategory]]]


def _unavailable(attribute: str) -> str:
    return f"Unable to validate {attribute} safety. Please try again."


def _verdict(result: ModerationResult, attribute: str, fail_on_api_error: bool) -> Optional[str]:
    # Empty scores mean the call degraded to a default verdict.
    if not result.categories_analysis and fail_on_api_error:
        logger.warning("Moderation API unavailable: attribute=%s", attribute)
        return _unavailable(attribute)
    if result.is_flagged():
        return f"The {attribute} contains {result.reason or 'harmful content'} and cannot be accepted."
    return None


def _encode_upload(data: bytes, attribute: str) -> str:
    if not isinstance(data, (bytes, bytearray)):
        raise InvalidInputError(f"The {attribute} must be an uploaded file.")
    if not data:
        raise InvalidInputError(f"The {attribute} file is not valid.")
    return base64.b64encode(bytes(data)).decode("ascii")


# -- checks ------------------------------------------------------------------


def safe_text(
    service: ContentSafetyService,
    value: object,
    attribute: str = "text",
    check_harmful: bool = True,
    check_protected: bool = True,
    default_rating: float = 5.0,
    protected: Optional[ProtectedMaterialService] = None,
) -> Optional[str]:
    """Check *value* for harmful content and then for protected material.

    Non-string and empty values pass; presence is a separate concern.
    """
    if not isinstance(value, str) or not value:
        return None

    fail_on_api_error = service.config.fail_on_api_error
    try:
        if check_harmful:
            result = service.moderate_text(value, default_rating)
            if not result.categories_analysis and fail_on_api_error:
                logger.warning("Moderation API unavailable: attribute=%s", attribute)
                return _unavailable(attribute)
            if result.is_flagged():
                return f"The {attribute} contains {result.reason or 'harmful content'}."

        if check_protected:
            detector = protected or service
            if detector.detect_protected_material(value).detected:
                return f"The {attribute} contains protected or copyrighted material."
    except InvalidInputError as exc:
        return str(exc)
    except ModerationError as exc:
        logger.error("Text safety check failed: attribute=%s error=%s", attribute, exc)
        if fail_on_api_error:
            return _unavailable(attribute)

    return None


def safe_image(
    service: ContentSafetyService,
    data: bytes,
    attribute: str = "image",
    categories: Categories = None,
) -> Optional[str]:
    """Check raw uploaded image bytes."""
    fail_on_api_error = service.config.fail_on_api_error
    try:
        encoded = _encode_upload(data, attribute)
        result = service.moderate_image(encoded, categories=categories, encoding="base64")
    except InvalidInputError as exc:
        return str(exc)
    except ModerationError as exc:
        logger.warning("Image safety check failed: attribute=%s error=%s", attribute, exc)
        return _unavailable(attribute) if fail_on_api_error else None

    return _verdict(result, attribute, fail_on_api_error)


def safe_multimodal(
    multimodal: MultimodalService,
    data: bytes,
    attribute: str = "image",
    text: Optional[str] = None,
    categories: Categories = None,
    enable_ocr: bool = True,
) -> Optional[str]:
    """Check uploaded image bytes together with an optional caption."""
    fail_on_api_error = multimodal.config.fail_on_api_error
    try:
        encoded = _encode_upload(data, attribute)
        result = multimodal.analyze(
            encoded,
            text=text,
            encoding="base64",
            categories=categories,
            enable_ocr=enable_ocr,
        )
    except InvalidInputError as exc:
        return str(exc)
    except ModerationError as exc:
        logger.warning("Multimodal safety check failed: attribute=%s error=%s", attribute, exc)
        return _unavailable(attribute) if fail_on_api_error else None

    return _verdict(result, attribute, fail_on_api_error)
