"""Protected material (copyrighted text) detection."""

from __future__ import annotations

from typing import Optional

import httpx

from azure_moderator.api.client import RetryingHttpClient, json_body
from azure_moderator.config import ModeratorConfig
from azure_moderator.exceptions import ModerationError, RemoteAPIError
from azure_moderator.moderation.models import ProtectedMaterialResult
from azure_moderator.utils.validator import validate_text


class ProtectedMaterialService:
    """Detects known song lyrics, articles, recipes and similar text.

    There is no sensible default verdict for this check, so API failures
    propagate as :class:`ModerationError`.
    """

    def __init__(
        self,
        config: Optional[ModeratorConfig] = None,
        http: Optional[RetryingHttpClient] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.config = config or ModeratorConfig.from_env()
        self.http = http or RetryingHttpClient(self.config, transport=transport)

    def detect_protected_material(self, text: str) -> ProtectedMaterialResult:
        """Return the service's detection flag for *text*, unmodified."""
        validate_text(text)

        try:
            response = self.http.post("/text:detectProtectedMaterial", json={"text": text})
            data = json_body(response, self.config.endpoint)
            analysis = data.get("protectedMaterialAnalysis") or {}
            if not isinstance(analysis, dict):
                raise RemoteAPIError(
                    "Azure API returned a malformed protectedMaterialAnalysis object",
                    endpoint=self.config.endpoint,
                    status_code=response.status_code,
                )
        except ModerationError as exc:
            raise type(exc)(
                f"Failed to detect protected material: {exc.message}",
                endpoint=exc.endpoint,
                status_code=exc.status_code,
            ) from exc

        return ProtectedMaterialResult(
            detected=bool(analysis.get("detected", False)),
            details=dict(analysis),
        )
