"""Retrying HTTP client for the Azure Content Safety REST API.

Every service in the package talks to Azure through :class:`RetryingHttpClient`.
It builds ``/contentsafety`` URLs, attaches the subscription key, retries a
fixed set of transient statuses with a fixed delay, and turns failures into
:mod:`azure_moderator.exceptions` errors.
"""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Optional

import httpx

from azure_moderator.config import ModeratorConfig
from azure_moderator.exceptions import InvalidInputError, RemoteAPIError, TransportError

logger = logging.getLogger(__name__)

API_VERSION = "2024-09-01"
MULTIMODAL_API_VERSION = "2024-09-15-preview"

RETRY_ATTEMPTS = 3
RETRY_DELAY_MS = 100
RETRY_STATUS_CODES = frozenset({429, 500, 503})

SUPPORTED_METHODS = ("GET", "POST", "PATCH", "DELETE")


def is_retryable_status(status_code: int) -> bool:
    """Return *True* if a response with *status_code* should be retried."""
    return status_code in RETRY_STATUS_CODES


def error_message(response: httpx.Response) -> str:
    """Format the error carried by a failed Azure response."""
    code = "unknown"
    message = response.text
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and isinstance(body.get("error"), dict):
        error = body["error"]
        code = error.get("code") or code
        message = error.get("message") or message
    return f"Azure API request failed (HTTP {response.status_code}): [{code}] {message}"


class RetryingHttpClient:
    """Thin wrapper around :class:`httpx.Client` with a bounded retry policy.

    Parameters
    ----------
    config : ModeratorConfig
        Supplies endpoint, key, timeout and retry delay.
    transport : httpx.BaseTransport | None
        Optional transport, e.g. :class:`httpx.MockTransport` in tests.
    client : httpx.Client | None
        Pre-built client to use instead of creating one.  A caller-supplied
        client is not closed by :meth:`close`.
    sleep : callable
        Called with the delay in seconds between attempts.
    """

    def __init__(
        self,
        config: ModeratorConfig,
        transport: Optional[httpx.BaseTransport] = None,
        client: Optional[httpx.Client] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.config = config
        self._sleep = sleep
        self._owns_client = client is None
        self._client = client or httpx.Client(transport=transport, timeout=config.timeout)

    # -- lifecycle -----------------------------------------------------------

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "RetryingHttpClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # -- helpers -------------------------------------------------------------

    def build_url(self, path: str, api_version: str = API_VERSION) -> str:
        base = self.config.endpoint.rstrip("/")
        return f"{base}/contentsafety{path}?api-version={api_version}"

    def _headers(self) -> dict[str, str]:
        return {
            "Ocp-Apim-Subscription-Key": self.config.api_key,
            "Content-Type": "application/json",
        }

    def _log_failure(self, response: httpx.Response) -> None:
        try:
            body: Any = response.json()
        except ValueError:
            body = response.text
        logger.warning(
            "Azure API request failed: status=%s body=%s endpoint=%s",
            response.status_code,
            body,
            self.config.endpoint,
        )

    # -- public API ----------------------------------------------------------

    def send(
        self,
        method: str,
        path: str,
        json: Optional[dict[str, Any]] = None,
        api_version: str = API_VERSION,
    ) -> httpx.Response:
        """Send a request and return the successful response.

        Raises :class:`TransportError` on network failure or when every
        attempt returned a retryable status, and :class:`RemoteAPIError` on
        any other error status.
        """
        method = method.upper()
        if method not in SUPPORTED_METHODS:
            raise InvalidInputError(f"Unsupported HTTP method: {method}")

        url = self.build_url(path, api_version)
        body = json if method in ("POST", "PATCH") else None
        delay = self.config.retry_delay_ms / 1000

        attempt = 0
        while True:
            attempt += 1
            try:
                response = self._client.request(method, url, headers=self._headers(), json=body)
            except httpx.TransportError as exc:
                raise TransportError(
                    "Failed to connect to Azure API",
                    endpoint=self.config.endpoint,
                ) from exc

            if response.is_success:
                return response

            self._log_failure(response)

            if not is_retryable_status(response.status_code):
                raise RemoteAPIError(
                    error_message(response),
                    endpoint=self.config.endpoint,
                    status_code=response.status_code,
                )
            if attempt >= RETRY_ATTEMPTS:
                raise TransportError(
                    error_message(response),
                    endpoint=self.config.endpoint,
                    status_code=response.status_code,
                )

            logger.debug("Retrying %s %s (attempt %d of %d)", method, path, attempt + 1, RETRY_ATTEMPTS)
            self._sleep(delay)

    def get(self, path: str, **kwargs: Any) -> httpx.Response:
        return self.send("GET", path, **kwargs)

    def post(self, path: str, json: Optional[dict[str, Any]] = None, **kwargs: Any) -> httpx.Response:
        return self.send("POST", path, json=json, **kwargs)

    def patch(self, path: str, json: Optional[dict[str, Any]] = None, **kwargs: Any) -> httpx.Response:
        return self.send("PATCH", path, json=json, **kwargs)

    def delete(self, path: str, **kwargs: Any) -> httpx.Response:
        return self.send("DELETE", path, **kwargs)


def json_body(response: httpx.Response, endpoint: Optional[str] = None) -> dict[str, Any]:
    """Decode a successful response body, which must be a JSON object."""
    if not response.content:
        return {}
    try:
        data = response.json()
    except ValueError as exc:
        raise RemoteAPIError(
            "Azure API returned a response that is not valid JSON",
            endpoint=endpoint,
            status_code=response.status_code,
        ) from exc
    if not isinstance(data, dict):
        raise RemoteAPIError(
            "Azure API returned an unexpected response body",
            endpoint=endpoint,
            status_code=response.status_code,
        )
    return data
