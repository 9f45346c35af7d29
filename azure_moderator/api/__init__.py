"""HTTP transport for the Content Safety API."""

from azure_moderator.api.client import RetryingHttpClient, is_retryable_status

__all__ = ["RetryingHttpClient", "is_retryable_status"]
