"""Configuration for the Azure Content Safety client.

A :class:`ModeratorConfig` is built once (from the environment, a YAML file,
or directly) and handed to every service.  Nothing in the package reads
configuration from global state after construction.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

ENV_PREFIX = "AZURE_CONTENT_SAFETY_"

# Environment variable -> field name
_ENV_FIELDS: dict[str, str] = {
    "ENDPOINT": "endpoint",
    "API_KEY": "api_key",
    "LOW_RATING_THRESHOLD": "low_rating_threshold",
    "HIGH_SEVERITY_THRESHOLD": "high_severity_threshold",
    "FAIL_ON_API_ERROR": "fail_on_api_error",
    "RETRY_DELAY_MS": "retry_delay_ms",
    "TIMEOUT": "timeout",
}

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class ModeratorConfig:
    """Immutable settings shared by all services.

    Parameters
    ----------
    endpoint : str
        Base URL of the Content Safety resource, e.g.
        ``https://my-resource.cognitiveservices.azure.com``.
    api_key : str
        Subscription key sent in the ``Ocp-Apim-Subscription-Key`` header.
    low_rating_threshold : float
        User ratings (0-5) below this value flag text content.
    high_severity_threshold : int
        Category severities (0-7) at or above this value flag content.
    fail_on_api_error : bool
        Whether upload safety checks treat a degraded verdict as a failure.
    retry_delay_ms : int
        Fixed pause between retry attempts.
    timeout : float
        Per-request timeout in seconds.
    """

    endpoint: str = ""
    api_key: str = ""
    low_rating_threshold: float = 2.0
    high_severity_threshold: int = 3
    fail_on_api_error: bool = False
    retry_delay_ms: int = 100
    timeout: float = 30.0

    def __repr__(self) -> str:
        masked = "***" if self.api_key else ""
        return (
            f"ModeratorConfig(endpoint={self.endpoint!r}, api_key={masked!r}, "
            f"low_rating_threshold={self.low_rating_threshold}, "
            f"high_severity_threshold={self.high_severity_threshold}, "
            f"fail_on_api_error={self.fail_on_api_error})"
        )

    # -- constructors --------------------------------------------------------

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ModeratorConfig":
        """Build a config from a plain mapping, coercing value types."""
        known = {f.name for f in fields(cls)}
        values = {k: _coerce(k, v) for k, v in data.items() if k in known and v is not None}
        return cls(**values)

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ModeratorConfig":
        """Read ``AZURE_CONTENT_SAFETY_*`` variables from *environ* (default ``os.environ``)."""
        env = os.environ if environ is None else environ
        data = {}
        for suffix, name in _ENV_FIELDS.items():
            value = env.get(ENV_PREFIX + suffix)
            if value not in (None, ""):
                data[name] = value
        return cls.from_mapping(data)

    @classmethod
    def from_file(
        cls,
        path: str | Path,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "ModeratorConfig":
        """Load a YAML config file; environment values fill omitted keys.

        The file may hold the settings at the top level or under an
        ``azure_moderator`` key.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        data = data.get("azure_moderator", data) or {}

        base = cls.from_env(environ)
        overrides = cls.from_mapping(data)
        explicit = {
            k: getattr(overrides, k)
            for k, v in data.items()
            if k in _field_names() and v is not None
        }
        return replace(base, **explicit)

    # -- checks --------------------------------------------------------------

    def validate(self) -> list[str]:
        """Return a list of configuration problems.  Empty list means usable."""
        issues: list[str] = []
        if not self.endpoint:
            issues.append(f"Missing endpoint (set {ENV_PREFIX}ENDPOINT)")
        if not self.api_key:
            issues.append(f"Missing API key (set {ENV_PREFIX}API_KEY)")
        if not 0 <= self.low_rating_threshold <= 5:
            issues.append("low_rating_threshold must be between 0 and 5")
        if not 0 <= self.high_severity_threshold <= 7:
            issues.append("high_severity_threshold must be between 0 and 7")
        if self.retry_delay_ms < 0:
            issues.append("retry_delay_ms must not be negative")
        return issues

    @property
    def configured(self) -> bool:
        """Return *True* when both endpoint and key are set."""
        return bool(self.endpoint and self.api_key)


def _field_names() -> set[str]:
    return {f.name for f in fields(ModeratorConfig)}


def _coerce(name: str, value: Any) -> Any:
    if name in ("endpoint", "api_key"):
        return str(value)
    if name in ("low_rating_threshold", "timeout"):
        return float(value)
    if name in ("high_severity_threshold", "retry_delay_ms"):
        return int(value)
    if name == "fail_on_api_error":
        if isinstance(value, str):
            return value.strip().lower() in _TRUTHY
        return bool(value)
    return value
