# ============================================================================
# CLAUDE CONTEXT - SOCRATA PROVIDER CONFIGURATION
# ============================================================================
# STATUS: Standalone Configuration - Socrata feature provider
# PURPOSE: Environment-based configuration for upstream access and license text
# EXPORTS: SocrataConfig, get_socrata_config
# INTERFACES: Pydantic BaseModel
# PYDANTIC_MODELS: SocrataConfig
# DEPENDENCIES: pydantic, os
# SOURCE: Environment variables
# SCOPE: Socrata provider configuration only
# VALIDATION: Pydantic v2 validation
# PATTERNS: Settings Pattern, Singleton via cached function
# ENTRY_POINTS: from socrata_features.config import get_socrata_config
# ============================================================================

"""
Socrata Provider Configuration - Standalone

Environment Variables (all optional):
    - SOCRATA_DEFAULT_HOST: Domain used when a request names no host
      (default: "data.sfgov.org")
    - SOCRATA_ORGANIZATION: Organization named in copyrightText
      (default: "the City and County of San Francisco")
    - SOCRATA_APP_TOKEN: Socrata application token, sent as X-App-Token
    - SOCRATA_TIMEOUT: Upstream request timeout in seconds (default: 30)
    - SOCRATA_SCHEME: "https" or "http" (default: "https")
    - SOCRATA_MAX_WORKERS: Threads running requests handed to submit()
      (default: 2). The two parallel fetches inside one request always use
      a pool of their own.

The default host is read-only configuration. A host supplied on a request
applies to that request only.
"""

import os
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class SocrataConfig(BaseModel):
    """
    Configuration for the Socrata feature provider.

    Environment-derived defaults go through the same validators as
    explicit values.
    """
    model_config = ConfigDict(validate_default=True)

    default_host: str = Field(
        default_factory=lambda: os.getenv("SOCRATA_DEFAULT_HOST", "data.sfgov.org"),
        description="Socrata domain used when the request carries no host"
    )
    organization: str = Field(
        default_factory=lambda: os.getenv(
            "SOCRATA_ORGANIZATION", "the City and County of San Francisco"
        ),
        description="Organization named in the copyrightText license sentence"
    )
    app_token: Optional[str] = Field(
        default_factory=lambda: os.getenv("SOCRATA_APP_TOKEN") or None,
        description="Socrata application token (X-App-Token header)"
    )
    timeout_seconds: float = Field(
        default_factory=lambda: float(os.getenv("SOCRATA_TIMEOUT", "30")),
        ge=1,
        le=300,
        description="Upstream request timeout in seconds"
    )
    scheme: str = Field(
        default_factory=lambda: os.getenv("SOCRATA_SCHEME", "https"),
        description="URL scheme for upstream requests"
    )
    max_workers: int = Field(
        default_factory=lambda: int(os.getenv("SOCRATA_MAX_WORKERS", "2")),
        ge=2,
        le=16,
        description="Thread pool size for concurrent requests run through submit()"
    )

    @field_validator("default_host")
    @classmethod
    def validate_host(cls, v: str) -> str:
        """A host is a bare domain: no scheme, no path."""
        return validate_host_value(v)

    @field_validator("scheme")
    @classmethod
    def validate_scheme(cls, v: str) -> str:
        v = v.lower()
        if v not in ("https", "http"):
            raise ValueError(f"scheme must be 'https' or 'http', got '{v}'")
        return v


def validate_host_value(host: str) -> str:
    """
    Validate a Socrata domain name.

    Args:
        host: Domain such as "data.sfgov.org"

    Returns:
        The stripped host

    Raises:
        ValueError: If the host is empty or carries a scheme or path
    """
    host = (host or "").strip()
    if not host:
        raise ValueError("host must not be empty")
    if "://" in host or "/" in host or "?" in host or "#" in host:
        raise ValueError(f"host must be a bare domain, got '{host}'")
    return host


# Singleton instance cache
_config_cache: Optional[SocrataConfig] = None


def get_socrata_config() -> SocrataConfig:
    """
    Get singleton Socrata provider configuration instance.

    Returns:
        Cached configuration instance
    """
    global _config_cache

    if _config_cache is None:
        _config_cache = SocrataConfig()

    return _config_cache


def reset_socrata_config() -> None:
    """Drop the cached configuration (environment changed)."""
    global _config_cache
    _config_cache = None
