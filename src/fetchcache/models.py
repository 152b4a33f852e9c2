"""Pydantic configuration models for fetchcache.

These are serialised as JSON in the user's config directory and resolved by
:func:`~fetchcache.config.resolve_config`:

* :class:`CacheConfig` -- where fetched responses are cached and for how long.
* :class:`RequestConfig` -- timeout, TLS verification and extra headers for
  the network fetch.
* :class:`GlobalConfig` -- the root object holding both.
"""

from __future__ import annotations

from datetime import timedelta
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CacheConfig(BaseModel):
    """Response cache settings stored in :class:`GlobalConfig`."""

    model_config = ConfigDict(validate_assignment=True)

    namespace: str = Field(default="http", min_length=1, description="Cache file namespace suffix")
    ttl_seconds: int = Field(default=7200, ge=0, description="Entry lifespan in seconds")
    directory: Optional[str] = Field(
        default=None, description="Cache directory; the system temp directory when unset"
    )

    @property
    def lifespan(self) -> timedelta:
        return timedelta(seconds=self.ttl_seconds)


class RequestConfig(BaseModel):
    """HTTP request settings applied to every fetch."""

    model_config = ConfigDict(validate_assignment=True)

    timeout: float = Field(default=20.0, gt=0, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")
    headers: dict[str, str] = Field(
        default_factory=dict, description="Headers merged over the browser defaults"
    )


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/fetchcache/config.json``.

    Loaded and saved by :func:`~fetchcache.config.load_global_config` and
    :func:`~fetchcache.config.save_global_config`.  Fields here have the
    lowest precedence and can be overridden by environment variables or
    CLI flags.
    """

    cache: CacheConfig = Field(default_factory=CacheConfig)
    request: RequestConfig = Field(default_factory=RequestConfig)
