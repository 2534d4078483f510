"""Typed domain errors for POI search.

All errors inherit from PoiSearchError and can optionally wrap a root
cause exception for debugging.

Propagation policy: ConfigurationError and ProviderError are raised
inside provider and geocoding adapters and recovered there (logged,
empty result). LocationPermissionError crosses the adapter boundary so
the coordinator can surface it. Cancellation is plain
``asyncio.CancelledError`` and is never wrapped.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class PoiSearchError(Exception):
    """Base error for the POI search domain.

    Attributes:
        message: Human-readable error description
        cause: Optional underlying exception that caused this error
    """

    message: str
    cause: Optional[Exception] = field(default=None, repr=False)

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message

    def __post_init__(self) -> None:
        super().__init__(self.message)


@dataclass
class ConfigurationError(PoiSearchError):
    """Missing or rejected configuration, usually an API credential.

    Attributes:
        setting_name: Name of the problematic setting
        provider: Backend the setting belongs to
    """

    setting_name: str = ""
    provider: str = ""


@dataclass
class ProviderError(PoiSearchError):
    """Remote call failed: transport, timeout, HTTP status or bad payload.

    Attributes:
        provider: Backend that failed
        status_code: HTTP status if the server answered
        is_timeout: Whether the failure was a timeout
    """

    provider: str = ""
    status_code: Optional[int] = None
    is_timeout: bool = False


@dataclass
class LocationPermissionError(PoiSearchError):
    """Device location access was denied.

    Surfaced to callers instead of being turned into "no location", so a
    UI can prompt for the permission.
    """
