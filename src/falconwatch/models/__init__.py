"""Response models for the Falcon API."""

from falconwatch.models.devices import DeviceScroll
from falconwatch.models.token import OAuthToken

__all__ = [
    "DeviceScroll",
    "OAuthToken",
]
