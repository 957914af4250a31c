"""falconwatch - Async monitor for the CrowdStrike Falcon device inventory."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("falconwatch")
except PackageNotFoundError:
    __version__ = "0+local"
from falconwatch.client import FalconClient
from falconwatch.config import FalconConfig, parse_duration
from falconwatch.exceptions import (
    FalconAuthenticationError,
    FalconConfigError,
    FalconDecodeError,
    FalconError,
    FalconTokenRejectedError,
    FalconTransportError,
)
from falconwatch.models import DeviceScroll, OAuthToken
from falconwatch.monitor import OutcomeKind, PollOutcome, Watermark
from falconwatch.poller import InventoryPoller

__all__ = [
    "__version__",
    "DeviceScroll",
    "FalconAuthenticationError",
    "FalconClient",
    "FalconConfig",
    "FalconConfigError",
    "FalconDecodeError",
    "FalconError",
    "FalconTokenRejectedError",
    "FalconTransportError",
    "InventoryPoller",
    "OAuthToken",
    "OutcomeKind",
    "PollOutcome",
    "Watermark",
    "parse_duration",
]
