"""Monitor configuration for falconwatch."""

from __future__ import annotations

import dataclasses
import math
import os
import re
from typing import Any
from urllib.parse import urlsplit

from falconwatch._constants import (
    BASE_URL,
    CLIENT_IDENTIFIER,
    DEFAULT_INTERVAL,
    DEFAULT_REQUEST_TIMEOUT,
    DEVICES_SCROLL_ENDPOINT,
    TOKEN_ENDPOINT,
    TOKEN_EXPIRY_MARGIN,
)
from falconwatch.exceptions import FalconConfigError

_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(ns|us|µs|ms|s|m|h)")
_DURATION_UNITS: dict[str, float] = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def parse_duration(text: str) -> float:
    """Parse a duration such as ``"1m"``, ``"90s"`` or ``"1h30m"`` into seconds.

    A bare number is taken as seconds. Raises :class:`FalconConfigError`
    for anything else.
    """
    value = text.strip()
    if not value:
        raise FalconConfigError("empty duration")
    try:
        seconds = float(value)
    except ValueError:
        pass
    else:
        if not math.isfinite(seconds):
            raise FalconConfigError(f"invalid duration {text!r}")
        return seconds

    total = 0.0
    pos = 0
    for match in _DURATION_PART.finditer(value):
        if match.start() != pos:
            break
        total += float(match.group(1)) * _DURATION_UNITS[match.group(2)]
        pos = match.end()
    if pos != len(value):
        raise FalconConfigError(f"invalid duration {text!r}")
    return total


@dataclasses.dataclass(frozen=True)
class FalconConfig:
    """Monitor configuration.

    Parameters
    ----------
    client_id : str
        OAuth2 API client ID.
    client_secret : str
        OAuth2 API client secret.
    base_url : str
        Falcon API base URL. Defaults to the US-2 cloud.
    interval : float
        Seconds to sleep between inventory checks.
    request_timeout : float
        Hard per-attempt timeout in seconds for one inventory fetch,
        token exchange included. Independent of ``interval``.
    quiet : bool
        Suppress the log line for cycles where the count did not change.
    user_agent : str
        Client identifier sent as ``User-Agent`` and ``CrowdStrike-SDK``.
    token_expiry_margin : float
        Seconds before token expiry at which it is refreshed.
    """

    client_id: str
    client_secret: str
    base_url: str = BASE_URL
    interval: float = DEFAULT_INTERVAL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    quiet: bool = False
    user_agent: str = CLIENT_IDENTIFIER
    token_expiry_margin: float = TOKEN_EXPIRY_MARGIN

    @property
    def token_url(self) -> str:
        return f"{self.base_url.rstrip('/')}{TOKEN_ENDPOINT}"

    @property
    def devices_scroll_url(self) -> str:
        return f"{self.base_url.rstrip('/')}{DEVICES_SCROLL_ENDPOINT}"

    def validate(self) -> FalconConfig:
        """Check the configuration, returning ``self`` on success.

        Raises
        ------
        FalconConfigError
            Credentials are missing, the base URL is not an absolute
            http(s) URL, or a duration is out of range.
        """
        missing = [name for name in ("client_id", "client_secret") if not getattr(self, name)]
        if missing:
            raise FalconConfigError(f"missing required configuration: {', '.join(missing)}")

        parts = urlsplit(self.base_url)
        if parts.scheme not in {"http", "https"} or not parts.netloc:
            raise FalconConfigError(f"invalid api base url {self.base_url!r}")

        if not math.isfinite(self.interval) or self.interval < 0:
            raise FalconConfigError(f"interval must be a finite non-negative number, got {self.interval}")
        if not math.isfinite(self.request_timeout) or self.request_timeout <= 0:
            raise FalconConfigError(f"request timeout must be a finite positive number, got {self.request_timeout}")
        return self

    @classmethod
    def from_env(cls, **overrides: Any) -> FalconConfig:
        """Create configuration from environment variables.

        Reads ``FALCON_CLIENT_ID``, ``FALCON_CLIENT_SECRET`` and the optional
        ``FALCON_API_BASE``, ``FALCON_INTERVAL``, ``FALCON_REQUEST_TIMEOUT``,
        ``FALCON_QUIET`` and ``FALCON_USER_AGENT``. Explicit keyword
        arguments override environment values.

        The result is not validated; call :meth:`validate`.
        """
        env = os.environ
        # Unset flags arrive as None and must not mask the environment
        overrides = {k: v for k, v in overrides.items() if v is not None}

        _ENV_CONFIG_MAP = {
            "FALCON_CLIENT_ID": "client_id",
            "FALCON_CLIENT_SECRET": "client_secret",
            "FALCON_API_BASE": "base_url",
            "FALCON_USER_AGENT": "user_agent",
        }
        config_kwargs: dict[str, Any] = {"client_id": "", "client_secret": ""}
        for env_key, field_name in _ENV_CONFIG_MAP.items():
            val = env.get(env_key)
            if val is not None:
                config_kwargs[field_name] = val

        # Durations accept the same syntax as the command line flags
        interval_env = env.get("FALCON_INTERVAL")
        if interval_env is not None and "interval" not in overrides:
            config_kwargs["interval"] = parse_duration(interval_env)

        timeout_env = env.get("FALCON_REQUEST_TIMEOUT")
        if timeout_env is not None and "request_timeout" not in overrides:
            config_kwargs["request_timeout"] = parse_duration(timeout_env)

        if "quiet" not in overrides:
            config_kwargs["quiet"] = _env_bool(env.get("FALCON_QUIET"), False)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
