"""Custom exception hierarchy for falconwatch."""

from __future__ import annotations


class FalconError(Exception):
    """Base exception for all falconwatch errors."""


class FalconConfigError(FalconError):
    """Invalid or missing configuration."""


class FalconTransportError(FalconError):
    """HTTP-level failure (network, timeout, non-200).

    ``body`` holds the raw response text when one was received so callers
    can log it for diagnostics.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
        body: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        self.body = body
        super().__init__(message)


class FalconDecodeError(FalconTransportError):
    """Response body is not the JSON document the endpoint promises."""


class FalconTokenRejectedError(FalconTransportError):
    """Bearer token rejected by a data endpoint (HTTP 401).

    The client catches this internally to re-run the token exchange and
    retry the call once.
    """


class FalconAuthenticationError(FalconError):
    """Client-credentials token exchange failed."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: str = "",
    ) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(message)
