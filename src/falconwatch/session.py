"""Session state management for authenticated API calls."""

from __future__ import annotations

import time

from pydantic import BaseModel, ConfigDict, Field

from falconwatch._constants import DEFAULT_TOKEN_TTL, TOKEN_EXPIRY_MARGIN


class Session(BaseModel):
    """Bearer token obtained from one client-credentials exchange.

    Parameters
    ----------
    access_token : str
        Token sent in the ``Authorization`` header.
    created_at : float
        Monotonic timestamp (``time.monotonic()``) when the token was
        issued. Defaults to *now* if not provided.
    ttl : float
        Lifetime in seconds reported by the token endpoint.
    expiry_margin : float
        The session counts as expired this many seconds before ``ttl``
        runs out, so a token is never sent just as it lapses.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        validate_default=True,
        str_strip_whitespace=True,
    )

    access_token: str = Field(min_length=1, repr=False)
    created_at: float = Field(default_factory=time.monotonic)
    ttl: float = DEFAULT_TOKEN_TTL
    expiry_margin: float = TOKEN_EXPIRY_MARGIN

    def authorization_header(self) -> dict[str, str]:
        return {"authorization": f"Bearer {self.access_token}"}

    @property
    def is_expired(self) -> bool:
        """Whether the token is within ``expiry_margin`` of its TTL."""
        return self.age >= self.ttl - self.expiry_margin

    @property
    def age(self) -> float:
        """Seconds since the token was issued."""
        return time.monotonic() - self.created_at
