"""Device count watermark and poll outcomes.

The watermark is a ratchet: it only ever moves up, to the highest device
count seen so far. A count below it is reported as missing devices without
lowering it, so a transient dip keeps being reported until the devices
come back.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum

from falconwatch.exceptions import FalconError


class OutcomeKind(StrEnum):
    SAME = "same"
    INCREASED = "increased"
    DECREASED = "decreased"
    FETCH_ERROR = "fetch_error"


@dataclass(frozen=True, slots=True)
class PollOutcome:
    """Result of one fetch cycle.

    ``value`` is the new maximum for ``INCREASED``, the number of missing
    devices for ``DECREASED`` and 0 otherwise. ``body`` is the response text
    kept for diagnostics, when there was one.
    """

    kind: OutcomeKind
    value: int = 0
    body: str = ""
    error: FalconError | None = None

    @classmethod
    def same(cls, body: str = "") -> PollOutcome:
        return cls(OutcomeKind.SAME, body=body)

    @classmethod
    def increased(cls, new_max: int, body: str = "") -> PollOutcome:
        return cls(OutcomeKind.INCREASED, new_max, body=body)

    @classmethod
    def decreased(cls, deficit: int, body: str = "") -> PollOutcome:
        return cls(OutcomeKind.DECREASED, deficit, body=body)

    @classmethod
    def fetch_error(cls, error: FalconError) -> PollOutcome:
        return cls(OutcomeKind.FETCH_ERROR, body=getattr(error, "body", ""), error=error)

    @property
    def is_anomaly(self) -> bool:
        return self.kind in (OutcomeKind.INCREASED, OutcomeKind.DECREASED)


class Watermark:
    """Highest device count observed since creation.

    Starts at ``initial`` (0 by default). Note that a first observation of
    0 devices yields ``SAME`` rather than a baseline event.
    """

    def __init__(self, initial: int = 0) -> None:
        if initial < 0:
            raise ValueError(f"initial watermark must be non-negative, got {initial}")
        self._max_devices = initial

    @property
    def max_devices(self) -> int:
        return self._max_devices

    def evaluate(self, count: int, *, body: str = "") -> PollOutcome:
        """Classify *count* against the watermark, raising it if exceeded."""
        if count < 0:
            raise ValueError(f"device count must be non-negative, got {count}")
        if count < self._max_devices:
            return PollOutcome.decreased(self._max_devices - count, body)
        if count > self._max_devices:
            self._max_devices = count
            return PollOutcome.increased(count, body)
        return PollOutcome.same(body)

    def __repr__(self) -> str:
        return f"Watermark(max_devices={self._max_devices})"
