"""Fixed-interval poll loop driving the inventory fetch and the watermark."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from falconwatch.exceptions import FalconError, FalconTransportError
from falconwatch.models.devices import DeviceScroll
from falconwatch.monitor import OutcomeKind, PollOutcome, Watermark

_logger = logging.getLogger(__name__)

Fetcher = Callable[[], Awaitable[DeviceScroll]]


@dataclass
class PollStats:
    cycles: int = 0
    outcomes: dict[OutcomeKind, int] = field(default_factory=dict)

    def record(self, outcome: PollOutcome) -> None:
        self.cycles += 1
        self.outcomes[outcome.kind] = self.outcomes.get(outcome.kind, 0) + 1

    def summary(self) -> str:
        parts = ", ".join(f"{kind}={self.outcomes.get(kind, 0)}" for kind in OutcomeKind)
        return f"{self.cycles} cycles ({parts})"


class InventoryPoller:
    """Fetch the device inventory every ``interval`` seconds and report changes.

    Cycles run strictly one after another on the calling task. Each fetch
    gets its own ``fetch_timeout``; a fetch that fails or times out is logged
    and retried on the next cycle without touching the watermark.

    Parameters
    ----------
    fetch
        Coroutine function returning the current :class:`DeviceScroll`,
        typically :meth:`FalconClient.get_device_scroll`.
    interval
        Seconds to wait between the end of one cycle and the next.
    fetch_timeout
        Seconds allowed for one fetch, or ``None`` for no limit.
    quiet
        Skip the log line for ``SAME`` cycles. Anomalies and errors are
        always logged.
    watermark
        State to evaluate counts against; a fresh one by default.
    """

    def __init__(
        self,
        fetch: Fetcher,
        *,
        interval: float,
        fetch_timeout: float | None = None,
        quiet: bool = False,
        watermark: Watermark | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self._fetch = fetch
        self._interval = interval
        self._fetch_timeout = fetch_timeout
        self._quiet = quiet
        self.watermark = watermark if watermark is not None else Watermark()
        self.stats = PollStats()
        self._logger = logger or _logger

    async def poll_once(self) -> PollOutcome:
        """Run one fetch-evaluate-log cycle and return its outcome."""
        try:
            async with asyncio.timeout(self._fetch_timeout):
                scroll = await self._fetch()
        except TimeoutError:
            limit = f" after {self._fetch_timeout:g}s" if self._fetch_timeout is not None else ""
            outcome = PollOutcome.fetch_error(FalconTransportError(f"fetch timed out{limit}"))
        except FalconError as exc:
            outcome = PollOutcome.fetch_error(exc)
        else:
            outcome = self.watermark.evaluate(scroll.count, body=scroll.body)

        self.stats.record(outcome)
        self._log_outcome(outcome)
        return outcome

    def _log_outcome(self, outcome: PollOutcome) -> None:
        if outcome.kind is OutcomeKind.FETCH_ERROR:
            self._logger.error("%s", outcome.error)
        elif outcome.kind is OutcomeKind.INCREASED:
            self._logger.warning("new max: %d devices  body=%r", outcome.value, outcome.body)
        elif outcome.kind is OutcomeKind.DECREASED:
            self._logger.warning("missing %d devices! body=%r", outcome.value, outcome.body)
        elif not self._quiet:
            self._logger.info("same")

    async def run(self, stop: asyncio.Event | None = None) -> None:
        """Poll until *stop* is set; forever when no event is given.

        The wait between cycles ends early once *stop* is set, so shutdown
        never waits out a full interval. A cycle already in progress is
        allowed to finish.
        """
        if stop is None:
            stop = asyncio.Event()
        while not stop.is_set():
            await self.poll_once()
            if await self._wait(stop):
                break
        self._logger.info("stopped after %s", self.stats.summary())

    async def _wait(self, stop: asyncio.Event) -> bool:
        """Sleep for the interval; ``True`` if *stop* was set meanwhile."""
        try:
            await asyncio.wait_for(stop.wait(), self._interval)
        except TimeoutError:
            return False
        return True
