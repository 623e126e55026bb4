"""
SyncLoop: the periodic position + confirmed-reports refresh.

Every tick, in order:
  1. acquire the team position and, on success, store it and forward it to the
     location sink as a detached task;
  2. fetch confirmed reports and, on success, replace them wholesale.

Step 2 runs whether or not step 1 succeeded. Failures are logged and never
stop the timer; the period is fixed (no backoff).
"""
from __future__ import annotations

import asyncio
import enum
import logging
from typing import Awaitable, Callable

from .api.positions import PositionSource
from .api.reports import RemoteReportStore
from .const import POLL_INTERVAL
from .errors import LocationSinkError, LocationUnavailable, ReportFetchError
from .models import Coordinate
from .view_model import ViewModel

_LOGGER = logging.getLogger(__name__)

LocationSink = Callable[[str, Coordinate], Awaitable[None]]


class SyncState(str, enum.Enum):
    IDLE = "idle"
    POLLING = "polling"
    SUCCESS = "success"
    PARTIAL_FAILURE = "partial_failure"


class SyncLoop:
    """Drives the fixed-period refresh of position and reports for one session."""

    def __init__(
        self,
        view_model: ViewModel,
        position_source: PositionSource,
        report_store: RemoteReportStore,
        team_id: str,
        location_sink: LocationSink | None = None,
        poll_interval: float = POLL_INTERVAL,
    ) -> None:
        self.view_model = view_model
        self.position_source = position_source
        self.report_store = report_store
        self.team_id = team_id
        self.location_sink = location_sink
        self.poll_interval = poll_interval

        self.state = SyncState.IDLE
        self.last_state: SyncState | None = None
        self.tick_count = 0

        self._task: asyncio.Task | None = None
        # Detached location-sink writes; never awaited by a tick
        self._sink_tasks: set[asyncio.Task] = set()

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> asyncio.Task:
        """Run the first tick now and then every poll_interval seconds. Returns the task handle."""
        if self.running:
            return self._task
        self._task = asyncio.ensure_future(self._run())
        _LOGGER.debug("Sync loop started for team %s (every %ss)", self.team_id, self.poll_interval)
        return self._task

    async def stop(self) -> None:
        """Cancel the timer and any pending location writes. No tick runs afterwards."""
        tasks = list(self._sink_tasks)
        if self._task is not None:
            tasks.append(self._task)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        self._task = None
        self._sink_tasks.clear()
        self.state = SyncState.IDLE
        _LOGGER.debug("Sync loop stopped for team %s", self.team_id)

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        while True:
            started = loop.time()
            try:
                await self.tick()
            except Exception:  # noqa: BLE001
                _LOGGER.exception("Unexpected error during sync tick")
                self.state = SyncState.IDLE
                self.last_state = SyncState.PARTIAL_FAILURE
            # Fixed period measured from the start of the tick
            await asyncio.sleep(max(0.0, self.poll_interval - (loop.time() - started)))

    # ------------------------------------------------------------------
    # One tick
    # ------------------------------------------------------------------

    async def tick(self) -> SyncState:
        """Run a single refresh and return its outcome."""
        self.state = SyncState.POLLING
        self.tick_count += 1
        failed = False

        try:
            position = await self.position_source.acquire()
        except LocationUnavailable as exc:
            _LOGGER.warning("Failed to acquire position: %s", exc)
            failed = True
        except Exception:  # noqa: BLE001
            _LOGGER.exception("Unexpected error while acquiring position")
            failed = True
        else:
            if self.view_model.update(position=position):
                self._forward_location(position)

        try:
            reports = await self.report_store.fetch_confirmed()
        except ReportFetchError as exc:
            _LOGGER.warning("Failed to fetch confirmed reports: %s", exc)
            failed = True
        else:
            self.view_model.update(reports=tuple(reports))

        self.last_state = SyncState.PARTIAL_FAILURE if failed else SyncState.SUCCESS
        self.state = SyncState.IDLE
        _LOGGER.debug("Tick %s finished: %s", self.tick_count, self.last_state.value)
        return self.last_state

    def _forward_location(self, position: Coordinate) -> None:
        if self.location_sink is None:
            return
        task = asyncio.ensure_future(self._send_location(position))
        self._sink_tasks.add(task)
        task.add_done_callback(self._sink_tasks.discard)

    async def _send_location(self, position: Coordinate) -> None:
        try:
            await self.location_sink(self.team_id, position)
        except LocationSinkError as exc:
            _LOGGER.warning("Failed to forward team location: %s", exc)
