"""
DashboardSession: one logged-in team's dashboard core.

Responsibilities:
- Own the ViewModel for the lifetime of the session.
- Load team notifications once at start.
- Run the SyncLoop (position + reports) until teardown.
- Serve directions requests through the RoutingSession.
- Tear everything down so that nothing mutates the view model afterwards.
"""
from __future__ import annotations

import asyncio
import functools
import inspect
import logging
from typing import Any, Protocol

from .api.directions import DirectionsProvider
from .api.notifications import RemoteNotificationStore
from .api.positions import HttpPositionSource, PositionSource, update_location
from .api.reports import RemoteReportStore
from .config import DashboardConfig
from .errors import NotificationFetchError
from .routing import RoutingSession
from .sync_loop import SyncLoop
from .view_model import ViewModel

_LOGGER = logging.getLogger(__name__)


class TeamIdentity(Protocol):
    """Session identity provided by the authentication layer."""

    team_id: str

    def logout(self) -> Any:
        """End the team's login. May return an awaitable."""


class StaticIdentity:
    """Identity with a fixed team id; logout only records that it happened."""

    def __init__(self, team_id: str) -> None:
        self.team_id = team_id
        self.logged_out = False

    def logout(self) -> None:
        _LOGGER.info("Team %s logged out", self.team_id)
        self.logged_out = True


class DashboardSession:
    """
    Wires the view model, refresh loop, routing and notifications for one team.

    Use as an async context manager, or call start() and shutdown() directly.
    A session cannot be restarted once shut down.
    """

    def __init__(
        self,
        config: DashboardConfig,
        identity: TeamIdentity | None = None,
        *,
        position_source: PositionSource | None = None,
        report_store: RemoteReportStore | None = None,
        notification_store: RemoteNotificationStore | None = None,
        directions: DirectionsProvider | None = None,
    ) -> None:
        self.config = config
        self.identity = identity or StaticIdentity(config.team_id)
        self.view_model = ViewModel()

        self.notification_store = notification_store or RemoteNotificationStore(
            config.api_base_url, max_attempts=config.request_attempts
        )
        self.sync_loop = SyncLoop(
            self.view_model,
            position_source or HttpPositionSource(config.position_url, timeout=config.position_timeout),
            report_store or RemoteReportStore(config.api_base_url, max_attempts=config.request_attempts),
            team_id=self.team_id,
            location_sink=functools.partial(update_location, config.api_base_url),
            poll_interval=config.poll_interval,
        )
        self.routing = RoutingSession(
            self.view_model,
            directions or DirectionsProvider(
                config.directions_api_key,
                base_url=config.directions_base_url,
                timeout=config.directions_timeout,
            ),
        )

        self._route_tasks: set[asyncio.Task] = set()
        self._started = False

    @property
    def team_id(self) -> str:
        return self.identity.team_id

    @property
    def active(self) -> bool:
        return self.view_model.active

    async def __aenter__(self) -> DashboardSession:
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.shutdown()

    # ------------------------------------------------------------------
    # Start
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Start the refresh loop and load notifications once."""
        if self._started:
            return
        if not self.active:
            raise RuntimeError("Cannot restart a dashboard session after shutdown")
        self._started = True
        self.sync_loop.start()
        await self._load_notifications()

    async def _load_notifications(self) -> None:
        if not self.team_id:
            return
        try:
            notifications = await self.notification_store.fetch_for(self.team_id)
        except NotificationFetchError as exc:
            _LOGGER.warning("Failed to fetch notifications for team %s: %s", self.team_id, exc)
            return
        self.view_model.update(notifications=tuple(notifications))

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------

    def request_directions(self, index: int) -> asyncio.Task:
        """
        Start a directions request for the report at index.

        Returns the request task; awaiting it is optional. Concurrent requests
        are allowed and the last one to finish owns the displayed route.
        """
        task = asyncio.ensure_future(self.routing.request_directions(index))
        self._route_tasks.add(task)
        task.add_done_callback(self._route_tasks.discard)
        task.add_done_callback(functools.partial(self._log_route_failure, index))
        return task

    @staticmethod
    def _log_route_failure(index: int, task: asyncio.Task) -> None:
        if task.cancelled() or task.exception() is None:
            return
        _LOGGER.error(
            "Directions request for report %s failed", index, exc_info=task.exception()
        )

    def open_notifications(self) -> None:
        self.view_model.update(notifications_open=True)

    def close_notifications(self) -> None:
        self.view_model.update(notifications_open=False)

    def clear_notifications(self) -> None:
        """Drop all notifications and close the notification list."""
        self.view_model.update(notifications=(), notifications_open=False)

    # ------------------------------------------------------------------
    # Teardown
    # ------------------------------------------------------------------

    async def shutdown(self) -> None:
        """
        End the session: no view model mutation lands after this returns.

        In-flight directions requests are left to finish; their results are dropped.
        """
        self.view_model.deactivate()
        await self.sync_loop.stop()
        _LOGGER.debug(
            "Dashboard session for team %s shut down (%s route requests still in flight)",
            self.team_id, len(self._route_tasks),
        )

    async def logout(self) -> None:
        """Shut the session down, then log the team out."""
        await self.shutdown()
        result = self.identity.logout()
        if inspect.isawaitable(result):
            await result
