"""
DashboardData: immutable snapshot of everything presentation consumes.
ViewModel: the owner of the current snapshot for one team session.

No network dependencies here.
"""
from __future__ import annotations

import dataclasses
import logging
from typing import Callable

from .models import Coordinate, Notification, Report, RouteDetails

_LOGGER = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class DashboardData:
    """
    Typed, copy-on-write snapshot of the dashboard state.

    Always replace via dataclasses.replace(), never mutate in place.
    """

    # Last successful position fix; None until the first one
    position: Coordinate | None = None

    # Confirmed reports, emergencies first; replaced wholesale on each fetch
    reports: tuple[Report, ...] = ()

    # Decoded polyline of the most recently computed route
    active_route: tuple[Coordinate, ...] = ()

    # report index → distance / ETA of the last route computed for it
    route_details: dict[int, RouteDetails] = dataclasses.field(default_factory=dict)

    notifications: tuple[Notification, ...] = ()

    # Whether the notification list is currently shown
    notifications_open: bool = False


class ViewModel:
    """
    Holds the current DashboardData for one session and pushes every new
    snapshot to registered listeners.

    Once deactivated (session teardown) all further updates are dropped.
    """

    def __init__(self, data: DashboardData | None = None) -> None:
        self.data = data or DashboardData()
        self._active = True
        self._listeners: dict[object, Callable[[DashboardData], None]] = {}

    @property
    def active(self) -> bool:
        return self._active

    def deactivate(self) -> None:
        """Stop accepting updates. Irreversible."""
        self._active = False
        self._listeners.clear()

    def add_listener(self, listener: Callable[[DashboardData], None]) -> Callable[[], None]:
        """Register listener; returns a callable that removes it again."""
        token = object()
        self._listeners[token] = listener

        def remove_listener() -> None:
            self._listeners.pop(token, None)

        return remove_listener

    def set_updated_data(self, data: DashboardData) -> bool:
        """Store data as the current snapshot. Returns False if the session has ended."""
        if not self._active:
            _LOGGER.debug("Dropping view model update after teardown")
            return False
        self.data = data
        for listener in list(self._listeners.values()):
            try:
                listener(data)
            except Exception:  # noqa: BLE001
                _LOGGER.exception("Error in view model listener %s", listener)
        return True

    def update(self, **changes) -> bool:
        """Replace the given fields of the current snapshot."""
        if not self._active:
            _LOGGER.debug("Dropping view model update after teardown: %s", sorted(changes))
            return False
        return self.set_updated_data(dataclasses.replace(self.data, **changes))
