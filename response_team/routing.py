"""
RoutingSession: on-demand route from the team position to a selected report.

Only one route is displayed at a time (the single active_route slot); distance
and ETA accumulate per report index. Overlapping requests are not cancelled:
whichever completes last owns active_route.
"""
from __future__ import annotations

import logging

from .api.directions import DirectionsProvider
from .const import DIRECTIONS_PROFILE
from .errors import RoutingUnavailable
from .models import RouteResult
from .view_model import ViewModel

_LOGGER = logging.getLogger(__name__)


class RoutingSession:
    """Fetches routes to reports and publishes them into the view model."""

    def __init__(
        self,
        view_model: ViewModel,
        directions: DirectionsProvider,
        profile: str = DIRECTIONS_PROFILE,
    ) -> None:
        self.view_model = view_model
        self.directions = directions
        self.profile = profile

    async def request_directions(self, index: int) -> RouteResult | None:
        """
        Route from the current position to reports[index] and publish the result.

        Returns the RouteResult when it was applied, None when the request was
        a no-op (no position, unknown index, routing failure, session ended).
        """
        data = self.view_model.data
        if data.position is None:
            _LOGGER.debug("Directions for report %s requested without a position fix", index)
            return None
        if not 0 <= index < len(data.reports):
            _LOGGER.warning("Directions requested for unknown report index %s", index)
            return None

        origin = data.position
        report = data.reports[index]
        try:
            result = await self.directions.route(origin, report.location, self.profile)
        except RoutingUnavailable as exc:
            _LOGGER.warning("Failed to get directions to report %s (%s): %s", index, report.name, exc)
            return None

        # Re-read at completion: other requests and ticks may have landed meanwhile
        route_details = dict(self.view_model.data.route_details)
        route_details[index] = result.details
        if not self.view_model.update(active_route=result.polyline, route_details=route_details):
            return None
        return result
