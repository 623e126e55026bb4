"""
Team position handling.

Responsible for:
- Acquiring the device's current position fix
- Forwarding the team's position to the backend location sink
"""
from __future__ import annotations

import asyncio
import logging

import aiohttp

from response_team.const import POSITION_TIMEOUT, UPDATE_LOCATION_PATH
from response_team.errors import LocationSinkError, LocationUnavailable
from response_team.models import Coordinate
from response_team.requests import ApiResponseError, make_request

_LOGGER = logging.getLogger(__name__)


class PositionSource:
    """Interface for anything that can produce a position fix."""

    async def acquire(self) -> Coordinate:
        """
        Return the current position at the best available accuracy.

        Raises LocationUnavailable when there is no fix. Never retries.
        """
        raise NotImplementedError


class StaticPositionSource(PositionSource):
    """Position source returning a fixed coordinate (manual operation)."""

    def __init__(self, position: Coordinate | None = None) -> None:
        self.position = position

    async def acquire(self) -> Coordinate:
        if self.position is None:
            raise LocationUnavailable("No static position configured")
        return self.position


class HttpPositionSource(PositionSource):
    """
    Reads the fix from a local geolocation endpoint.

    Expected response: {"latitude": .., "longitude": .., "accuracy": ..}
    A response without coordinates means the device has no fix.
    """

    def __init__(self, url: str, timeout: float = POSITION_TIMEOUT) -> None:
        self.url = url
        self.timeout = timeout

    async def acquire(self) -> Coordinate:
        params = {"high_accuracy": 1}
        try:
            raw_json = await make_request("GET", self.url, params=params, timeout=self.timeout, max_attempts=1)
        except (asyncio.TimeoutError, TimeoutError) as e:
            raise LocationUnavailable(f"Timed out after {self.timeout}s waiting for a position fix") from e
        except ApiResponseError as e:
            # Permission denied and similar capability errors come back as JSON errors
            raise LocationUnavailable(f"Position capability refused: {e.error_json}") from e
        except (aiohttp.ClientError, ValueError) as e:
            raise LocationUnavailable(f"Position capability unreachable: {e}") from e

        if not isinstance(raw_json, dict) or raw_json.get("latitude") is None or raw_json.get("longitude") is None:
            raise LocationUnavailable(f"Device reported no fix: {raw_json}")
        try:
            position = Coordinate(raw_json["latitude"], raw_json["longitude"])
        except (TypeError, ValueError) as e:
            raise LocationUnavailable(f"Invalid position fix: {e}") from e
        _LOGGER.debug("Position fix %s (accuracy %s m)", position, raw_json.get("accuracy"))
        return position


async def update_location(
    api_base_url: str, team_id: str, position: Coordinate, max_attempts: int = 1
) -> None:
    """
    POST the team's position to the backend.

    Raises LocationSinkError on any failure.

    Corresponding CURL command:
    curl -X 'POST' '<api>/api/updateLocation' \
      -d '{"latitude": <lat>, "longitude": <lng>, "teamId": "<id>"}'
    """
    url = api_base_url + UPDATE_LOCATION_PATH
    payload = {
        "latitude": position.latitude,
        "longitude": position.longitude,
        "teamId": team_id,
    }
    try:
        await make_request("POST", url, payload=payload, max_attempts=max_attempts)
    except (asyncio.TimeoutError, TimeoutError) as e:
        raise LocationSinkError("Timeout while updating team location") from e
    except (ApiResponseError, aiohttp.ClientError, ValueError) as e:
        raise LocationSinkError(f"Error while updating team location: {e}") from e
    _LOGGER.debug("Location of team %s updated to %s", team_id, position)
