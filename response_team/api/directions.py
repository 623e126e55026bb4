"""
Driving directions from the external routing service.

Responsible for:
- Requesting a route between two coordinates
- Decoding the encoded polyline geometry
- Converting provider units (meters, seconds) into display units
"""
from __future__ import annotations

import asyncio
import logging

import aiohttp

from response_team.const import (
    DIRECTIONS_BASE_URL,
    DIRECTIONS_PROFILE,
    DIRECTIONS_TIMEOUT,
    POLYLINE_PRECISION,
)
from response_team.errors import RoutingUnavailable
from response_team.models import Coordinate, RouteResult
from response_team.requests import ApiResponseError, make_request

_LOGGER = logging.getLogger(__name__)


def decode_polyline(encoded: str, precision: int = POLYLINE_PRECISION) -> list[Coordinate]:
    """
    Decode an encoded polyline string into a list of coordinates.

    Raises ValueError on truncated input or out-of-range points.
    """
    coordinates: list[Coordinate] = []
    index = 0
    lat = 0
    lng = 0
    factor = 10 ** precision

    while index < len(encoded):
        lat_change, index = _decode_value(encoded, index)
        lng_change, index = _decode_value(encoded, index)
        lat += lat_change
        lng += lng_change
        coordinates.append(Coordinate(round(lat / factor, precision), round(lng / factor, precision)))

    return coordinates


def _decode_value(encoded: str, index: int) -> tuple[int, int]:
    result = 0
    shift = 0

    while True:
        if index >= len(encoded):
            raise ValueError("Invalid polyline: buffer exhausted.")
        b = ord(encoded[index]) - 63
        index += 1
        result |= (b & 0x1F) << shift
        shift += 5
        if b < 0x20:
            break

    delta = ~(result >> 1) if (result & 1) else (result >> 1)
    return delta, index


class DirectionsProvider:
    """Client for the directions endpoint of the routing service."""

    def __init__(
        self,
        api_key: str,
        base_url: str = DIRECTIONS_BASE_URL,
        timeout: float = DIRECTIONS_TIMEOUT,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url
        self.timeout = timeout

    async def route(
        self, origin: Coordinate, destination: Coordinate, profile: str = DIRECTIONS_PROFILE
    ) -> RouteResult:
        """
        Compute a route from origin to destination. Only the first route is used.

        Raises RoutingUnavailable when no route comes back or the call fails.

        Example request:
        <base>/directions/driving/13.41,52.52;13.45,52.5?key=<key>&steps=true&geometries=polyline&overview=full
        """
        url = f"{self.base_url}/directions/{profile}/{origin.as_lng_lat()};{destination.as_lng_lat()}"
        params = {
            "key": self.api_key,
            "steps": "true",
            "geometries": "polyline",
            "overview": "full",
        }
        try:
            raw_json = await asyncio.wait_for(
                make_request("GET", url, params=params, timeout=self.timeout, max_attempts=1),
                timeout=self.timeout,
            )
        except (asyncio.TimeoutError, TimeoutError) as e:
            raise RoutingUnavailable(f"Timeout after {self.timeout}s while getting directions") from e
        except (ApiResponseError, aiohttp.ClientError, ValueError) as e:
            raise RoutingUnavailable(f"Error while getting directions: {e}") from e

        routes = raw_json.get("routes") if isinstance(raw_json, dict) else None
        if not isinstance(routes, list) or not routes:
            raise RoutingUnavailable(f"No route between {origin} and {destination}")

        first = routes[0]
        try:
            polyline = decode_polyline(first["geometry"])
            result = RouteResult.from_provider_units(
                tuple(polyline), float(first["distance"]), float(first["duration"])
            )
        except (KeyError, TypeError, ValueError) as e:
            raise RoutingUnavailable(f"Malformed route in directions response: {e}") from e

        _LOGGER.debug(
            "Route %s -> %s: %s km, %s min, %s points",
            origin, destination, result.distance_km, result.duration_minutes, len(polyline),
        )
        return result
