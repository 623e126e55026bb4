"""
Run a headless dashboard session and log every view model update.

Usage:
    python -m response_team --team-id TEAM [--api URL] [--position LAT,LNG] [--interval SECONDS]

Examples:
    python -m response_team --team-id 42
    python -m response_team --team-id 42 --position 1.0,2.0
    python -m response_team --team-id 42 --directions 0    # route to the first report once known
"""
import argparse
import asyncio
import logging
import sys

import voluptuous as vol

from .api.positions import StaticPositionSource
from .config import load_config_from_env
from .models import Coordinate
from .requests import check_api_availability
from .session import DashboardSession
from .view_model import DashboardData

_LOGGER = logging.getLogger(__name__)


def parse_position(value: str) -> Coordinate:
    try:
        lat, lng = (float(part) for part in value.split(","))
        return Coordinate(lat, lng)
    except ValueError as e:
        raise argparse.ArgumentTypeError(f"expected LAT,LNG: {e}") from e


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="response_team",
        description="Run the response team dashboard core without a UI",
    )
    parser.add_argument('--team-id', help='Team identifier (default: RESPONSE_TEAM_TEAM_ID)')
    parser.add_argument('--api', dest='api_base_url', help='Dashboard backend base URL')
    parser.add_argument('--interval', dest='poll_interval', type=float, help='Seconds between refreshes (default: 10)')
    parser.add_argument(
        '--position',
        type=parse_position,
        default=None,
        help='Use a fixed LAT,LNG instead of the geolocation endpoint',
    )
    parser.add_argument(
        '--directions',
        type=int,
        default=None,
        metavar='INDEX',
        help='Request directions to the report at INDEX once position and reports are known',
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Enable debug logging')
    return parser.parse_args(argv)


def log_snapshot(data: DashboardData) -> None:
    _LOGGER.info(
        "position=%s reports=%s notifications=%s route_points=%s route_details=%s",
        data.position, len(data.reports), len(data.notifications),
        len(data.active_route), data.route_details,
    )


async def run(args) -> int:
    try:
        config = load_config_from_env(
            team_id=args.team_id,
            api_base_url=args.api_base_url,
            poll_interval=args.poll_interval,
        )
    except vol.Invalid as e:
        _LOGGER.error("Invalid configuration: %s", e)
        return 2

    if not await check_api_availability(config.api_base_url):
        _LOGGER.warning("Backend %s is not reachable, continuing anyway", config.api_base_url)

    position_source = StaticPositionSource(args.position) if args.position else None
    session = DashboardSession(config, position_source=position_source)
    session.view_model.add_listener(log_snapshot)

    directions_requested = False

    def maybe_request_directions(data: DashboardData) -> None:
        nonlocal directions_requested
        if directions_requested or args.directions is None:
            return
        if data.position is not None and len(data.reports) > args.directions:
            directions_requested = True
            session.request_directions(args.directions)

    session.view_model.add_listener(maybe_request_directions)

    # Runs until interrupted; leaving the block shuts the session down
    async with session:
        await asyncio.Event().wait()
    return 0


def main(argv=None) -> int:
    """Main entry point."""
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return asyncio.run(run(args))
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
