"""
Team notification fetching from the dashboard backend.
"""
from __future__ import annotations

import asyncio
import logging
from urllib.parse import quote

import aiohttp

from response_team.const import NOTIFICATIONS_PATH, REQUEST_ATTEMPTS
from response_team.errors import NotificationFetchError
from response_team.models import Notification
from response_team.requests import ApiResponseError, make_request

_LOGGER = logging.getLogger(__name__)


class RemoteNotificationStore:
    """Fetches pending notifications for a team."""

    def __init__(self, api_base_url: str, max_attempts: int = REQUEST_ATTEMPTS) -> None:
        self.api_base_url = api_base_url
        self.max_attempts = max_attempts

    async def fetch_for(self, team_id: str) -> list[Notification]:
        """
        Return the pending notifications of team_id.

        Raises NotificationFetchError on network or parse failure.

        Corresponding CURL command:
        curl -X 'GET' '<api>/api/notifications/<teamId>'
        """
        url = self.api_base_url + NOTIFICATIONS_PATH + quote(str(team_id), safe="")
        try:
            raw_json = await make_request("GET", url, max_attempts=self.max_attempts)
        except (asyncio.TimeoutError, TimeoutError) as e:
            raise NotificationFetchError("Timeout while getting notifications") from e
        except (ApiResponseError, aiohttp.ClientError, ValueError) as e:
            raise NotificationFetchError(f"Error while getting notifications: {e}") from e

        if not isinstance(raw_json, dict) or not isinstance(raw_json.get("notifications"), list):
            raise NotificationFetchError(f"Unexpected response format in notifications: {raw_json!r}")
        try:
            notifications = [Notification.from_api(n) for n in raw_json["notifications"]]
        except (KeyError, TypeError) as e:
            raise NotificationFetchError(f"Malformed notification: {e}") from e

        _LOGGER.debug("Fetched %s notifications for team %s", len(notifications), team_id)
        return notifications
