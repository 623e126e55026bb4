"""
Confirmed report fetching from the dashboard backend.
"""
from __future__ import annotations

import asyncio
import logging

import aiohttp

from response_team.const import CONFIRMED_REPORTS_PATH, REQUEST_ATTEMPTS
from response_team.errors import ReportFetchError
from response_team.models import Report, ReportKind
from response_team.requests import ApiResponseError, make_request

_LOGGER = logging.getLogger(__name__)

# Upstream collection name → kind, in the order they are concatenated
_COLLECTIONS: tuple[tuple[str, ReportKind], ...] = (
    ("emergencies", ReportKind.EMERGENCY),
    ("complaints", ReportKind.COMPLAINT),
)


def parse_confirmed_reports(raw_json) -> list[Report]:
    """
    Flatten the backend response into one list, emergencies before complaints.

    Raises ReportFetchError if the response does not have the expected shape.
    """
    if not isinstance(raw_json, dict):
        raise ReportFetchError(f"Unexpected response format in confirmed reports: {raw_json!r}")

    reports: list[Report] = []
    for collection, kind in _COLLECTIONS:
        records = raw_json.get(collection)
        if records is None:
            records = []
        if not isinstance(records, list):
            raise ReportFetchError(f"'{collection}' is not a list: {records!r}")
        try:
            reports.extend(
                Report.from_api(record, kind, position)
                for position, record in enumerate(records)
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ReportFetchError(f"Malformed {kind.value.lower()} record: {e}") from e
    return reports


class RemoteReportStore:
    """Fetches the full set of confirmed reports."""

    def __init__(self, api_base_url: str, max_attempts: int = REQUEST_ATTEMPTS) -> None:
        self.url = api_base_url + CONFIRMED_REPORTS_PATH
        self.max_attempts = max_attempts

    async def fetch_confirmed(self) -> list[Report]:
        """
        Return every confirmed report, emergencies first.

        Raises ReportFetchError on network or parse failure.

        Corresponding CURL command:
        curl -X 'GET' '<api>/api/confirmedReports'
        """
        try:
            raw_json = await make_request("GET", self.url, max_attempts=self.max_attempts)
        except (asyncio.TimeoutError, TimeoutError) as e:
            raise ReportFetchError("Timeout while getting confirmed reports") from e
        except (ApiResponseError, aiohttp.ClientError, ValueError) as e:
            raise ReportFetchError(f"Error while getting confirmed reports: {e}") from e

        reports = parse_confirmed_reports(raw_json)
        _LOGGER.debug("Fetched %s confirmed reports", len(reports))
        return reports
