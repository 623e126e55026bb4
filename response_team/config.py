"""Configuration schema and loading for a dashboard session."""
from __future__ import annotations

import dataclasses
import logging
import os
from typing import Any

import voluptuous as vol
from dotenv import load_dotenv

from .const import (
    API_BASE_URL,
    DIRECTIONS_BASE_URL,
    DIRECTIONS_TIMEOUT,
    POLL_INTERVAL,
    POSITION_TIMEOUT,
    POSITION_URL,
    REQUEST_ATTEMPTS,
)

_LOGGER = logging.getLogger(__name__)

ENV_PREFIX = "RESPONSE_TEAM_"

positive_seconds = vol.All(vol.Coerce(float), vol.Range(min=1))
non_empty_string = vol.All(vol.Coerce(str), vol.Strip, vol.Length(min=1))
base_url = vol.All(vol.Coerce(str), vol.Url(), lambda url: url.rstrip("/"))

CONFIG_SCHEMA = vol.Schema(
    {
        vol.Required('team_id'): non_empty_string,
        vol.Optional('api_base_url', default=API_BASE_URL): base_url,
        vol.Optional('directions_base_url', default=DIRECTIONS_BASE_URL): base_url,
        vol.Optional('directions_api_key', default=''): vol.Coerce(str),
        vol.Optional('position_url', default=POSITION_URL): vol.All(vol.Coerce(str), vol.Url()),
        vol.Optional('poll_interval', default=POLL_INTERVAL): positive_seconds,
        vol.Optional('position_timeout', default=POSITION_TIMEOUT): positive_seconds,
        vol.Optional('directions_timeout', default=DIRECTIONS_TIMEOUT): positive_seconds,
        vol.Optional('request_attempts', default=REQUEST_ATTEMPTS): vol.All(vol.Coerce(int), vol.Range(min=1, max=10)),
    }
)


@dataclasses.dataclass(frozen=True)
class DashboardConfig:
    team_id: str
    api_base_url: str = API_BASE_URL
    directions_base_url: str = DIRECTIONS_BASE_URL
    directions_api_key: str = ''
    position_url: str = POSITION_URL
    poll_interval: float = POLL_INTERVAL
    position_timeout: float = POSITION_TIMEOUT
    directions_timeout: float = DIRECTIONS_TIMEOUT
    request_attempts: int = REQUEST_ATTEMPTS

    @classmethod
    def from_dict(cls, options: dict[str, Any]) -> DashboardConfig:
        """Validate options against CONFIG_SCHEMA. Raises vol.Invalid on bad input."""
        return cls(**CONFIG_SCHEMA(dict(options)))


def load_config_from_env(**overrides: Any) -> DashboardConfig:
    """
    Build a DashboardConfig from RESPONSE_TEAM_* environment variables
    (a .env file is honoured), with explicit overrides taking precedence.
    """
    load_dotenv()
    options: dict[str, Any] = {}
    for field in dataclasses.fields(DashboardConfig):
        value = os.getenv(ENV_PREFIX + field.name.upper())
        if value is not None:
            options[field.name] = value
    options.update({k: v for k, v in overrides.items() if v is not None})
    _LOGGER.debug("Loaded config options: %s", sorted(options))
    return DashboardConfig.from_dict(options)
