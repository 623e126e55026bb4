"""
Tests for configuration validation and environment loading.
"""

from __future__ import annotations

import os
import unittest
from unittest.mock import patch

import voluptuous as vol

from response_team.config import CONFIG_SCHEMA, DashboardConfig, load_config_from_env
from response_team.const import API_BASE_URL, POLL_INTERVAL, POSITION_TIMEOUT


class TestConfigSchema(unittest.TestCase):

    def test_defaults_applied(self):
        config = DashboardConfig.from_dict({"team_id": "team-1"})
        self.assertEqual(config.team_id, "team-1")
        self.assertEqual(config.api_base_url, API_BASE_URL)
        self.assertEqual(config.poll_interval, POLL_INTERVAL)
        self.assertEqual(config.position_timeout, POSITION_TIMEOUT)

    def test_team_id_required(self):
        with self.assertRaises(vol.Invalid):
            DashboardConfig.from_dict({})

    def test_blank_team_id_rejected(self):
        with self.assertRaises(vol.Invalid):
            DashboardConfig.from_dict({"team_id": "   "})

    def test_numeric_strings_coerced(self):
        config = DashboardConfig.from_dict({"team_id": "t", "poll_interval": "5", "request_attempts": "2"})
        self.assertEqual(config.poll_interval, 5.0)
        self.assertEqual(config.request_attempts, 2)

    def test_poll_interval_lower_bound(self):
        with self.assertRaises(vol.Invalid):
            DashboardConfig.from_dict({"team_id": "t", "poll_interval": 0})

    def test_trailing_slash_stripped_from_base_urls(self):
        config = DashboardConfig.from_dict({"team_id": "t", "api_base_url": "http://backend.test/"})
        self.assertEqual(config.api_base_url, "http://backend.test")

    def test_invalid_url_rejected(self):
        with self.assertRaises(vol.Invalid):
            CONFIG_SCHEMA({"team_id": "t", "api_base_url": "not a url"})

    def test_unknown_option_rejected(self):
        with self.assertRaises(vol.Invalid):
            CONFIG_SCHEMA({"team_id": "t", "colour": "blue"})


class TestLoadConfigFromEnv(unittest.TestCase):

    def test_reads_prefixed_variables(self):
        env = {
            "RESPONSE_TEAM_TEAM_ID": "env-team",
            "RESPONSE_TEAM_API_BASE_URL": "http://env.test",
            "RESPONSE_TEAM_POLL_INTERVAL": "20",
        }
        with patch.dict(os.environ, env, clear=True), patch("response_team.config.load_dotenv"):
            config = load_config_from_env()

        self.assertEqual(config.team_id, "env-team")
        self.assertEqual(config.api_base_url, "http://env.test")
        self.assertEqual(config.poll_interval, 20.0)

    def test_overrides_win_and_none_is_ignored(self):
        env = {"RESPONSE_TEAM_TEAM_ID": "env-team"}
        with patch.dict(os.environ, env, clear=True), patch("response_team.config.load_dotenv"):
            config = load_config_from_env(team_id="cli-team", poll_interval=None)

        self.assertEqual(config.team_id, "cli-team")
        self.assertEqual(config.poll_interval, POLL_INTERVAL)

    def test_missing_team_id_raises(self):
        with patch.dict(os.environ, {}, clear=True), patch("response_team.config.load_dotenv"):
            with self.assertRaises(vol.Invalid):
                load_config_from_env()
