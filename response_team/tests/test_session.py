"""
Tests for DashboardSession: startup notification load, notification panel
actions, directions delegation, teardown and logout.
"""

from __future__ import annotations

import asyncio
import unittest
from unittest.mock import AsyncMock, MagicMock

from response_team.api.directions import DirectionsProvider
from response_team.api.notifications import RemoteNotificationStore
from response_team.api.positions import HttpPositionSource
from response_team.api.reports import RemoteReportStore
from response_team.errors import NotificationFetchError
from response_team.models import RouteDetails
from response_team.session import DashboardSession, StaticIdentity

from .test_common import make_config, make_notification, make_route, make_session, settle


class TestSessionConstruction(unittest.TestCase):

    def test_default_collaborators_built_from_config(self):
        config = make_config(poll_interval=3, request_attempts=2, directions_timeout=7)
        session = DashboardSession(config)

        self.assertIsInstance(session.sync_loop.position_source, HttpPositionSource)
        self.assertEqual(session.sync_loop.position_source.url, "http://device.test/position")
        self.assertIsInstance(session.sync_loop.report_store, RemoteReportStore)
        self.assertEqual(session.sync_loop.report_store.max_attempts, 2)
        self.assertIsInstance(session.notification_store, RemoteNotificationStore)
        self.assertIsInstance(session.routing.directions, DirectionsProvider)
        self.assertEqual(session.routing.directions.timeout, 7)
        self.assertEqual(session.sync_loop.poll_interval, 3)

    def test_team_id_comes_from_identity(self):
        session = DashboardSession(make_config(team_id="config-team"), StaticIdentity("login-team"))
        self.assertEqual(session.team_id, "login-team")
        self.assertEqual(session.sync_loop.team_id, "login-team")

    def test_loop_and_routing_share_the_view_model(self):
        session = DashboardSession(make_config())
        self.assertIs(session.sync_loop.view_model, session.view_model)
        self.assertIs(session.routing.view_model, session.view_model)


class TestSessionStart(unittest.IsolatedAsyncioTestCase):

    async def test_start_loads_notifications_and_starts_loop(self):
        session = make_session()
        await session.start()
        await settle()

        session.notification_store.fetch_for.assert_awaited_once_with("team-1")
        self.assertEqual(session.view_model.data.notifications, (make_notification(),))
        self.assertTrue(session.sync_loop.running)
        self.assertIsNotNone(session.view_model.data.position)
        await session.shutdown()

    async def test_notification_failure_degrades_to_empty(self):
        session = make_session()
        session.notification_store.fetch_for.side_effect = NotificationFetchError("500")

        await session.start()
        await settle()

        self.assertEqual(session.view_model.data.notifications, ())
        self.assertTrue(session.sync_loop.running)
        self.assertTrue(session.active)
        await session.shutdown()

    async def test_notifications_fetched_only_once(self):
        session = make_session(poll_interval=0.01)
        await session.start()
        await asyncio.sleep(0.05)
        await session.shutdown()

        session.notification_store.fetch_for.assert_awaited_once()
        self.assertGreater(session.sync_loop.tick_count, 1)

    async def test_start_is_idempotent(self):
        session = make_session()
        await session.start()
        await session.start()
        session.notification_store.fetch_for.assert_awaited_once()
        await session.shutdown()

    async def test_cannot_restart_after_shutdown(self):
        session = make_session()
        await session.shutdown()
        with self.assertRaises(RuntimeError):
            await session.start()

    async def test_context_manager(self):
        session = make_session()
        async with session as s:
            self.assertIs(s, session)
            self.assertTrue(session.sync_loop.running)
        self.assertFalse(session.sync_loop.running)
        self.assertFalse(session.active)


class TestNotificationActions(unittest.IsolatedAsyncioTestCase):

    async def test_open_and_close(self):
        session = make_session()
        session.open_notifications()
        self.assertTrue(session.view_model.data.notifications_open)
        session.close_notifications()
        self.assertFalse(session.view_model.data.notifications_open)

    async def test_clear_empties_and_closes(self):
        session = make_session()
        await session.start()
        session.open_notifications()

        session.clear_notifications()

        self.assertEqual(session.view_model.data.notifications, ())
        self.assertFalse(session.view_model.data.notifications_open)
        await session.shutdown()

    async def test_clear_when_already_empty(self):
        session = make_session()
        session.clear_notifications()
        self.assertEqual(session.view_model.data.notifications, ())
        self.assertFalse(session.view_model.data.notifications_open)


class TestSessionDirections(unittest.IsolatedAsyncioTestCase):

    async def test_directions_after_first_tick(self):
        session = make_session()
        await session.start()
        await settle()

        await session.request_directions(0)

        self.assertEqual(session.view_model.data.route_details, {0: RouteDetails(5.23, 11)})
        self.assertEqual(session.view_model.data.active_route, make_route().polyline)
        await session.shutdown()

    async def test_directions_before_any_fix_is_noop(self):
        session = make_session()
        before = session.view_model.data

        result = await session.request_directions(0)

        self.assertIsNone(result)
        self.assertIs(session.view_model.data, before)

    async def test_in_flight_request_discarded_after_shutdown(self):
        release = asyncio.Event()

        async def slow_route(origin, destination, profile):
            await release.wait()
            return make_route()

        session = make_session()
        await session.start()
        await settle()
        session.routing.directions.route.side_effect = slow_route
        task = session.request_directions(0)
        await settle()

        await session.shutdown()
        snapshot = session.view_model.data
        release.set()
        await task

        self.assertIs(session.view_model.data, snapshot)
        self.assertEqual(snapshot.route_details, {})

    async def test_unexpected_routing_error_is_logged(self):
        session = make_session()
        await session.start()
        await settle()
        session.routing.directions.route.side_effect = RuntimeError("bug")

        with self.assertLogs("response_team.session", level="ERROR") as logs:
            task = session.request_directions(0)
            with self.assertRaises(RuntimeError):
                await task
            await settle()

        self.assertIn("report 0", logs.output[0])
        self.assertEqual(session.view_model.data.route_details, {})
        await session.shutdown()


class TestTeardown(unittest.IsolatedAsyncioTestCase):

    async def test_no_mutation_after_shutdown(self):
        session = make_session(poll_interval=0.01)
        await session.start()
        await settle()
        await session.shutdown()
        snapshot = session.view_model.data
        listener = MagicMock()
        session.view_model.add_listener(listener)

        await asyncio.sleep(0.05)
        session.clear_notifications()
        session.open_notifications()

        self.assertIs(session.view_model.data, snapshot)
        listener.assert_not_called()

    async def test_logout_shuts_down_then_logs_out(self):
        session = make_session()
        await session.start()

        await session.logout()

        self.assertFalse(session.active)
        self.assertFalse(session.sync_loop.running)
        self.assertTrue(session.identity.logged_out)

    async def test_logout_awaits_async_identity(self):
        identity = MagicMock()
        identity.team_id = "team-9"
        identity.logout = AsyncMock()
        session = DashboardSession(make_config(), identity)
        session.sync_loop.stop = AsyncMock()

        await session.logout()

        identity.logout.assert_awaited_once()
