"""Tests for the PostgreSQL backend and the CLI client, with mocked connections."""

import unittest
from unittest.mock import MagicMock

import requests

from cli.api_client import DuelAPIClient
from cli.console import ConsoleUI, error_detail
from duel.engine import apply_action, build_view, create_duel
from duel.errors import VersionConflict
from duel.models import Theme, WordEntry
from server.postgres_storage import PostgresStorage


T0 = 1_700_000_000_000
THEME = Theme('t1', 'Test', [WordEntry('casa', 'house', ['car', 'cat', 'dog'])])


def make_duel(now=0):
    return create_duel('d1', 'alice', 'bob', THEME, now=now)


class TestPostgresStorage(unittest.TestCase):

    def setUp(self):
        self.cursor = MagicMock()
        self.conn = MagicMock()
        self.conn.closed = False
        self.conn.cursor.return_value.__enter__.return_value = self.cursor
        self.storage = PostgresStorage('postgresql://test/db')
        self.storage._conn = self.conn

    def test_save_duel_checks_version(self):
        self.cursor.rowcount = 1
        self.storage.save_duel(make_duel(), 0)
        sql, params = self.cursor.execute.call_args[0]
        self.assertIn('WHERE duel_id = %s AND version = %s', sql)
        self.assertEqual(params[-2:], ('d1', 0))
        self.conn.commit.assert_called()

    def test_lost_update_raises_conflict(self):
        self.cursor.rowcount = 0
        with self.assertRaises(VersionConflict):
            self.storage.save_duel(make_duel(), 3)

    def test_duplicate_create_raises_conflict(self):
        self.cursor.rowcount = 0
        with self.assertRaises(VersionConflict):
            self.storage.create_duel(make_duel())

    def test_database_error_rolls_back(self):
        self.cursor.execute.side_effect = RuntimeError("connection lost")
        with self.assertRaises(RuntimeError):
            self.storage.save_duel(make_duel(), 0)
        self.conn.rollback.assert_called_once()

    def test_load_duel(self):
        duel = make_duel()
        self.cursor.fetchone.return_value = {'duel': duel.to_dict()}
        self.assertEqual(self.storage.load_duel('d1').to_dict(), duel.to_dict())
        self.cursor.fetchone.return_value = None
        self.assertIsNone(self.storage.load_duel('nope'))


class TestDuelAPIClient(unittest.TestCase):

    def setUp(self):
        self.client = DuelAPIClient('http://server:8000/', user_id='alice')
        self.client.session = MagicMock()
        self.client.session.post.return_value.json.return_value = {'status': 'accepted'}

    def test_actions_send_user_id(self):
        self.assertEqual(self.client.submit_answer('d1', 'house', 0), {'status': 'accepted'})
        url = self.client.session.post.call_args[0][0]
        body = self.client.session.post.call_args[1]['json']
        self.assertEqual(url, 'http://server:8000/api/duels/d1/answer')
        self.assertEqual(body, {'answer': 'house', 'question_index': 0, 'user_id': 'alice'})

    def test_countdown_routes(self):
        self.client.confirm_unpause('d1')
        url = self.client.session.post.call_args[0][0]
        self.assertEqual(url, 'http://server:8000/api/duels/d1/countdown/confirm-unpause')

    def test_get_duel_passes_user(self):
        self.client.get_duel('d1')
        self.assertEqual(self.client.session.get.call_args[1]['params'], {'user_id': 'alice'})


class TestConsoleCalls(unittest.TestCase):

    def setUp(self):
        self.ui = ConsoleUI(MagicMock(user_id='alice'), 'd1', poll_interval=0)

    def test_error_detail_reads_server_message(self):
        response = MagicMock()
        response.json.return_value = {'kind': 'invalid_state', 'detail': 'Duel is completed'}
        error = requests.HTTPError('409', response=response)
        self.assertEqual(error_detail(error), 'Duel is completed')

    def test_transport_errors_are_not_success(self):
        def fail():
            raise requests.ConnectionError('refused')
        with self.assertLogs('cli.console', 'WARNING'):
            self.assertIsNone(self.ui.call(fail))

    def test_refresh_resolves_role(self):
        self.ui.client.get_duel.return_value = {
            'status': 'pending',
            'current_word_index': 0,
            'per_role': {'challenger': {'user_id': 'bob'}, 'opponent': {'user_id': 'alice'}},
            'timer': {}
        }
        self.assertTrue(self.ui.refresh())
        self.assertEqual(self.ui.role, 'opponent')
        self.assertEqual(self.ui.tracker.viewer_role, 'opponent')


class TestConsoleTimeout(unittest.TestCase):

    def setUp(self):
        self.now = T0
        duel = apply_action(make_duel(now=T0), THEME, 'opponent', 'accept', T0, seed=1)
        self.ui = ConsoleUI(MagicMock(user_id='alice'), 'd1', poll_interval=0, clock=lambda: self.now)
        self.ui.observe(build_view(duel, THEME, T0, 'challenger'))

    def test_failed_timeout_is_retried(self):
        self.ui.client.timeout.side_effect = [requests.ConnectionError('down'), {'status': 'accepted'}]
        self.now = T0 + 31000
        with self.assertLogs('cli.console', 'WARNING'):
            self.ui.play_turn()
        self.assertTrue(self.ui.tracker.should_fire_timeout(self.now))
        self.ui.play_turn()
        self.assertEqual(self.ui.client.timeout.call_count, 2)
        self.ui.client.timeout.assert_called_with('d1', 0)
        self.assertFalse(self.ui.tracker.should_fire_timeout(self.now))


if __name__ == '__main__':
    unittest.main()
