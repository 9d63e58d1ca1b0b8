"""HTTP tests for the FastAPI server, run against in-memory storage."""

import unittest

from fastapi.testclient import TestClient

import server.app
from server.memory_storage import MemoryStorage
from server.service import DuelService

T0 = 1_700_000_000_000

THEME = {
    'theme_id': 'animals',
    'name': 'Animals',
    'words': [
        {'prompt': f'word{i}', 'correct_answer': f'answer{i}',
         'wrong_answers': [f'wrong{i}_{j}' for j in range(6)]}
        for i in range(10)
    ]
}


class TestDuelAPI(unittest.TestCase):

    def setUp(self):
        self.now = T0
        self.storage = MemoryStorage()
        server.app.service = DuelService(self.storage, clock=lambda: self.now)
        self.client = TestClient(server.app.app)
        self.assertEqual(self.client.post('/api/themes', json=THEME).status_code, 200)

    def tearDown(self):
        server.app.service = None

    def create_duel(self, **extra):
        payload = {'challenger_id': 'alice', 'opponent_id': 'bob', 'theme_id': 'animals'}
        payload.update(extra)
        response = self.client.post('/api/duels', json=payload)
        self.assertEqual(response.status_code, 200)
        return response.json()['duel_id']

    def post(self, duel_id, action, user_id, **body):
        body['user_id'] = user_id
        return self.client.post(f'/api/duels/{duel_id}/{action}', json=body)

    def test_theme_summary_hides_answers(self):
        response = self.client.get('/api/themes/animals')
        self.assertEqual(response.status_code, 200)
        data = response.json()
        self.assertEqual(data['word_count'], 10)
        self.assertNotIn('words', data)
        self.assertNotIn('answer0', str(data))

    def test_missing_theme(self):
        response = self.client.get('/api/themes/nope')
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json()['kind'], 'not_found')

    def test_invalid_theme(self):
        response = self.client.post('/api/themes', json={'theme_id': 'empty', 'words': []})
        self.assertEqual(response.status_code, 422)
        self.assertEqual(response.json()['kind'], 'precondition_failed')

    def test_classic_round(self):
        duel_id = self.create_duel()
        response = self.post(duel_id, 'accept', 'bob')
        self.assertEqual(response.status_code, 200)
        view = response.json()
        self.assertEqual(view['status'], 'accepted')
        self.assertEqual(view['phase'], 'answering')
        self.assertEqual(view['question']['level'], 'easy')
        self.assertNotIn('correct_option', view['question'])

        theme_index = self.storage.load_duel(duel_id).word_order[0]
        answer = f'answer{theme_index}'
        self.now = T0 + 1000
        self.assertEqual(self.post(duel_id, 'answer', 'alice', answer=answer, question_index=0).status_code, 200)
        view = self.post(duel_id, 'answer', 'bob', answer=answer, question_index=0).json()
        self.assertEqual(view['current_word_index'], 1)
        self.assertEqual(view['phase'], 'transition')
        self.assertEqual(view['timer']['countdown_remaining'], 5.0)
        self.assertEqual(view['per_role']['challenger']['score'], 1)

        self.now = T0 + 6000
        view = self.client.get(f'/api/duels/{duel_id}', params={'user_id': 'alice'}).json()
        self.assertEqual(view['phase'], 'answering')
        self.assertIsNotNone(view['question'])

    def test_error_statuses(self):
        duel_id = self.create_duel()
        response = self.post(duel_id, 'accept', 'mallory')
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()['kind'], 'unauthorized')

        response = self.post(duel_id, 'answer', 'alice', answer='x')
        self.assertEqual(response.status_code, 409)
        self.assertEqual(response.json()['kind'], 'invalid_state')

        self.post(duel_id, 'accept', 'bob')
        self.post(duel_id, 'answer', 'alice', answer='x', question_index=0)
        response = self.post(duel_id, 'answer', 'alice', answer='y', question_index=0)
        self.assertEqual(response.status_code, 422)
        self.assertEqual(response.json()['detail'], 'You already answered this question')

        self.assertEqual(self.post('missing', 'accept', 'bob').status_code, 404)

    def test_timeout_route(self):
        duel_id = self.create_duel()
        self.post(duel_id, 'accept', 'bob')
        self.now = T0 + 5000
        self.assertEqual(self.post(duel_id, 'timeout', 'alice', question_index=0).status_code, 422)
        self.now = T0 + 21000
        view = self.post(duel_id, 'timeout', 'alice', question_index=0).json()
        self.assertEqual(view['current_word_index'], 1)
        self.assertEqual(view['per_role']['challenger']['last_answer'], '__TIMEOUT__')
        self.assertEqual(view['per_role']['opponent']['last_answer'], '__TIMEOUT__')

    def test_countdown_routes(self):
        duel_id = self.create_duel(word_count=3)
        self.post(duel_id, 'accept', 'bob')
        self.post(duel_id, 'answer', 'alice', answer='x', question_index=0)
        self.post(duel_id, 'answer', 'bob', answer='x', question_index=0)

        self.now = T0 + 1000
        view = self.post(duel_id, 'countdown/pause', 'alice').json()
        self.assertEqual(view['timer']['countdown_paused_by'], 'challenger')
        self.post(duel_id, 'countdown/request-unpause', 'alice')
        view = self.post(duel_id, 'countdown/confirm-unpause', 'bob').json()
        self.assertIsNone(view['timer']['countdown_paused_by'])
        self.post(duel_id, 'countdown/skip', 'alice')
        view = self.post(duel_id, 'countdown/skip', 'bob').json()
        self.assertEqual(view['phase'], 'answering')

    def test_sabotage_and_stop(self):
        duel_id = self.create_duel()
        self.post(duel_id, 'accept', 'bob')
        view = self.post(duel_id, 'sabotage', 'alice', effect='bounce').json()
        self.assertTrue(view['per_role']['opponent']['sabotage_active'])
        self.assertEqual(view['sabotage_slots']['challenger'], 4)
        self.assertEqual(self.post(duel_id, 'stop', 'bob').json()['status'], 'stopped')

    def test_reject_and_cancel(self):
        first = self.create_duel()
        self.assertEqual(self.post(first, 'reject', 'bob').json()['status'], 'rejected')
        second = self.create_duel()
        self.assertEqual(self.post(second, 'cancel', 'alice').json()['status'], 'cancelled')

    def test_events_and_sweep(self):
        duel_id = self.create_duel()
        self.post(duel_id, 'accept', 'bob')
        response = self.client.get(f'/api/duels/{duel_id}/events')
        self.assertEqual(response.status_code, 200)
        self.assertIn('error', response.json())

        self.create_duel()
        self.now = T0 + 25 * 60 * 60 * 1000
        self.assertEqual(len(self.client.post('/api/admin/sweep').json()['cancelled']), 1)

    def test_unexpected_errors_are_500(self):
        server.app.service.run = lambda *args, **kwargs: 1 / 0
        with self.assertLogs('server.app', 'ERROR'):
            response = self.post('whatever', 'accept', 'bob')
        self.assertEqual(response.status_code, 500)


if __name__ == '__main__':
    unittest.main()
