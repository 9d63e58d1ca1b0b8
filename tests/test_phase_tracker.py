"""Tests for the client-side PhaseTracker, fed with real read-model snapshots."""

import unittest

from duel.engine import apply_action, build_view, create_duel
from duel.models import Theme, WordEntry
from duel.phase import ANSWERING, IDLE, TRANSITION, PhaseTracker

T0 = 1_700_000_000_000


def make_theme(n=3):
    words = [WordEntry(f'word{i}', f'answer{i}', [f'wrong{i}_{j}' for j in range(6)])
             for i in range(n)]
    return Theme('t1', 'Test theme', words)


class TestPhaseTracker(unittest.TestCase):

    def setUp(self):
        self.theme = make_theme()
        self.pending = create_duel('d1', 'alice', 'bob', self.theme, now=T0)
        self.duel = apply_action(self.pending, self.theme, 'opponent', 'accept', T0, seed=1)
        self.tracker = PhaseTracker('challenger')

    def act(self, role, action, now, **params):
        self.duel = apply_action(self.duel, self.theme, role, action, now, **params)

    def view(self, now):
        return build_view(self.duel, self.theme, now, 'challenger')

    def both_answer(self, now, mine='x', theirs='y'):
        index = self.duel.current_word_index
        self.tracker.lock(mine)
        self.act('challenger', 'answer', now, answer=mine, question_index=index)
        self.act('opponent', 'answer', now, answer=theirs, question_index=index)

    def test_idle_until_accepted(self):
        view = build_view(self.pending, self.theme, T0, 'challenger')
        self.assertEqual(self.tracker.observe(view, T0), IDLE)
        self.assertEqual(self.tracker.observe(self.view(T0), T0), ANSWERING)
        self.assertEqual(self.tracker.question_remaining(T0 + 1000), 20.0)

    def test_transition_after_lock_and_advance(self):
        self.tracker.observe(self.view(T0), T0)
        self.both_answer(T0 + 1000)
        self.assertEqual(self.tracker.observe(self.view(T0 + 1000), T0 + 1000), TRANSITION)
        self.assertEqual(self.tracker.frozen, {
            'word_index': 0, 'selected_answer': 'x', 'opponent_answer': 'y'
        })
        self.assertEqual(self.tracker.countdown(T0 + 3000), 3.0)
        self.assertIsNone(self.tracker.question_remaining(T0 + 3000))

        self.assertEqual(self.tracker.tick(T0 + 5999), TRANSITION)
        self.assertEqual(self.tracker.tick(T0 + 6000), ANSWERING)
        self.assertIsNone(self.tracker.frozen)
        self.assertIsNone(self.tracker.locked_answer)

    def test_advance_without_local_lock_skips_transition(self):
        self.tracker.observe(self.view(T0), T0)
        self.act('challenger', 'answer', T0 + 1000, answer='x', question_index=0)
        self.act('opponent', 'answer', T0 + 1000, answer='y', question_index=0)
        self.assertEqual(self.tracker.observe(self.view(T0 + 1000), T0 + 1000), ANSWERING)
        self.assertIsNone(self.tracker.frozen)

    def test_paused_countdown_is_frozen(self):
        self.tracker.observe(self.view(T0), T0)
        self.both_answer(T0 + 1000)
        self.tracker.observe(self.view(T0 + 1000), T0 + 1000)
        self.act('opponent', 'countdown_pause', T0 + 2000)
        self.tracker.observe(self.view(T0 + 2000), T0 + 2000)
        self.assertEqual(self.tracker.countdown(T0 + 60000), 4.0)
        self.assertEqual(self.tracker.tick(T0 + 60000), TRANSITION)

    def test_timeout_fires_until_sent(self):
        self.tracker.observe(self.view(T0), T0)
        self.assertFalse(self.tracker.should_fire_timeout(T0 + 20000))
        self.assertTrue(self.tracker.should_fire_timeout(T0 + 21000))
        # Not acknowledged yet, so it keeps firing
        self.assertTrue(self.tracker.should_fire_timeout(T0 + 22000))
        self.tracker.timeout_sent()
        self.assertFalse(self.tracker.should_fire_timeout(T0 + 23000))
        self.assertTrue(self.tracker.timed_out)

        self.act('challenger', 'timeout', T0 + 21000, question_index=0)
        self.assertEqual(self.tracker.observe(self.view(T0 + 21000), T0 + 21000), TRANSITION)
        self.assertIsNone(self.tracker.frozen['selected_answer'])
        self.assertEqual(self.tracker.frozen['opponent_answer'], '__TIMEOUT__')

    def test_timeout_fires_after_own_answer(self):
        self.tracker.observe(self.view(T0), T0)
        self.tracker.lock('x')
        self.act('challenger', 'answer', T0 + 1000, answer='x', question_index=0)
        self.tracker.observe(self.view(T0 + 1000), T0 + 1000)
        self.assertTrue(self.tracker.should_fire_timeout(T0 + 21000))
        self.tracker.timeout_sent()
        self.assertFalse(self.tracker.timed_out)

    def test_completion_stays_in_transition(self):
        self.tracker.observe(self.view(T0), T0)
        now = T0
        for _ in range(3):
            now += 6000
            self.assertEqual(self.tracker.tick(now), ANSWERING)
            self.both_answer(now)
            self.tracker.observe(self.view(now), now)
        self.assertEqual(self.duel.status, 'completed')
        self.assertEqual(self.tracker.phase, TRANSITION)
        self.assertEqual(self.tracker.frozen['word_index'], 2)
        self.assertIsNone(self.tracker.countdown(now + 10000))
        self.assertEqual(self.tracker.tick(now + 10000), TRANSITION)


if __name__ == '__main__':
    unittest.main()
