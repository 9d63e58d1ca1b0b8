"""Tests for sabotage sending and activity windows."""

import unittest

from duel.config import MAX_SABOTAGES_PER_DUEL
from duel.engine import apply_action, build_view, create_duel
from duel.errors import InvalidState, PreconditionFailed
from duel.models import Theme, WordEntry
from duel.sabotage import is_sabotage_active

T0 = 1_700_000_000_000


def make_theme(n=6):
    words = [WordEntry(f'word{i}', f'answer{i}', [f'wrong{i}_{j}' for j in range(6)])
             for i in range(n)]
    return Theme('t1', 'Test theme', words)


class SabotageTestCase(unittest.TestCase):
    mode = 'classic'

    def setUp(self):
        self.theme = make_theme()
        pending = create_duel('d1', 'alice', 'bob', self.theme, mode=self.mode, now=T0)
        self.duel = apply_action(pending, self.theme, 'opponent', 'accept', T0, seed=7)

    def act(self, role, action, now, **params):
        self.duel = apply_action(self.duel, self.theme, role, action, now, **params)
        return self.duel


class TestClassicSabotage(SabotageTestCase):

    def test_send(self):
        self.act('challenger', 'sabotage', T0 + 1000, effect='bounce')
        self.assertEqual(self.duel.opponent.sabotage,
                         {'effect': 'bounce', 'timestamp': T0 + 1000, 'question_index': 0})
        self.assertEqual(self.duel.challenger.sabotages_used, 1)

        view = build_view(self.duel, self.theme, T0 + 2000)
        self.assertTrue(view['per_role']['opponent']['sabotage_active'])
        self.assertFalse(view['per_role']['challenger']['sabotage_active'])
        self.assertEqual(view['sabotage_slots'], {'challenger': MAX_SABOTAGES_PER_DUEL - 1,
                                                  'opponent': MAX_SABOTAGES_PER_DUEL})

    def test_unknown_effect(self):
        with self.assertRaises(PreconditionFailed):
            self.act('challenger', 'sabotage', T0 + 1000, effect='earthquake')

    def test_no_stacking(self):
        self.act('challenger', 'sabotage', T0 + 1000, effect='reverse')
        with self.assertRaises(PreconditionFailed):
            self.act('challenger', 'sabotage', T0 + 2000, effect='bounce')

    def test_target_already_answered(self):
        self.act('opponent', 'answer', T0 + 1000, answer='nope', question_index=0)
        with self.assertRaises(PreconditionFailed):
            self.act('challenger', 'sabotage', T0 + 2000, effect='trampoline')

    def test_effect_ends_with_the_question(self):
        self.act('challenger', 'sabotage', T0 + 1000, effect='trampoline')
        self.act('challenger', 'answer', T0 + 2000, answer='nope', question_index=0)
        self.act('opponent', 'answer', T0 + 3000, answer='nope', question_index=0)
        self.assertFalse(is_sabotage_active(self.duel, 'opponent', T0 + 3000))
        self.act('challenger', 'sabotage', T0 + 9000, effect='bounce')
        self.assertEqual(self.duel.opponent.sabotage['question_index'], 1)

    def test_sticky_wears_off(self):
        self.act('challenger', 'sabotage', T0 + 1000, effect='sticky')
        self.assertTrue(is_sabotage_active(self.duel, 'opponent', T0 + 7999))
        self.assertFalse(is_sabotage_active(self.duel, 'opponent', T0 + 8000))
        self.act('challenger', 'sabotage', T0 + 8000, effect='sticky')
        self.assertEqual(self.duel.challenger.sabotages_used, 2)

    def test_cap(self):
        now = T0
        for _ in range(MAX_SABOTAGES_PER_DUEL):
            self.act('challenger', 'sabotage', now, effect='sticky')
            now += 8000
        self.assertEqual(self.duel.challenger.sabotages_used, MAX_SABOTAGES_PER_DUEL)
        with self.assertRaises(PreconditionFailed):
            self.act('challenger', 'sabotage', now, effect='sticky')
        self.assertEqual(build_view(self.duel, self.theme, now)['sabotage_slots']['challenger'], 0)

    def test_inactive_duel(self):
        self.act('opponent', 'stop', T0 + 1000)
        with self.assertRaises(InvalidState):
            self.act('challenger', 'sabotage', T0 + 2000, effect='bounce')


class TestSoloSabotage(SabotageTestCase):
    mode = 'solo-style'

    def test_active_until_target_moves_on(self):
        self.act('challenger', 'sabotage', T0 + 1000, effect='reverse')
        self.assertTrue(is_sabotage_active(self.duel, 'opponent', T0 + 1500))

        word = self.theme.words[self.duel.opponent.current_word_index]
        self.act('opponent', 'answer', T0 + 2000, answer=word.correct_answer)
        self.assertFalse(is_sabotage_active(self.duel, 'opponent', T0 + 2000))

    def test_fallback_window_without_start_time(self):
        self.duel.opponent.sabotage = {'effect': 'bounce', 'timestamp': T0, 'question_index': 0}
        self.duel.opponent.question_started_at = None
        self.assertTrue(is_sabotage_active(self.duel, 'opponent', T0 + 24999))
        self.assertFalse(is_sabotage_active(self.duel, 'opponent', T0 + 25000))

    def test_completed_target(self):
        self.duel.opponent.completed = True
        with self.assertRaises(PreconditionFailed):
            self.act('challenger', 'sabotage', T0 + 1000, effect='bounce')


if __name__ == '__main__':
    unittest.main()
