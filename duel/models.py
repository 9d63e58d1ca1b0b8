"""Domain models for the duel engine."""

import copy

from .config import (
    CHALLENGER, OPPONENT, ROLES, MODE_CLASSIC, MODE_SOLO_STYLE, MODES,
    DIFFICULTY_PRESETS, ACTIVE_STATUSES, TERMINAL_STATUSES,
)
from .errors import PreconditionFailed


class WordEntry:
    """One theme entry: prompt, correct answer and distractors."""

    def __init__(self, prompt: str, correct_answer: str, wrong_answers: list[str] = None):
        self.prompt = prompt
        self.correct_answer = correct_answer
        self.wrong_answers = list(wrong_answers or [])

    def to_dict(self) -> dict:
        return {
            'prompt': self.prompt,
            'correct_answer': self.correct_answer,
            'wrong_answers': list(self.wrong_answers)
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'WordEntry':
        return cls(data['prompt'], data['correct_answer'], data.get('wrong_answers', []))


class Theme:
    """Ordered word list a duel is played over. Never mutated during a duel."""

    def __init__(self, theme_id: str, name: str, words: list[WordEntry]):
        self.theme_id = theme_id
        self.name = name
        self.words = words

    def __len__(self) -> int:
        return len(self.words)

    def validate(self) -> None:
        if not self.words:
            raise PreconditionFailed("Theme has no words")
        for idx, word in enumerate(self.words):
            if not word.prompt or not word.prompt.strip():
                raise PreconditionFailed(f"Word {idx} has an empty prompt")
            if not word.correct_answer or not word.correct_answer.strip():
                raise PreconditionFailed(f"Word {idx} has an empty answer")

    def to_dict(self) -> dict:
        return {
            'theme_id': self.theme_id,
            'name': self.name,
            'words': [w.to_dict() for w in self.words]
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Theme':
        return cls(data['theme_id'], data.get('name', ''),
                   [WordEntry.from_dict(w) for w in data.get('words', [])])


class WordState:
    """Per-word, per-player progress through the presentation levels."""

    def __init__(self, word_index: int, current_level: int = 1,
                 completed_level3: bool = False, answered_level2_plus: bool = False):
        self.word_index = word_index
        self.current_level = current_level
        self.completed_level3 = completed_level3
        self.answered_level2_plus = answered_level2_plus

    def copy(self) -> 'WordState':
        return WordState(self.word_index, self.current_level,
                         self.completed_level3, self.answered_level2_plus)

    def to_dict(self) -> dict:
        return {
            'word_index': self.word_index,
            'current_level': self.current_level,
            'completed_level3': self.completed_level3,
            'answered_level2_plus': self.answered_level2_plus
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'WordState':
        return cls(data['word_index'], data.get('current_level', 1),
                   data.get('completed_level3', False), data.get('answered_level2_plus', False))

    def __eq__(self, other) -> bool:
        if not isinstance(other, WordState):
            return NotImplemented
        return self.to_dict() == other.to_dict()


class HintChannelA:
    """Open-ended (typing) hint exchange: letters, flash, tts or anagram."""

    def __init__(self):
        self.requested_by = None
        self.accepted = False
        self.hint_type = None
        self.word_index = None
        self.level = None
        self.typed_letters = []
        self.revealed_positions = []   # Revealed by the requester themselves
        self.provided_positions = []   # Revealed by the hint provider
        self.anagram = None

    @property
    def is_open(self) -> bool:
        return self.requested_by is not None

    def to_dict(self) -> dict:
        return {
            'requested_by': self.requested_by,
            'accepted': self.accepted,
            'hint_type': self.hint_type,
            'word_index': self.word_index,
            'level': self.level,
            'typed_letters': list(self.typed_letters),
            'revealed_positions': list(self.revealed_positions),
            'provided_positions': list(self.provided_positions),
            'anagram': self.anagram
        }

    @classmethod
    def from_dict(cls, data: dict | None) -> 'HintChannelA':
        channel = cls()
        if not data:
            return channel
        channel.requested_by = data.get('requested_by')
        channel.accepted = data.get('accepted', False)
        channel.hint_type = data.get('hint_type')
        channel.word_index = data.get('word_index')
        channel.level = data.get('level')
        channel.typed_letters = data.get('typed_letters', [])
        channel.revealed_positions = data.get('revealed_positions', [])
        channel.provided_positions = data.get('provided_positions', [])
        channel.anagram = data.get('anagram')
        return channel


class HintChannelB:
    """Multiple-choice hint exchange: eliminate, flash or tts."""

    def __init__(self):
        self.requested_by = None
        self.accepted = False
        self.hint_type = None
        self.word_index = None
        self.options = []
        self.eliminated_options = []

    @property
    def is_open(self) -> bool:
        return self.requested_by is not None

    def to_dict(self) -> dict:
        return {
            'requested_by': self.requested_by,
            'accepted': self.accepted,
            'hint_type': self.hint_type,
            'word_index': self.word_index,
            'options': list(self.options),
            'eliminated_options': list(self.eliminated_options)
        }

    @classmethod
    def from_dict(cls, data: dict | None) -> 'HintChannelB':
        channel = cls()
        if not data:
            return channel
        channel.requested_by = data.get('requested_by')
        channel.accepted = data.get('accepted', False)
        channel.hint_type = data.get('hint_type')
        channel.word_index = data.get('word_index')
        channel.options = data.get('options', [])
        channel.eliminated_options = data.get('eliminated_options', [])
        return channel


class PlayerState:
    """Running state of one role. Solo-style fields stay empty in classic duels."""

    def __init__(self, user_id: str):
        self.user_id = user_id
        self.score = 0
        self.answered = False
        self.timed_out = False
        self.last_answer = None
        self.sabotages_used = 0
        self.sabotage = None  # {effect, timestamp}
        self.stats = {'questions_answered': 0, 'correct_answers': 0}
        # Solo-style
        self.word_states = []
        self.active_pool = []
        self.remaining_pool = []
        self.current_word_index = None
        self.current_level = None
        self.level2_mode = None
        self.completed = False
        self.question_started_at = None

    def record_answer(self, is_correct: bool) -> None:
        self.stats = {
            'questions_answered': self.stats['questions_answered'] + 1,
            'correct_answers': self.stats['correct_answers'] + (1 if is_correct else 0)
        }

    def to_dict(self) -> dict:
        return {
            'user_id': self.user_id,
            'score': self.score,
            'answered': self.answered,
            'timed_out': self.timed_out,
            'last_answer': self.last_answer,
            'sabotages_used': self.sabotages_used,
            'sabotage': dict(self.sabotage) if self.sabotage else None,
            'stats': dict(self.stats),
            'word_states': [ws.to_dict() for ws in self.word_states],
            'active_pool': list(self.active_pool),
            'remaining_pool': list(self.remaining_pool),
            'current_word_index': self.current_word_index,
            'current_level': self.current_level,
            'level2_mode': self.level2_mode,
            'completed': self.completed,
            'question_started_at': self.question_started_at
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'PlayerState':
        player = cls(data['user_id'])
        player.score = data.get('score', 0)
        player.answered = data.get('answered', False)
        player.timed_out = data.get('timed_out', False)
        player.last_answer = data.get('last_answer')
        player.sabotages_used = data.get('sabotages_used', 0)
        player.sabotage = data.get('sabotage')
        player.stats = data.get('stats', {'questions_answered': 0, 'correct_answers': 0})
        player.word_states = [WordState.from_dict(ws) for ws in data.get('word_states', [])]
        player.active_pool = data.get('active_pool', [])
        player.remaining_pool = data.get('remaining_pool', [])
        player.current_word_index = data.get('current_word_index')
        player.current_level = data.get('current_level')
        player.level2_mode = data.get('level2_mode')
        player.completed = data.get('completed', False)
        player.question_started_at = data.get('question_started_at')
        return player


class DuelSession:
    """The shared duel document. Every mutation goes through duel.engine."""

    def __init__(self, duel_id: str, challenger_id: str, opponent_id: str, theme_id: str,
                 word_count: int, mode: str = MODE_CLASSIC, difficulty_preset: str = 'easy',
                 created_at: int = 0):
        if mode not in MODES:
            raise PreconditionFailed(f"Unknown duel mode: {mode}")
        if difficulty_preset not in DIFFICULTY_PRESETS:
            raise PreconditionFailed(f"Unknown difficulty preset: {difficulty_preset}")
        self.duel_id = duel_id
        self.theme_id = theme_id
        self.word_count = word_count
        self.mode = mode
        self.difficulty_preset = difficulty_preset
        self.created_at = created_at
        self.seed = None
        self.status = 'pending'
        self.phase = 'idle'
        self.current_word_index = 0
        self.word_order = []
        self.question_start_time = None
        self.question_timer_paused_at = None
        self.question_timer_paused_by = None
        self.countdown_paused_by = None
        self.countdown_paused_at = None
        self.countdown_unpause_requested_by = None
        self.countdown_skip_requested_by = []
        self.hint_a = HintChannelA()
        self.hint_b = HintChannelB()
        self.players = {
            CHALLENGER: PlayerState(challenger_id),
            OPPONENT: PlayerState(opponent_id)
        }
        self.version = 0

    @property
    def challenger(self) -> PlayerState:
        return self.players[CHALLENGER]

    @property
    def opponent(self) -> PlayerState:
        return self.players[OPPONENT]

    @property
    def is_active(self) -> bool:
        return self.status in ACTIVE_STATUSES

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    @property
    def is_classic(self) -> bool:
        return self.mode == MODE_CLASSIC

    def player(self, role: str) -> PlayerState:
        return self.players[role]

    def role_of(self, user_id: str) -> str | None:
        for role in ROLES:
            if self.players[role].user_id == user_id:
                return role
        return None

    def theme_word_index(self) -> int:
        """Theme index of the current classic question (through the shuffled order)."""
        if self.word_order and self.current_word_index < len(self.word_order):
            return self.word_order[self.current_word_index]
        return self.current_word_index

    def clone(self) -> 'DuelSession':
        return copy.deepcopy(self)

    def to_view(self, now: int, theme, viewer_role: str = None) -> dict:
        from .engine import build_view
        return build_view(self, theme, now, viewer_role)

    def to_dict(self) -> dict:
        return {
            'duel_id': self.duel_id,
            'theme_id': self.theme_id,
            'word_count': self.word_count,
            'mode': self.mode,
            'difficulty_preset': self.difficulty_preset,
            'created_at': self.created_at,
            'seed': self.seed,
            'status': self.status,
            'phase': self.phase,
            'current_word_index': self.current_word_index,
            'word_order': list(self.word_order),
            'question_start_time': self.question_start_time,
            'question_timer_paused_at': self.question_timer_paused_at,
            'question_timer_paused_by': self.question_timer_paused_by,
            'countdown_paused_by': self.countdown_paused_by,
            'countdown_paused_at': self.countdown_paused_at,
            'countdown_unpause_requested_by': self.countdown_unpause_requested_by,
            'countdown_skip_requested_by': list(self.countdown_skip_requested_by),
            'hint_a': self.hint_a.to_dict(),
            'hint_b': self.hint_b.to_dict(),
            'players': {role: self.players[role].to_dict() for role in ROLES},
            'version': self.version
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'DuelSession':
        players = data['players']
        duel = cls(
            data['duel_id'],
            players[CHALLENGER]['user_id'],
            players[OPPONENT]['user_id'],
            data['theme_id'],
            data.get('word_count', 0),
            data.get('mode', MODE_CLASSIC),
            data.get('difficulty_preset', 'easy'),
            data.get('created_at', 0)
        )
        duel.seed = data.get('seed')
        duel.status = data.get('status', 'pending')
        duel.phase = data.get('phase', 'idle')
        duel.current_word_index = data.get('current_word_index', 0)
        duel.word_order = data.get('word_order', [])
        duel.question_start_time = data.get('question_start_time')
        duel.question_timer_paused_at = data.get('question_timer_paused_at')
        duel.question_timer_paused_by = data.get('question_timer_paused_by')
        duel.countdown_paused_by = data.get('countdown_paused_by')
        duel.countdown_paused_at = data.get('countdown_paused_at')
        duel.countdown_unpause_requested_by = data.get('countdown_unpause_requested_by')
        duel.countdown_skip_requested_by = data.get('countdown_skip_requested_by', [])
        duel.hint_a = HintChannelA.from_dict(data.get('hint_a'))
        duel.hint_b = HintChannelB.from_dict(data.get('hint_b'))
        duel.players = {role: PlayerState.from_dict(players[role]) for role in ROLES}
        duel.version = data.get('version', 0)
        return duel
