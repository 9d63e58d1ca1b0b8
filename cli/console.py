"""Console UI for playing a duel."""

import logging
import time

import requests

from duel.config import SABOTAGE_EFFECTS, TERMINAL_STATUSES, TIMEOUT_ANSWER
from duel.phase import PhaseTracker, TRANSITION
from duel.utils import now_ms
from cli.api_client import DuelAPIClient

logger = logging.getLogger(__name__)

HELP = """Commands while playing:
  <answer> or <option number>   lock in an answer
  hint                          ask your opponent for help
  give <type>                   accept a hint request (letters, anagram, eliminate, flash, tts)
  letter <n> / eliminate <n>    fulfil an accepted hint
  sabotage <effect>             disrupt your opponent (sticky, bounce, trampoline, reverse)
  pause / unpause / confirm / skip   control the countdown between questions
  status / stop / exit"""


def error_detail(error: requests.RequestException) -> str:
    """Server error message, falling back to the transport error."""
    response = getattr(error, 'response', None)
    if response is not None:
        try:
            return response.json().get('detail', str(error))
        except ValueError:
            pass
    return str(error)


class ConsoleUI:
    """Polls the server read model and prompts for the local player's moves."""

    def __init__(self, client: DuelAPIClient, duel_id: str = None,
                 poll_interval: float = 1.0, clock=now_ms):
        self.client = client
        self.duel_id = duel_id
        self.poll_interval = poll_interval
        self.clock = clock
        self.view = None
        self.role = None
        self.tracker = None
        self._revealed_index = None

    def call(self, fn, *args, **kwargs) -> dict | None:
        """Run an API call. Rejections are shown; transport failures are retried on the next tick."""
        try:
            return fn(*args, **kwargs)
        except requests.HTTPError as e:
            print(f"  ! {error_detail(e)}")
        except requests.RequestException as e:
            logger.warning(f"Request failed, will retry: {e}")
            print("  ! Connection problem, retrying...")
        return None

    def refresh(self) -> bool:
        view = self.call(self.client.get_duel, self.duel_id)
        if view is None:
            return False
        self.observe(view)
        return True

    def observe(self, view: dict) -> None:
        self.view = view
        if self.role is None:
            for role, player in view['per_role'].items():
                if player['user_id'] == self.client.user_id:
                    self.role = role
            self.tracker = PhaseTracker(self.role)
        self.tracker.observe(view, self.clock())

    def question_index(self) -> int | None:
        if self.view['mode'] == 'classic':
            return self.view['current_word_index']
        return self.view['per_role'][self.role].get('current_word_index')

    def print_scores(self):
        me = self.view['per_role'][self.role]
        other = self.view['per_role']['opponent' if self.role == 'challenger' else 'challenger']
        print(f"Score: you {me['score']} - {other['score']} {other['user_id']}"
              f" | sabotages left: {self.view['sabotage_slots'][self.role]}")

    def print_summary(self):
        stats = self.view['per_role'][self.role]['stats']
        line = (f"Answered {stats['questions_answered']}, correct {stats['correct_answers']}"
                f" ({stats['accuracy']}% accuracy)")
        if 'success_rate' in stats:
            line += f" | {stats['success_rate']}% of the {self.view['max_score']} points available"
        print(line)

    def print_question(self, question: dict):
        print('\n' + '=' * 50)
        if self.view['mode'] == 'classic':
            print(f"Question {self.view['current_word_index'] + 1}/{self.view['word_count']}"
                  f" ({question['level']}, {question['points']} pts)")
            remaining = self.tracker.question_remaining(self.clock())
            if remaining is not None:
                print(f"Time left: {remaining:.0f}s")
        else:
            print(f"Level {question['level']} ({question['points']} pts)")
        print(f"\n>>> {question['prompt']}\n")
        eliminated = (self.view.get('hint_b') or {}).get('eliminated_options', [])
        for idx, option in enumerate(question['options'], start=1):
            mark = ' (eliminated)' if option in eliminated else ''
            print(f"  {idx}. {option}{mark}")
        if question['options'] == [] and question.get('answer_length'):
            print(f"  ({question['answer_length']} letters)")
        self.print_hints()
        me = self.view['per_role'][self.role]
        if me.get('sabotage_active'):
            print(f"  !! You are sabotaged: {me['sabotage']['effect']}")
        print('=' * 50)

    def print_hints(self):
        hint_a = self.view.get('hint_a')
        if hint_a:
            if hint_a['requested_by'] != self.role and not hint_a['accepted']:
                print("  Your opponent asks for a typing hint: 'give letters|anagram|flash|tts'")
            elif hint_a.get('anagram'):
                print(f"  Anagram: {hint_a['anagram']}")
            elif hint_a['provided_positions']:
                letters = ', '.join(f"{int(p) + 1}={c}" for p, c in hint_a['provided_letters'].items())
                print(f"  Revealed letters: {letters}")
        hint_b = self.view.get('hint_b')
        if hint_b and hint_b['requested_by'] != self.role and not hint_b['accepted']:
            print("  Your opponent asks for an options hint: 'give eliminate|flash|tts'")

    def print_reveal(self):
        frozen = self.tracker.frozen or {}
        mine = frozen.get('selected_answer')
        theirs = frozen.get('opponent_answer')
        print('\n' + '-' * 50)
        print(f"You: {'(time out)' if mine in (None, TIMEOUT_ANSWER) else mine}"
              f" | Opponent: {'(time out)' if theirs == TIMEOUT_ANSWER else theirs}")
        self.print_scores()
        print('-' * 50)

    def handle_command(self, text: str) -> bool:
        """Run a command. Returns False when text is not a command."""
        parts = text.split()
        if not parts:
            return True
        cmd, args = parts[0].lower(), parts[1:]
        duel_id = self.duel_id
        question = self.view.get('question') or {}

        if cmd == 'help':
            print(HELP)
        elif cmd == 'status':
            self.print_scores()
        elif cmd == 'stop':
            self.call(self.client.stop, duel_id)
        elif cmd == 'hint':
            if question.get('options'):
                self.call(self.client.request_options_hint, duel_id, question['options'])
            else:
                self.call(self.client.request_typing_hint, duel_id)
        elif cmd == 'give' and args:
            hint_b = self.view.get('hint_b')
            if hint_b and hint_b['requested_by'] != self.role:
                self.call(self.client.accept_options_hint, duel_id, args[0])
            else:
                self.call(self.client.accept_typing_hint, duel_id, args[0])
        elif cmd == 'letter' and args and args[0].isdigit():
            self.call(self.client.provide_letter, duel_id, int(args[0]) - 1)
        elif cmd == 'eliminate' and args:
            options = (self.view.get('hint_b') or {}).get('options', [])
            if args[0].isdigit() and 0 < int(args[0]) <= len(options):
                self.call(self.client.eliminate_option, duel_id, options[int(args[0]) - 1])
            else:
                print("  ! Pick an option number")
        elif cmd == 'sabotage' and args and args[0] in SABOTAGE_EFFECTS:
            self.call(self.client.sabotage, duel_id, args[0])
        elif cmd == 'pause':
            self.call(self.client.pause_countdown, duel_id)
        elif cmd == 'unpause':
            self.call(self.client.request_unpause, duel_id)
        elif cmd == 'confirm':
            self.call(self.client.confirm_unpause, duel_id)
        elif cmd == 'skip':
            self.call(self.client.skip_countdown, duel_id)
        else:
            return False
        return True

    def handle_pending(self):
        if self.role == 'opponent':
            choice = input(f"{self.view['per_role']['challenger']['user_id']} challenges you. Accept? [y/n] ")
            if choice.strip().lower().startswith('y'):
                self.call(self.client.accept, self.duel_id)
            else:
                self.call(self.client.reject, self.duel_id)
        else:
            print("Waiting for your opponent to accept...")
            time.sleep(self.poll_interval)

    def send_timeout(self):
        """Settle the expired question; retried on the next turn until the server accepts it."""
        print("Time's up!")
        if self.call(self.client.timeout, self.duel_id, self.question_index()) is not None:
            self.tracker.timeout_sent()

    def play_turn(self):
        me = self.view['per_role'][self.role]
        question = self.view.get('question')
        now = self.clock()

        if self.view['mode'] == 'classic' and self.tracker.should_fire_timeout(now):
            self.send_timeout()
            return

        if question is None or me['answered']:
            text = input('Waiting for opponent... [Enter]=refresh ').strip()
            if text and not self.handle_command(text):
                print("  ! Unknown command (type 'help')")
            return

        self.print_question(question)
        text = input('==> ').strip()
        if text.lower() == 'exit':
            raise KeyboardInterrupt
        if not text or self.handle_command(text):
            return

        if self.view['mode'] == 'classic' and self.tracker.should_fire_timeout(self.clock()):
            self.send_timeout()
            return

        answer = text
        if question['options'] and text.isdigit() and 0 < int(text) <= len(question['options']):
            answer = question['options'][int(text) - 1]
        self.tracker.lock(answer)
        self.call(self.client.submit_answer, self.duel_id, answer, self.question_index())

    def run(self):
        """Run the main application loop."""
        print(f"Connecting to {self.client.base_url} as {self.client.user_id}")
        print(HELP)

        while True:
            if not self.refresh():
                time.sleep(self.poll_interval)
                continue

            status = self.view['status']
            if status == 'pending':
                self.handle_pending()
                continue
            if status in TERMINAL_STATUSES:
                if self.tracker.frozen:
                    self.print_reveal()
                print(f"\nDuel {status}.")
                self.print_scores()
                self.print_summary()
                return

            if self.tracker.phase == TRANSITION:
                if self._revealed_index != self.tracker.active_index:
                    self._revealed_index = self.tracker.active_index
                    self.print_reveal()
                countdown = self.tracker.countdown(self.clock())
                paused = self.view['timer']['countdown_paused_by']
                label = 'paused' if paused else f"{countdown or 0:.0f}s"
                text = input(f"Next question in {label} [Enter]=refresh, pause/skip/unpause/confirm ").strip()
                if text:
                    self.handle_command(text)
                continue

            self.play_turn()
