"""REST API client for the lingoduel server."""

import requests
from typing import Optional


class DuelAPIClient:
    """Client for communicating with the lingoduel REST API."""

    def __init__(self, base_url: str = "http://localhost:8000", user_id: str = "default",
                 timeout: float = 10.0):
        self.base_url = base_url.rstrip('/')
        self.user_id = user_id
        self.timeout = timeout
        self.session = requests.Session()

    def _get(self, endpoint: str, params: dict = None) -> dict:
        """Make a GET request."""
        if params is None:
            params = {}
        params['user_id'] = self.user_id
        response = self.session.get(f"{self.base_url}{endpoint}", params=params, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def _post(self, endpoint: str, data: dict = None) -> dict:
        """Make a POST request."""
        if data is None:
            data = {}
        data['user_id'] = self.user_id
        response = self.session.post(f"{self.base_url}{endpoint}", json=data, timeout=self.timeout)
        response.raise_for_status()
        return response.json()

    def _duel(self, duel_id: str, action: str, data: dict = None) -> dict:
        return self._post(f"/api/duels/{duel_id}/{action}", data)

    def get_theme(self, theme_id: str) -> dict:
        return self._get(f"/api/themes/{theme_id}")

    def create_duel(self, opponent_id: str, theme_id: str, mode: str = 'classic',
                    difficulty_preset: str = 'easy', word_count: Optional[int] = None) -> dict:
        """Challenge opponent_id on a theme."""
        return self._post("/api/duels", {
            'challenger_id': self.user_id,
            'opponent_id': opponent_id,
            'theme_id': theme_id,
            'mode': mode,
            'difficulty_preset': difficulty_preset,
            'word_count': word_count
        })

    def get_duel(self, duel_id: str) -> dict:
        """Read model of the duel as seen by this user."""
        return self._get(f"/api/duels/{duel_id}")

    def accept(self, duel_id: str) -> dict:
        return self._duel(duel_id, 'accept')

    def reject(self, duel_id: str) -> dict:
        return self._duel(duel_id, 'reject')

    def cancel(self, duel_id: str) -> dict:
        return self._duel(duel_id, 'cancel')

    def stop(self, duel_id: str) -> dict:
        return self._duel(duel_id, 'stop')

    def submit_answer(self, duel_id: str, answer: str, question_index: Optional[int] = None) -> dict:
        return self._duel(duel_id, 'answer', {'answer': answer, 'question_index': question_index})

    def timeout(self, duel_id: str, question_index: Optional[int] = None) -> dict:
        return self._duel(duel_id, 'timeout', {'question_index': question_index})

    def request_typing_hint(self, duel_id: str, typed_letters: list = None,
                            revealed_positions: list = None) -> dict:
        return self._duel(duel_id, 'hint-a/request', {
            'typed_letters': typed_letters or [],
            'revealed_positions': revealed_positions or []
        })

    def accept_typing_hint(self, duel_id: str, hint_type: str) -> dict:
        return self._duel(duel_id, 'hint-a/accept', {'hint_type': hint_type})

    def provide_letter(self, duel_id: str, position: int) -> dict:
        return self._duel(duel_id, 'hint-a/provide', {'position': position})

    def update_typing_hint(self, duel_id: str, typed_letters: list = None,
                           revealed_positions: list = None) -> dict:
        return self._duel(duel_id, 'hint-a/update', {
            'typed_letters': typed_letters or [],
            'revealed_positions': revealed_positions or []
        })

    def cancel_typing_hint(self, duel_id: str) -> dict:
        return self._duel(duel_id, 'hint-a/cancel')

    def request_options_hint(self, duel_id: str, options: list) -> dict:
        return self._duel(duel_id, 'hint-b/request', {'options': options})

    def accept_options_hint(self, duel_id: str, hint_type: str) -> dict:
        return self._duel(duel_id, 'hint-b/accept', {'hint_type': hint_type})

    def eliminate_option(self, duel_id: str, option: str) -> dict:
        return self._duel(duel_id, 'hint-b/eliminate', {'option': option})

    def cancel_options_hint(self, duel_id: str) -> dict:
        return self._duel(duel_id, 'hint-b/cancel')

    def sabotage(self, duel_id: str, effect: str) -> dict:
        return self._duel(duel_id, 'sabotage', {'effect': effect})

    def pause_countdown(self, duel_id: str) -> dict:
        return self._duel(duel_id, 'countdown/pause')

    def request_unpause(self, duel_id: str) -> dict:
        return self._duel(duel_id, 'countdown/request-unpause')

    def confirm_unpause(self, duel_id: str) -> dict:
        return self._duel(duel_id, 'countdown/confirm-unpause')

    def skip_countdown(self, duel_id: str) -> dict:
        return self._duel(duel_id, 'countdown/skip')
