"""FastAPI server for the vocabulary duel."""

import asyncio
import logging
import os
import traceback

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from typing import Optional

logger = logging.getLogger(__name__)

from duel.errors import DuelError
from duel.models import Theme, WordEntry

from server.file_storage import FileStorage
from server.memory_storage import MemoryStorage
from server.postgres_storage import PostgresStorage
from server.service import DuelService


# Pydantic models for API
class WordModel(BaseModel):
    prompt: str
    correct_answer: str
    wrong_answers: list[str] = []


class CreateThemeRequest(BaseModel):
    theme_id: str
    name: str = ""
    words: list[WordModel]


class CreateDuelRequest(BaseModel):
    challenger_id: str
    opponent_id: str
    theme_id: str
    mode: str = "classic"
    difficulty_preset: str = "easy"
    word_count: Optional[int] = None


class ActorRequest(BaseModel):
    user_id: str


class AnswerRequest(ActorRequest):
    answer: str
    question_index: Optional[int] = None


class TimeoutRequest(ActorRequest):
    question_index: Optional[int] = None


class TypingHintRequest(ActorRequest):
    typed_letters: list[str] = []
    revealed_positions: list[int] = []


class HintAcceptRequest(ActorRequest):
    hint_type: str


class ProvideLetterRequest(ActorRequest):
    position: int


class OptionsHintRequest(ActorRequest):
    options: list[str]


class EliminateRequest(ActorRequest):
    option: str


class SabotageRequest(ActorRequest):
    effect: str


STATUS_CODES = {
    'unauthorized': 403,
    'not_found': 404,
    'invalid_state': 409,
    'version_conflict': 409,
    'precondition_failed': 422,
}


# Global state (in production, use proper DI)
service: DuelService = None
sweep_task: asyncio.Task = None


def create_storage():
    """Pick the storage backend from DUEL_STORAGE (memory, file or postgres)."""
    storage_type = os.environ.get('DUEL_STORAGE', 'file')
    if storage_type == 'memory':
        logger.info("Using in-memory storage")
        return MemoryStorage()
    if storage_type == 'postgres':
        logger.info("Using PostgreSQL storage")
        return PostgresStorage()
    logger.info("Using file storage")
    return FileStorage(os.environ.get('DUEL_STATE_DIR'))


async def sweep_loop(interval: float) -> None:
    """Periodically cancel challenges that were never answered."""
    while True:
        await asyncio.sleep(interval)
        try:
            loop = asyncio.get_event_loop()
            cancelled = await loop.run_in_executor(None, service.sweep)
            if cancelled:
                logger.info(f"Sweep cancelled {len(cancelled)} expired duels")
        except Exception as e:
            logger.error(f"Sweep failed: {e}")


app = FastAPI(title="Lingoduel API", description="Two-player vocabulary duel API")


@app.exception_handler(DuelError)
async def duel_error_handler(request: Request, exc: DuelError):
    return JSONResponse(status_code=STATUS_CODES.get(exc.kind, 400), content=exc.to_dict())


@app.on_event("startup")
async def startup():
    """Initialize storage and the background sweep on startup."""
    global service, sweep_task

    if service is None:
        service = DuelService(create_storage())

    if os.environ.get('DUEL_SEED_THEMES') == '1':
        from scripts.seed_themes import seed
        seed(service.storage)

    interval = float(os.environ.get('DUEL_SWEEP_INTERVAL_SECONDS', '300'))
    if interval > 0:
        sweep_task = asyncio.create_task(sweep_loop(interval))


@app.on_event("shutdown")
async def shutdown():
    if sweep_task is not None:
        sweep_task.cancel()


def run_action(duel_id: str, user_id: str, action: str, **params) -> dict:
    """Run an action; domain errors go to the handler, anything else is a 500."""
    try:
        return service.run(duel_id, user_id, action, **params)
    except DuelError:
        raise
    except Exception as e:
        logger.error(f"Error in {action} on duel {duel_id}: {type(e).__name__}: {e}")
        logger.error(traceback.format_exc())
        raise HTTPException(status_code=500, detail=f"Internal error: {type(e).__name__}: {str(e)}")


# Themes
@app.post("/api/themes")
async def create_theme(request: CreateThemeRequest):
    theme = Theme(request.theme_id, request.name,
                  [WordEntry(w.prompt, w.correct_answer, w.wrong_answers) for w in request.words])
    service.save_theme(theme)
    return theme.to_dict()


@app.get("/api/themes/{theme_id}")
async def get_theme(theme_id: str):
    """Theme summary. Answers stay on the server."""
    theme = service.get_theme(theme_id)
    return {
        'theme_id': theme.theme_id,
        'name': theme.name,
        'word_count': len(theme),
        'prompts': [w.prompt for w in theme.words]
    }


# Duel lifecycle
@app.post("/api/duels")
async def create_duel(request: CreateDuelRequest):
    return service.create(request.challenger_id, request.opponent_id, request.theme_id,
                          request.mode, request.difficulty_preset, request.word_count)


@app.get("/api/duels/{duel_id}")
async def get_duel(duel_id: str, user_id: str = None):
    return service.view(duel_id, user_id)


@app.post("/api/duels/{duel_id}/accept")
async def accept_duel(duel_id: str, request: ActorRequest):
    return run_action(duel_id, request.user_id, 'accept')


@app.post("/api/duels/{duel_id}/reject")
async def reject_duel(duel_id: str, request: ActorRequest):
    return run_action(duel_id, request.user_id, 'reject')


@app.post("/api/duels/{duel_id}/cancel")
async def cancel_duel(duel_id: str, request: ActorRequest):
    return run_action(duel_id, request.user_id, 'cancel')


@app.post("/api/duels/{duel_id}/stop")
async def stop_duel(duel_id: str, request: ActorRequest):
    return run_action(duel_id, request.user_id, 'stop')


# Answers
@app.post("/api/duels/{duel_id}/answer")
async def submit_answer(duel_id: str, request: AnswerRequest):
    return run_action(duel_id, request.user_id, 'answer',
                      answer=request.answer, question_index=request.question_index)


@app.post("/api/duels/{duel_id}/timeout")
async def timeout_answer(duel_id: str, request: TimeoutRequest):
    return run_action(duel_id, request.user_id, 'timeout', question_index=request.question_index)


# Typing hints (channel A)
@app.post("/api/duels/{duel_id}/hint-a/request")
async def request_typing_hint(duel_id: str, request: TypingHintRequest):
    return run_action(duel_id, request.user_id, 'hint_a_request',
                      typed_letters=request.typed_letters,
                      revealed_positions=request.revealed_positions)


@app.post("/api/duels/{duel_id}/hint-a/accept")
async def accept_typing_hint(duel_id: str, request: HintAcceptRequest):
    return run_action(duel_id, request.user_id, 'hint_a_accept', hint_type=request.hint_type)


@app.post("/api/duels/{duel_id}/hint-a/provide")
async def provide_letter(duel_id: str, request: ProvideLetterRequest):
    return run_action(duel_id, request.user_id, 'hint_a_provide', position=request.position)


@app.post("/api/duels/{duel_id}/hint-a/update")
async def update_typing_hint(duel_id: str, request: TypingHintRequest):
    return run_action(duel_id, request.user_id, 'hint_a_update',
                      typed_letters=request.typed_letters,
                      revealed_positions=request.revealed_positions)


@app.post("/api/duels/{duel_id}/hint-a/cancel")
async def cancel_typing_hint(duel_id: str, request: ActorRequest):
    return run_action(duel_id, request.user_id, 'hint_a_cancel')


# Option hints (channel B)
@app.post("/api/duels/{duel_id}/hint-b/request")
async def request_options_hint(duel_id: str, request: OptionsHintRequest):
    return run_action(duel_id, request.user_id, 'hint_b_request', options=request.options)


@app.post("/api/duels/{duel_id}/hint-b/accept")
async def accept_options_hint(duel_id: str, request: HintAcceptRequest):
    return run_action(duel_id, request.user_id, 'hint_b_accept', hint_type=request.hint_type)


@app.post("/api/duels/{duel_id}/hint-b/eliminate")
async def eliminate_option(duel_id: str, request: EliminateRequest):
    return run_action(duel_id, request.user_id, 'hint_b_eliminate', option=request.option)


@app.post("/api/duels/{duel_id}/hint-b/cancel")
async def cancel_options_hint(duel_id: str, request: ActorRequest):
    return run_action(duel_id, request.user_id, 'hint_b_cancel')


# Sabotage
@app.post("/api/duels/{duel_id}/sabotage")
async def send_sabotage(duel_id: str, request: SabotageRequest):
    return run_action(duel_id, request.user_id, 'sabotage', effect=request.effect)


# Countdown
@app.post("/api/duels/{duel_id}/countdown/pause")
async def pause_countdown(duel_id: str, request: ActorRequest):
    return run_action(duel_id, request.user_id, 'countdown_pause')


@app.post("/api/duels/{duel_id}/countdown/request-unpause")
async def request_unpause(duel_id: str, request: ActorRequest):
    return run_action(duel_id, request.user_id, 'countdown_request_unpause')


@app.post("/api/duels/{duel_id}/countdown/confirm-unpause")
async def confirm_unpause(duel_id: str, request: ActorRequest):
    return run_action(duel_id, request.user_id, 'countdown_confirm_unpause')


@app.post("/api/duels/{duel_id}/countdown/skip")
async def skip_countdown(duel_id: str, request: ActorRequest):
    return run_action(duel_id, request.user_id, 'countdown_skip')


# Events and maintenance
@app.get("/api/duels/{duel_id}/events")
async def get_duel_events(duel_id: str, limit: int = 50):
    """Get recent events for a duel."""
    if not hasattr(service.storage, 'get_duel_events'):
        return {"error": "Event logging not available with current storage"}

    events = service.storage.get_duel_events(duel_id, limit)
    # Convert datetime objects to strings for JSON serialization
    for event in events:
        if 'timestamp' in event and hasattr(event['timestamp'], 'isoformat'):
            event['timestamp'] = event['timestamp'].isoformat()
    return {"events": events}


@app.post("/api/admin/sweep")
async def run_sweep():
    return {"cancelled": service.sweep()}


def create_app():
    """Factory function for creating the app (useful for testing)."""
    return app
