'''
Fusdle API

Endpoints:
GET  /api/puzzles/today                 -> today's puzzle (no answer, no hints)
GET  /api/puzzles/archive               -> past puzzles with answers
POST /api/puzzles/{id}/guess            -> evaluate a guess
GET  /api/puzzles/{id}/hints/{index}    -> one hint
GET  /api/puzzles/{id}/answer           -> answer (past puzzles, or revealAnswer=true)
POST /api/share                         -> share grid from a list of verdicts

Play sessions (server-side game state):
POST /api/sessions                      -> start playing a puzzle (hard mode unlocks after a normal game)
GET  /api/sessions/{id}                 -> state & history (idle sessions expire)
POST /api/sessions/{id}/guess           -> submit a guess
POST /api/sessions/{id}/hint            -> reveal the next hint (one per guess)
POST /api/sessions/{id}/give-up         -> give up, reveals the answer
GET  /api/sessions/{id}/share           -> shareable result text

Extras:
GET  /api/stats, POST /api/stats/reset  -> scoreboard & streaks
GET  /api/status                        -> health check

Routes under /api/puzzles/{id} and POST /api/sessions take ?difficulty=normal|hard and ?puzzleType=fusion.
'''

import logging
from contextlib import asynccontextmanager
from datetime import date
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
from sqlalchemy.exc import SQLAlchemyError

from . import config, time_client
from .bootstrap_db import bootstrap            # dev-only: create tables + sample puzzles
from .db import get_db                         # SQLAlchemy Session dependency
from .engine import GuessVerdict, evaluate
from .models import Puzzle as PuzzleORM
from .repository import PuzzleRepository, effective_difficulty, to_archive_out, to_puzzle_out
from .share import build_share_grid, build_share_text, share_cells
from .store import PlaySession, SessionStore
from .schemas import (
    AnswerOut,
    ArchivePuzzleOut,
    AttemptOut,
    GuessRequest,
    GuessResponse,
    HintOut,
    PuzzleOut,
    SessionCreate,
    SessionGuessOut,
    SessionHintOut,
    SessionShareOut,
    SessionState,
    ShareOut,
    ShareRequest,
    StatsOut,
    StatusOut,
)

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Dev convenience: tables + sample puzzles locally
    if config.APP_ENV == "local":
        bootstrap()
    yield


app = FastAPI(title="Fusdle API", version="1.0.0", lifespan=lifespan)

# Play sessions and the scoreboard, reached through get_sessions
app.state.sessions = SessionStore(
    max_attempts=config.MAX_ATTEMPTS,
    session_ttl_seconds=config.SESSION_TTL_SECONDS,
)

# The web client is served from another origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Error mapping ---

@app.exception_handler(RequestValidationError)
async def _bad_request(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Missing/empty guess and malformed bodies are a 400, not FastAPI's default 422
    return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})


@app.exception_handler(SQLAlchemyError)
async def _repository_failure(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.exception("Repository failure on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"detail": "Failed to process request"})


# --- Dependencies ---

def get_repository(session=Depends(get_db)) -> PuzzleRepository:
    return PuzzleRepository(session)


def get_sessions(request: Request) -> SessionStore:
    return request.app.state.sessions


def get_today() -> date:
    return time_client.today()


def _find_puzzle(
    repo: PuzzleRepository,
    puzzle_id: int,
    difficulty: Optional[str],
    puzzle_type: Optional[str],
) -> PuzzleORM:
    if puzzle_type == "fusion":
        puzzle = repo.get_fusion(puzzle_id)
        if puzzle is None:
            raise HTTPException(status_code=404, detail="Fusion puzzle not found")
        return puzzle

    puzzle = repo.get(puzzle_id, difficulty)
    if puzzle is None:
        raise HTTPException(status_code=404, detail="Puzzle not found")
    return puzzle


def _to_guess_response(verdict: GuessVerdict, answer: Optional[str] = None) -> GuessResponse:
    return GuessResponse(
        is_correct=verdict.is_correct,
        partial_match_feedback=verdict.feedback_message,
        matched_word=verdict.matched_word,
        match_type=verdict.match_type,
        has_correct_words_wrong_order=verdict.match_type == "wrong-order",
        answer=answer if verdict.is_correct else None,
    )


def _to_session_state(session: PlaySession) -> SessionState:
    return SessionState(
        session_id=session.id,
        puzzle_id=session.puzzle_id,
        difficulty=session.difficulty,
        is_fusion_twist=session.is_fusion_twist,
        status=session.status,
        attempts=len(session.attempts),
        attempts_left=session.attempts_left,
        history=[
            AttemptOut(
                attempt_index=index,
                guess=attempt.guess,
                is_correct=attempt.verdict.is_correct,
                match_type=attempt.verdict.match_type,
                matched_word=attempt.verdict.matched_word,
                feedback_message=attempt.verdict.feedback_message,
            )
            for index, attempt in enumerate(session.attempts)
        ],
        partial_match_indices=session.partial_match_indices,
        revealed_hints=list(session.revealed_hints),
        total_hints=len(session.hints),
        answer=session.answer if session.is_finished else None,
    )


def _require_session(sessions: SessionStore, session_id: str) -> PlaySession:
    session = sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


# ---------------- Puzzle routes ----------------

@app.get("/api/puzzles/today", response_model=PuzzleOut, summary="Today's puzzle (answer hidden)")
def get_today_puzzle(
    difficulty: str = "normal",
    repo: PuzzleRepository = Depends(get_repository),
    today: date = Depends(get_today),
) -> PuzzleOut:
    puzzle = repo.get_today(today, difficulty)
    if puzzle is None:
        raise HTTPException(status_code=404, detail="No puzzles available")
    return to_puzzle_out(puzzle)


@app.get("/api/puzzles/archive", response_model=list[ArchivePuzzleOut], summary="Past puzzles with answers")
def get_archive(
    limit: int = Query(config.ARCHIVE_LIMIT, ge=1, le=365),
    repo: PuzzleRepository = Depends(get_repository),
    today: date = Depends(get_today),
) -> list[ArchivePuzzleOut]:
    return [to_archive_out(p) for p in repo.get_archive(today, limit)]


@app.post("/api/puzzles/{puzzle_id}/guess", response_model=GuessResponse, summary="Evaluate a guess")
def submit_guess(
    puzzle_id: int,
    payload: GuessRequest,
    difficulty: str = "normal",
    puzzle_type: Optional[str] = Query(None, alias="puzzleType"),
    repo: PuzzleRepository = Depends(get_repository),
) -> GuessResponse:
    puzzle = _find_puzzle(repo, puzzle_id, difficulty, puzzle_type)
    verdict = evaluate(payload.guess, puzzle.answer)
    logger.debug("Puzzle #%s (%s): %s", puzzle.puzzle_number, puzzle.difficulty, verdict.match_type)
    return _to_guess_response(verdict, puzzle.answer)


@app.get("/api/puzzles/{puzzle_id}/hints/{index}", response_model=HintOut, summary="Get one hint")
def get_hint(
    puzzle_id: int,
    index: int,
    difficulty: str = "normal",
    puzzle_type: Optional[str] = Query(None, alias="puzzleType"),
    repo: PuzzleRepository = Depends(get_repository),
) -> HintOut:
    puzzle = _find_puzzle(repo, puzzle_id, difficulty, puzzle_type)
    if index < 0 or index >= len(puzzle.hints):
        raise HTTPException(status_code=404, detail="Hint not available")
    return HintOut(hint=puzzle.hints[index])


@app.get("/api/puzzles/{puzzle_id}/answer", response_model=AnswerOut, summary="Reveal an answer")
def get_answer(
    puzzle_id: int,
    difficulty: str = "normal",
    puzzle_type: Optional[str] = Query(None, alias="puzzleType"),
    reveal_answer: bool = Query(False, alias="revealAnswer"),
    repo: PuzzleRepository = Depends(get_repository),
    today: date = Depends(get_today),
) -> AnswerOut:
    puzzle = _find_puzzle(repo, puzzle_id, difficulty, puzzle_type)
    if puzzle.date < today or reveal_answer:
        return AnswerOut(answer=puzzle.answer)
    raise HTTPException(status_code=403, detail="Answer is only available for past puzzles")


@app.post("/api/share", response_model=ShareOut, summary="Build a share grid from verdicts")
def share(payload: ShareRequest) -> ShareOut:
    # Only match_type matters for the grid
    verdicts = [
        GuessVerdict(is_correct=match_type == "exact", match_type=match_type)
        for match_type in payload.match_types
    ]
    return ShareOut(
        cells=share_cells(verdicts, payload.terminal_status),
        grid=build_share_grid(verdicts, payload.terminal_status, payload.hints_used, payload.total_hints),
    )


# ---------------- Session routes ----------------

@app.post("/api/sessions", response_model=SessionState, summary="Start playing a puzzle")
def start_session(
    payload: SessionCreate,
    repo: PuzzleRepository = Depends(get_repository),
    sessions: SessionStore = Depends(get_sessions),
) -> SessionState:
    puzzle = _find_puzzle(repo, payload.puzzle_id, payload.difficulty, payload.puzzle_type)
    difficulty = effective_difficulty(puzzle.difficulty)
    if difficulty == "hard" and not sessions.get_stats().hard_mode_unlocked:
        raise HTTPException(status_code=403, detail="Finish a normal puzzle to unlock hard mode.")

    session = sessions.create(
        puzzle_id=puzzle.puzzle_number,
        puzzle_date=puzzle.date,
        answer=puzzle.answer,
        hints=puzzle.hints,
        difficulty=difficulty,
        is_fusion_twist=puzzle.is_fusion_twist,
    )
    return _to_session_state(session)


@app.get("/api/sessions/{session_id}", response_model=SessionState, summary="Get session state")
def get_session(
    session_id: str,
    sessions: SessionStore = Depends(get_sessions),
) -> SessionState:
    return _to_session_state(_require_session(sessions, session_id))


@app.post("/api/sessions/{session_id}/guess", response_model=SessionGuessOut, summary="Guess within a session")
def session_guess(
    session_id: str,
    payload: GuessRequest,
    sessions: SessionStore = Depends(get_sessions),
    today: date = Depends(get_today),
) -> SessionGuessOut:
    session, verdict = sessions.guess(session_id, payload.guess, today)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    if verdict is None:
        raise HTTPException(status_code=409, detail=f"Session {session.status}. No more guesses allowed.")
    return SessionGuessOut(
        verdict=_to_guess_response(verdict, session.answer),
        session=_to_session_state(session),
    )


@app.post("/api/sessions/{session_id}/hint", response_model=SessionHintOut, summary="Reveal the next hint")
def session_hint(
    session_id: str,
    sessions: SessionStore = Depends(get_sessions),
) -> SessionHintOut:
    status, hint = sessions.reveal_hint(session_id)
    if status == "not_found":
        raise HTTPException(status_code=404, detail="Session not found")
    if status == "finished":
        raise HTTPException(status_code=409, detail="Session finished. No hint available.")
    if status == "locked":
        raise HTTPException(status_code=409, detail="Make another guess to unlock a hint.")
    if status == "exhausted":
        raise HTTPException(status_code=409, detail="No more hints available.")

    # ok
    session = _require_session(sessions, session_id)
    return SessionHintOut(
        hint=hint,
        hint_index=len(session.revealed_hints) - 1,
        session=_to_session_state(session),
    )


@app.post("/api/sessions/{session_id}/give-up", response_model=SessionState, summary="Give up and reveal the answer")
def session_give_up(
    session_id: str,
    sessions: SessionStore = Depends(get_sessions),
    today: date = Depends(get_today),
) -> SessionState:
    session = sessions.give_up(session_id, today)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return _to_session_state(session)


@app.get("/api/sessions/{session_id}/share", response_model=SessionShareOut, summary="Shareable result")
def session_share(
    session_id: str,
    sessions: SessionStore = Depends(get_sessions),
) -> SessionShareOut:
    session = _require_session(sessions, session_id)
    if not session.is_finished:
        raise HTTPException(status_code=409, detail="Finish the puzzle before sharing.")

    verdicts = session.verdicts
    hints_used = len(session.revealed_hints)
    total_hints = len(session.hints)
    return SessionShareOut(
        text=build_share_text(
            verdicts,
            session.status,
            hints_used,
            total_hints,
            puzzle_date=session.puzzle_date,
            difficulty=session.difficulty,
            puzzle_number=session.puzzle_id,
            flawless_streak=sessions.get_stats().flawless_streak,
        ),
        grid=build_share_grid(verdicts, session.status, hints_used, total_hints),
        partial_match_indices=session.partial_match_indices,
    )


# ---------------- Scoreboard ----------------

@app.get("/api/stats", response_model=StatsOut, summary="Get scoreboard")
def get_stats(sessions: SessionStore = Depends(get_sessions)) -> StatsOut:
    stats = sessions.get_stats()
    return StatsOut(
        games_started=stats.games_started,
        games_won=stats.games_won,
        games_lost=stats.games_lost,
        games_gave_up=stats.games_gave_up,
        current_streak=stats.current_streak,
        best_streak=stats.best_streak,
        flawless_streak=stats.flawless_streak,
        last_won_on=stats.last_won_on,
        normal_won=stats.normal_won,
        hard_won=stats.hard_won,
        hard_mode_unlocked=stats.hard_mode_unlocked,
    )


@app.post("/api/stats/reset", summary="Reset the scoreboard")
def reset_stats(sessions: SessionStore = Depends(get_sessions)) -> dict:
    sessions.reset_stats()
    return {"message": "Stats reset."}


@app.get("/api/status", response_model=StatusOut, summary="Health check")
def status() -> StatusOut:
    return StatusOut(status="ok", environment=config.APP_ENV)
