"""
Go AI Service - FastAPI Application
Provides AI move selection, legality checks and scoring endpoints
"""

import logging
import os
import time
from typing import Dict, List, Optional

from fastapi import FastAPI, HTTPException, Response
from fastapi.middleware.cors import CORSMiddleware
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from pydantic import BaseModel, Field

from . import __version__
from .ai.profiles import list_skill_profiles
from .board_manager import BoardManager
from .bot import GoAIBot
from .errors import GoAIError
from .game_engine import GameEngine, MoveOptions
from .metrics import AI_MOVE_LATENCY, AI_MOVE_REQUESTS, level_label
from .models import (
    GameSessionView,
    KoInfo,
    Point,
    SessionDelta,
    SkillProfile,
    Stone,
)
from .session import validate_session

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title="Go AI Service",
    description="Heuristic Go move selection with skill levels 1-10",
    version=__version__
)

cors_origins = os.getenv("CORS_ORIGINS", "*").split(",")
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_bot: Optional[GoAIBot] = None


def get_bot() -> GoAIBot:
    """Process-wide bot, built lazily so settings are read at first use."""
    global _bot
    if _bot is None:
        _bot = GoAIBot()
    return _bot


class MoveRequest(BaseModel):
    """Request model for one AI turn"""
    session: GameSessionView
    level: int = Field(ge=1, le=10, default=5)
    seed: Optional[int] = Field(
        None,
        ge=0,
        le=0x7FFFFFFF,
        description="Optional RNG seed for deterministic AI behavior"
    )


class MoveResponse(BaseModel):
    """Response model for one AI turn"""
    delta: Optional[SessionDelta]
    selected_move: Optional[Point] = Field(None, alias="selectedMove")
    thinking_time_ms: int = Field(alias="thinkingTimeMs")
    level: int
    source: str

    class Config:
        populate_by_name = True


class RulesEvalRequest(BaseModel):
    """Request model for a legality check"""
    board: List[List[Optional[Stone]]]
    point: Point
    player: Stone
    ko_info: Optional[KoInfo] = Field(None, alias="koInfo")
    move_history_length: int = Field(0, ge=0, alias="moveHistoryLength")
    is_single_player: bool = Field(False, alias="isSinglePlayer")

    class Config:
        populate_by_name = True


class RulesEvalResponse(BaseModel):
    """Response model for a legality check"""
    valid: bool
    reason: Optional[str] = None
    next_board: Optional[List[List[Optional[Stone]]]] = Field(
        None, alias="nextBoard"
    )
    captured_stones: List[Point] = Field(
        default_factory=list, alias="capturedStones"
    )
    ko_info: Optional[KoInfo] = Field(None, alias="koInfo")

    class Config:
        populate_by_name = True


class ScoreRequest(BaseModel):
    board: List[List[Optional[Stone]]]
    captures: Dict[Stone, int] = Field(
        default_factory=lambda: {Stone.BLACK: 0, Stone.WHITE: 0}
    )


class ScoreResponse(BaseModel):
    black: int
    white: int
    winner: Optional[Stone] = None


@app.get("/")
async def root():
    """Health check endpoint"""
    return {
        "service": "Go AI Service",
        "status": "running",
        "version": __version__
    }


@app.get("/health")
async def health_check():
    """Health check for container orchestration"""
    return {"status": "healthy"}


@app.get("/metrics")
async def metrics():
    """Prometheus metrics endpoint."""
    data = generate_latest()
    return Response(content=data, media_type=CONTENT_TYPE_LATEST)


@app.get("/ai/profiles", response_model=List[SkillProfile])
async def get_profiles():
    """The ten skill profiles, weakest first."""
    return list_skill_profiles()


@app.post(
    "/ai/move",
    response_model=MoveResponse,
    response_model_by_alias=True,
    response_model_exclude_unset=True,
)
async def get_ai_move(request: MoveRequest):
    """
    Select and commit one AI turn for the session's current player.

    Args:
        request: MoveRequest with the session snapshot and the level.

    Returns:
        MoveResponse carrying the SessionDelta to apply.
    """
    start_time = time.time()
    labels_level = level_label(request.level)

    try:
        result = await get_bot().play_turn(
            request.session, request.level, seed=request.seed
        )
    except GoAIError as e:
        AI_MOVE_REQUESTS.labels(labels_level, "rejected").inc()
        logger.warning("Rejected /ai/move request: %s", str(e))
        raise HTTPException(status_code=400, detail=e.to_dict())
    except Exception as e:
        duration_seconds = time.time() - start_time
        AI_MOVE_REQUESTS.labels(labels_level, "error").inc()
        AI_MOVE_LATENCY.labels(labels_level).observe(duration_seconds)
        logger.error("Error generating AI move: %s", str(e), exc_info=True)
        raise HTTPException(status_code=500, detail=str(e))

    duration_seconds = time.time() - start_time
    outcome = "skipped" if result.skipped else "success"
    AI_MOVE_REQUESTS.labels(labels_level, outcome).inc()
    AI_MOVE_LATENCY.labels(labels_level).observe(duration_seconds)

    logger.info(
        "AI move: level=%d, time=%dms, source=%s, outcome=%s",
        request.level,
        result.thinking_time_ms,
        result.source.value,
        result.delta.outcome.value if result.delta else "skipped",
    )

    return MoveResponse(
        delta=result.delta,
        selected_move=result.selected_move,
        thinking_time_ms=result.thinking_time_ms,
        level=result.level,
        source=result.source.value,
    )


@app.post(
    "/rules/evaluate_move",
    response_model=RulesEvalResponse,
    response_model_by_alias=True,
)
async def evaluate_move(request: RulesEvalRequest):
    """Check one placement with the legality engine and return the result."""
    try:
        validate_session(GameSessionView(board=request.board))
        options = MoveOptions(
            is_single_player=request.is_single_player,
            opponent_player=(
                request.player.opponent if request.is_single_player else None
            ),
        )
        result = GameEngine.process_move(
            request.board,
            request.point,
            request.player,
            request.ko_info,
            request.move_history_length,
            options,
        )
    except GoAIError as e:
        logger.warning("Rejected /rules/evaluate_move request: %s", str(e))
        raise HTTPException(status_code=400, detail=e.to_dict())
    except Exception as e:
        logger.error(
            "Error in /rules/evaluate_move: %s",
            str(e),
            exc_info=True,
        )
        raise HTTPException(status_code=500, detail=str(e))

    if not result.is_valid:
        return RulesEvalResponse(valid=False, reason=result.reason)
    return RulesEvalResponse(
        valid=True,
        next_board=result.new_board,
        captured_stones=result.captured_stones,
        ko_info=result.new_ko_info,
    )


@app.post("/game/score", response_model=ScoreResponse)
async def score_game(request: ScoreRequest):
    """Area score: stones, single-colour empty regions and captures."""
    try:
        validate_session(GameSessionView(board=request.board))
        scores = BoardManager.area_score(request.board, request.captures)
    except GoAIError as e:
        raise HTTPException(status_code=400, detail=e.to_dict())

    black = scores[Stone.BLACK]
    white = scores[Stone.WHITE]
    winner = None
    if black > white:
        winner = Stone.BLACK
    elif white > black:
        winner = Stone.WHITE
    return ScoreResponse(black=black, white=white, winner=winner)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=int(os.getenv("PORT", "8001")))
