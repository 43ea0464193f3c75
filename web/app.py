"""
FastAPI web application for chessbot.

Exposes a single REST endpoint (POST /api/move) that accepts a FEN position
and a time limit, runs the engine, and returns the chosen move with its
score and search statistics.

Architecture notes:
- Sync endpoint (not async): FastAPI runs sync handlers in a thread pool,
  which is the right place for a CPU-bound search.
- Stateless per request: the client sends the full FEN each time.
"""

import logging
import threading

import chess
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, field_validator

from chessbot.config import load_config
from chessbot.search import search

logging.basicConfig(level=logging.INFO)
_log = logging.getLogger(__name__)

_CONFIG = load_config()

app = FastAPI(title="chessbot", version="1.0.0")


class MoveRequest(BaseModel):
    """
    Client request to the engine.

    Fields:
        fen: Full FEN string of the current position.
        time_limit: Seconds the engine may spend on this move, clamped to
                    [0.1, 30.0].
    """

    fen: str
    time_limit: float = 1.0

    @field_validator("time_limit")
    @classmethod
    def clamp_time_limit(cls, v: float) -> float:
        return max(0.1, min(v, 30.0))


class MoveResponse(BaseModel):
    """
    Engine response.

    Fields:
        move: Chosen move in UCI notation.
        fen: FEN after the move.
        score: Score of the move from the engine's side.
        depth: Deepest ply reached.
        nodes: Moves evaluated.
        leverage: Engine's material over the opponent's before the move.
    """

    move: str
    fen: str
    score: int
    depth: int
    nodes: int
    leverage: float


@app.post("/api/move", response_model=MoveResponse)
def api_move(request: MoveRequest) -> MoveResponse:
    """
    Compute the engine's move for the given position.

    Raises:
        HTTPException 400: Malformed FEN or game already over.
        HTTPException 500: The search failed.
    """
    try:
        board = chess.Board(request.fen)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=f"Invalid FEN: {exc}") from exc

    if board.is_game_over():
        raise HTTPException(status_code=400, detail=f"Game is already over: {board.result()}")

    time_limit_ms = request.time_limit * 1000
    try:
        result = search(
            board,
            time_limit_ms,
            config=_CONFIG,
            stop_event=threading.Event(),
            move_time_ms=time_limit_ms,
        )
    except Exception as exc:
        _log.exception("Engine search failed for FEN=%s", request.fen)
        raise HTTPException(status_code=500, detail=f"Engine error: {exc}") from exc

    _log.info(
        "Move=%s score=%d depth=%d nodes=%d fen=%s",
        result.move.uci(),
        result.score,
        result.depth,
        result.nodes,
        request.fen[:40],
    )

    board.push(result.move)
    return MoveResponse(
        move=result.move.uci(),
        fen=board.fen(),
        score=result.score,
        depth=result.depth,
        nodes=result.nodes,
        leverage=result.leverage,
    )
