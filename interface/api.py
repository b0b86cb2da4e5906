"""FastAPI REST interface for the game."""

import threading

from fastapi import FastAPI, HTTPException
from pydantic import BaseModel
from typing import Optional

from othello.config import CONFIG
from othello.core.board import Board, Piece
from othello.game import Game, GameMode, GameState, TurnResult

app = FastAPI(title=CONFIG.ui.engine_name, version="1.0.0")

# Shared game instance; the lock keeps human input out while the computer searches.
game = Game()
_game_lock = threading.Lock()


class NewGameRequest(BaseModel):
    mode: GameMode = GameMode.PLAYER_VS_PLAYER
    human_color: Optional[str] = None  # "black" or "white"
    difficulty: Optional[str] = None


class CellRequest(BaseModel):
    row: int
    col: int


class PositionRequest(BaseModel):
    board: str  # 8 rows of X / O / .
    turn: str = "black"


class RematchRequest(BaseModel):
    switch_colors: bool = True


def _parse_color(value: Optional[str]) -> Optional[Piece]:
    if value is None:
        return None
    piece = Piece.__members__.get(value.upper())
    if piece is None or piece is Piece.EMPTY:
        raise HTTPException(status_code=400, detail=f"Invalid colour: {value}")
    return piece


def _check_cell(req: CellRequest):
    if not (0 <= req.row < 8 and 0 <= req.col < 8):
        raise HTTPException(status_code=400, detail=f"Cell out of range: ({req.row},{req.col})")


def _result(result: TurnResult) -> dict:
    if not result.applied:
        raise HTTPException(status_code=400, detail=result.rejection.value)
    return {
        "applied": True,
        "entered_return_mode": result.entered_return_mode,
        "game_ended": result.game_ended,
        "pass_required": result.pass_required,
        "move": list(result.move) if result.move else None,
        "returned": list(result.returned) if result.returned else None,
        "state": _state(),
    }


def _state() -> dict:
    black, white = game.board.count_pieces()
    pending = game.pending_return
    data = {
        "board": str(game.board).splitlines(),
        "state": game.state.value,
        "mode": game.mode.value if game.mode else None,
        "human_color": game.human_color.name.lower() if game.human_color else None,
        "difficulty": game.difficulty.name,
        "turn": game.current_player.name.lower(),
        "black_count": black,
        "white_count": white,
        "black_time": round(game.time_used[Piece.BLACK], 3),
        "white_time": round(game.time_used[Piece.WHITE], 3),
        "legal_moves": [[m.row, m.col] for m in game.legal_moves()],
        "return_candidates": [list(c) for c in pending.candidates] if pending else [],
        "history": game.history_lines(),
        "outcome": None,
    }
    if game.state is GameState.ENDED:
        outcome = game.outcome()
        data["outcome"] = {
            "winner": outcome.winner.name.lower() if outcome.winner else None,
            "decided_by_time": outcome.decided_by_time,
        }
    return data


@app.get("/state")
def get_state():
    with _game_lock:
        return _state()


@app.post("/new-game")
def new_game(req: NewGameRequest = NewGameRequest()):
    color = _parse_color(req.human_color)
    with _game_lock:
        try:
            game.new_game(req.mode, human_color=color, difficulty=req.difficulty)
        except KeyError:
            raise HTTPException(status_code=400, detail=f"Unknown difficulty: {req.difficulty}")
        return _state()


@app.post("/position")
def set_position(req: PositionRequest):
    player = _parse_color(req.turn)
    with _game_lock:
        try:
            board = Board.from_string(req.board)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=f"Invalid board: {e}")
        game.set_position(board, player)
        return _state()


@app.post("/move")
def make_move(req: CellRequest):
    _check_cell(req)
    with _game_lock:
        return _result(game.submit_move(req.row, req.col))


@app.post("/return")
def select_return(req: CellRequest):
    _check_cell(req)
    with _game_lock:
        return _result(game.submit_return_selection(req.row, req.col))


@app.post("/pass")
def pass_turn():
    with _game_lock:
        return _result(game.pass_turn())


@app.post("/undo")
def undo():
    with _game_lock:
        return _result(game.undo())


@app.post("/computer-move")
def computer_move():
    with _game_lock:
        result = game.play_computer_turn()
        search = game.last_search
        data = _result(result)
        data["search"] = None if search is None else {
            "depth_reached": search.depth_reached,
            "positions_evaluated": search.positions_evaluated,
            "elapsed": round(search.elapsed, 3),
            "randomized": search.randomized,
        }
        return data


@app.post("/rematch")
def rematch(req: RematchRequest = RematchRequest()):
    with _game_lock:
        _result(game.rematch(switch_colors=req.switch_colors))
        return _state()
