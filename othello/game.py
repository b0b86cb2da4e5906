"""Rule engine: turn sequencing, the return-capture rule, passes, undo and scoring.

Every public operation returns a :class:`TurnResult`. Caller mistakes (an
illegal cell, passing while moves exist, undo with no history...) come back as
``applied=False`` with a :class:`Rejection` instead of raising.
"""

import random
import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Tuple, Union

from othello.config import CONFIG, DifficultyConfig
from othello.core.board import Board, Cell, Move, Piece
from othello.core.search import SearchEngine, SearchResult


class GameState(Enum):
    MENU = "menu"
    PLAYING = "playing"
    AWAITING_RETURN_SELECTION = "awaiting_return_selection"
    ENDED = "ended"


class GameMode(Enum):
    PLAYER_VS_PLAYER = "player_vs_player"
    PLAYER_VS_AI = "player_vs_ai"


class Rejection(Enum):
    NOT_PLAYING = "not_playing"
    ILLEGAL_MOVE = "illegal_move"
    RETURN_PENDING = "return_pending"
    NO_RETURN_PENDING = "no_return_pending"
    NOT_A_CANDIDATE = "not_a_candidate"
    MOVES_AVAILABLE = "moves_available"
    EMPTY_HISTORY = "empty_history"
    SEARCH_IN_PROGRESS = "search_in_progress"
    NOT_COMPUTER_TURN = "not_computer_turn"
    COMPUTER_TURN = "computer_turn"


@dataclass(frozen=True)
class PendingReturn:
    row: int
    col: int
    candidates: Tuple[Cell, ...]


@dataclass(frozen=True)
class TurnState:
    current_player: Piece
    pending_return: Optional[PendingReturn] = None


@dataclass(frozen=True)
class TurnResult:
    applied: bool
    entered_return_mode: bool = False
    game_ended: bool = False
    pass_required: bool = False
    rejection: Optional[Rejection] = None
    move: Optional[Cell] = None
    returned: Optional[Cell] = None

    @classmethod
    def rejected(cls, reason: Rejection) -> "TurnResult":
        return cls(applied=False, rejection=reason)


@dataclass
class HistoryEntry:
    board: Board  # independent copy taken before the ply
    player: Piece
    time_used: Dict[Piece, float]
    move: Optional[Cell]  # None for a pass
    returned: Optional[Cell] = None

    def describe(self, number: int) -> str:
        text = f"{number}. {self.player.label}: "
        if self.move is None:
            return text + "pass"
        text += f"({self.move[0]},{self.move[1]})"
        if self.returned is not None:
            text += f" return ({self.returned[0]},{self.returned[1]})"
        return text


@dataclass(frozen=True)
class GameOutcome:
    winner: Optional[Piece]  # None means a draw
    black_count: int
    white_count: int
    black_time: float
    white_time: float
    decided_by_time: bool = False


@dataclass
class _PendingMove:
    move: Move
    snapshot: HistoryEntry


def _new_clock() -> Dict[Piece, float]:
    return {Piece.BLACK: 0.0, Piece.WHITE: 0.0}


class Game:
    def __init__(
        self,
        difficulty: Union[str, DifficultyConfig, None] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.time,
    ):
        self.board = Board()
        self.state = GameState.MENU
        self.mode: Optional[GameMode] = None
        self.human_color: Optional[Piece] = None
        self.current_player = Piece.BLACK
        self.difficulty = self._resolve_difficulty(difficulty)
        self.rng = rng or random.Random()
        self.clock = clock

        self.history: List[HistoryEntry] = []
        self.time_used = _new_clock()
        self.move_start = clock()
        self.valid_moves: List[Move] = self.board.legal_moves(self.current_player)
        self.last_move: Optional[Cell] = None
        self.last_search: Optional[SearchResult] = None
        self.ai_thinking = False
        self._pending: Optional[_PendingMove] = None

    @staticmethod
    def _resolve_difficulty(value) -> DifficultyConfig:
        if isinstance(value, DifficultyConfig):
            return value
        return CONFIG.search.difficulty(value)

    # ── Lifecycle ────────────────────────────────────────────────────────

    def new_game(
        self,
        mode: Union[GameMode, str],
        human_color: Optional[Piece] = None,
        difficulty: Union[str, DifficultyConfig, None] = None,
    ) -> Tuple[TurnState, Board]:
        """Start a game; Black always moves first.

        Bad arguments raise before anything changes, so a game in progress
        survives a rejected request.
        """
        mode = GameMode(mode)
        if difficulty is not None:
            difficulty = self._resolve_difficulty(difficulty)

        self.mode = mode
        if mode is GameMode.PLAYER_VS_AI:
            self.human_color = human_color or Piece.BLACK
        else:
            self.human_color = None
        if difficulty is not None:
            self.difficulty = difficulty
        self._reset()
        return self.turn_state, self.board.clone()

    def rematch(self, switch_colors: bool = True) -> TurnResult:
        """Fresh board in the same mode, optionally swapping the human's colour."""
        if self.mode is None:
            return TurnResult.rejected(Rejection.NOT_PLAYING)
        if switch_colors and self.mode is GameMode.PLAYER_VS_AI:
            self.human_color = self.human_color.opponent
        self._reset()
        return TurnResult(applied=True)

    def set_position(self, board: Board, current_player: Piece = Piece.BLACK):
        """Continue play from an arbitrary position (history and clocks are cleared)."""
        if self.mode is None:
            self.mode = GameMode.PLAYER_VS_PLAYER
        self._reset()
        self.board = board.clone()
        self.current_player = current_player
        self.valid_moves = self.board.legal_moves(current_player)
        if not self.valid_moves and not self.board.has_legal_move(current_player.opponent):
            self.state = GameState.ENDED

    def back_to_menu(self):
        self.state = GameState.MENU

    def _reset(self):
        self.board.reset()
        self.state = GameState.PLAYING
        self.current_player = Piece.BLACK
        self.history = []
        self.time_used = _new_clock()
        self.move_start = self.clock()
        self.valid_moves = self.board.legal_moves(self.current_player)
        self.last_move = None
        self.last_search = None
        self._pending = None

    # ── Queries ──────────────────────────────────────────────────────────

    @property
    def turn_state(self) -> TurnState:
        pending = None
        if self._pending is not None:
            move = self._pending.move
            pending = PendingReturn(move.row, move.col, move.captured)
        return TurnState(self.current_player, pending)

    @property
    def pending_return(self) -> Optional[PendingReturn]:
        return self.turn_state.pending_return

    @property
    def must_pass(self) -> bool:
        return self.state is GameState.PLAYING and not self.valid_moves

    @property
    def is_computer_turn(self) -> bool:
        return (
            self.mode is GameMode.PLAYER_VS_AI
            and self.state in (GameState.PLAYING, GameState.AWAITING_RETURN_SELECTION)
            and self.current_player is not self.human_color
        )

    def legal_moves(self) -> List[Move]:
        if self.state is not GameState.PLAYING:
            return []
        return list(self.valid_moves)

    def history_lines(self) -> List[str]:
        return [entry.describe(i) for i, entry in enumerate(self.history, start=1)]

    def outcome(self) -> GameOutcome:
        """More pieces wins; equal counts go to the player who used less time."""
        black, white = self.board.count_pieces()
        black_time = self.time_used[Piece.BLACK]
        white_time = self.time_used[Piece.WHITE]
        decided_by_time = False
        if black > white:
            winner = Piece.BLACK
        elif white > black:
            winner = Piece.WHITE
        elif black_time < white_time:
            winner, decided_by_time = Piece.BLACK, True
        elif white_time < black_time:
            winner, decided_by_time = Piece.WHITE, True
        else:
            winner = None
        return GameOutcome(winner, black, white, black_time, white_time, decided_by_time)

    # ── Human-facing operations ──────────────────────────────────────────

    def submit_move(self, row: int, col: int) -> TurnResult:
        if self.ai_thinking:
            return TurnResult.rejected(Rejection.SEARCH_IN_PROGRESS)
        if self.is_computer_turn:
            return TurnResult.rejected(Rejection.COMPUTER_TURN)
        return self._submit_move(row, col)

    def submit_return_selection(self, row: int, col: int) -> TurnResult:
        if self.ai_thinking:
            return TurnResult.rejected(Rejection.SEARCH_IN_PROGRESS)
        if self.is_computer_turn:
            return TurnResult.rejected(Rejection.COMPUTER_TURN)
        return self._submit_return(row, col)

    def pass_turn(self) -> TurnResult:
        if self.ai_thinking:
            return TurnResult.rejected(Rejection.SEARCH_IN_PROGRESS)
        if self.is_computer_turn:
            return TurnResult.rejected(Rejection.COMPUTER_TURN)
        return self._pass_turn()

    def undo(self) -> TurnResult:
        """Step back exactly one committed ply. There is no redo."""
        if self.ai_thinking:
            return TurnResult.rejected(Rejection.SEARCH_IN_PROGRESS)
        if self.state is GameState.AWAITING_RETURN_SELECTION:
            return TurnResult.rejected(Rejection.RETURN_PENDING)
        if self.state is not GameState.PLAYING:
            return TurnResult.rejected(Rejection.NOT_PLAYING)
        if not self.history:
            return TurnResult.rejected(Rejection.EMPTY_HISTORY)

        entry = self.history.pop()
        self.board = entry.board
        self.current_player = entry.player
        self.time_used = dict(entry.time_used)
        self.move_start = self.clock()
        self.valid_moves = self.board.legal_moves(self.current_player)
        self.last_move = None
        return TurnResult(applied=True, move=entry.move, returned=entry.returned)

    # ── Computer side ────────────────────────────────────────────────────

    def play_computer_turn(self) -> TurnResult:
        """Search, move, resolve a return if one is triggered, or pass."""
        if not self.is_computer_turn:
            return TurnResult.rejected(Rejection.NOT_COMPUTER_TURN)
        if self.ai_thinking:
            return TurnResult.rejected(Rejection.SEARCH_IN_PROGRESS)

        self.ai_thinking = True
        try:
            self.last_search = None
            engine = SearchEngine(difficulty=self.difficulty, rng=self.rng)

            if self._pending is not None:
                return self._computer_return(engine)

            if not self.valid_moves:
                return self._pass_turn()

            move, self.last_search = engine.choose_move(self.board, self.current_player)
            result = self._submit_move(move.row, move.col)
            if result.entered_return_mode:
                return self._computer_return(engine)
            return result
        finally:
            self.ai_thinking = False

    def _computer_return(self, engine: SearchEngine) -> TurnResult:
        pending = self._pending
        cell = engine.choose_return(pending.snapshot.board, pending.move, self.current_player)
        return self._submit_return(*cell)

    # ── Transitions ──────────────────────────────────────────────────────

    def _snapshot(self, move: Optional[Cell]) -> HistoryEntry:
        return HistoryEntry(self.board.clone(), self.current_player, dict(self.time_used), move)

    def _submit_move(self, row: int, col: int) -> TurnResult:
        if self.state is GameState.AWAITING_RETURN_SELECTION:
            return TurnResult.rejected(Rejection.RETURN_PENDING)
        if self.state is not GameState.PLAYING:
            return TurnResult.rejected(Rejection.NOT_PLAYING)

        move = next((m for m in self.valid_moves if m.row == row and m.col == col), None)
        if move is None:
            return TurnResult.rejected(Rejection.ILLEGAL_MOVE)

        snapshot = self._snapshot(move.cell)
        self.board.apply(move, self.current_player)
        self.last_move = move.cell

        if len(move.captured) >= 2:
            # Everything stays flipped until the mover chooses what to give back.
            self._pending = _PendingMove(move, snapshot)
            self.state = GameState.AWAITING_RETURN_SELECTION
            return TurnResult(applied=True, entered_return_mode=True, move=move.cell)

        self.history.append(snapshot)
        return self._advance_turn(move=move.cell)

    def _submit_return(self, row: int, col: int) -> TurnResult:
        if self.state is not GameState.AWAITING_RETURN_SELECTION or self._pending is None:
            return TurnResult.rejected(Rejection.NO_RETURN_PENDING)

        pending = self._pending
        cell = (row, col)
        if cell not in pending.move.captured:
            return TurnResult.rejected(Rejection.NOT_A_CANDIDATE)

        self.board.apply(pending.move, self.current_player, cell)
        pending.snapshot.returned = cell
        self.history.append(pending.snapshot)
        self._pending = None
        self.state = GameState.PLAYING
        return self._advance_turn(move=pending.move.cell, returned=cell)

    def _pass_turn(self) -> TurnResult:
        if self.state is GameState.AWAITING_RETURN_SELECTION:
            return TurnResult.rejected(Rejection.RETURN_PENDING)
        if self.state is not GameState.PLAYING:
            return TurnResult.rejected(Rejection.NOT_PLAYING)
        if self.valid_moves:
            return TurnResult.rejected(Rejection.MOVES_AVAILABLE)

        self.history.append(self._snapshot(None))
        return self._advance_turn()

    def _advance_turn(self, move: Optional[Cell] = None, returned: Optional[Cell] = None) -> TurnResult:
        now = self.clock()
        self.time_used[self.current_player] += now - self.move_start
        self.move_start = now
        self.current_player = self.current_player.opponent
        self.valid_moves = self.board.legal_moves(self.current_player)

        if not self.valid_moves:
            # Both sides stuck ends the game; one stuck side only has to pass.
            if not self.board.has_legal_move(self.current_player.opponent):
                self.state = GameState.ENDED
                return TurnResult(applied=True, game_ended=True, move=move, returned=returned)
            return TurnResult(applied=True, pass_required=True, move=move, returned=returned)
        return TurnResult(applied=True, move=move, returned=returned)
