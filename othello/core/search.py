import random
import threading
import time
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple, Union

from othello.config import CONFIG, DifficultyConfig
from othello.core.board import CORNERS, EDGES, Board, Cell, Move, Piece
from othello.core.evaluator import Evaluator
from othello.core.utils import print_info

INF = float("inf")

_CORNER_SET = frozenset(CORNERS)
_EDGE_SET = frozenset(EDGES)


@dataclass
class SearchResult:
    move: Optional[Move]
    depth_reached: int = 0
    positions_evaluated: int = 0
    elapsed: float = 0.0
    score: Optional[float] = None
    randomized: bool = False


def order_moves(moves: List[Move]) -> List[Move]:
    """Corners, then edges, then most captures. Stable, so ties keep scan order."""
    def key(move):
        cell = move.cell
        if cell in _CORNER_SET:
            rank = 0
        elif cell in _EDGE_SET:
            rank = 1
        else:
            rank = 2
        return (rank, -len(move.captured))

    return sorted(moves, key=key)


class SearchEngine:
    def __init__(
        self,
        evaluator: Optional[Evaluator] = None,
        difficulty: Union[str, DifficultyConfig, None] = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.time,
    ):
        if not isinstance(difficulty, DifficultyConfig):
            # a tier name, or None for the configured default
            difficulty = CONFIG.search.difficulty(difficulty)
        self.difficulty = difficulty
        self.rng = rng or random.Random()
        self.evaluator = evaluator or Evaluator(jitter=self.difficulty.eval_jitter, rng=self.rng)
        self.clock = clock
        self.check_interval = max(1, CONFIG.search.deadline_check_interval)

        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._search_lock = threading.Lock()
        self._deadline: Optional[float] = None
        self._aborted = False
        self.nodes = 0

    # ── Entry points used by the rule engine ─────────────────────────────

    def choose_move(self, board: Board, player: Piece) -> Tuple[Optional[Move], SearchResult]:
        """Pick a move for `player`, honouring the tier's random override."""
        moves = board.legal_moves(player)
        if not moves:
            return None, SearchResult(None)

        p = self.difficulty.random_override_probability
        if p > 0 and self.rng.random() < p:
            move = self.rng.choice(moves)
            return move, SearchResult(move, randomized=True)

        result = self.search_best_move(board, player)
        return result.move, result

    def choose_return(self, board: Board, move: Move, player: Piece) -> Cell:
        """Pick the cell to give back. `board` is the position before `move`."""
        p = self.difficulty.random_override_probability
        if p > 0 and self.rng.random() < p:
            return self.rng.choice(move.captured)
        return self.best_return_piece(board, move, player)

    def best_return_piece(self, board: Board, move: Move, player: Piece) -> Cell:
        """One-ply lookahead: the return cell that leaves `player` best off."""
        best_cell = move.captured[0]
        best_score = -INF
        for cell in move.captured:
            trial = board.clone()
            trial.apply(move, player, cell)
            score = self.evaluator.evaluate(trial, player)
            if score > best_score:
                best_score = score
                best_cell = cell
        return best_cell

    # ── Iterative deepening ──────────────────────────────────────────────

    def search_best_move(self, board: Board, player: Piece, callback: Optional[Callable] = None) -> SearchResult:
        with self._search_lock:
            self._stop_event.clear()
            return self._iterative_deepening(board.clone(), player, callback)

    def start_search(self, board: Board, player: Piece, callback: Optional[Callable] = None):
        if self._thread and self._thread.is_alive(): return
        self._stop_event.clear()
        search_board = board.clone()

        def worker():
            with self._search_lock:
                result = self._iterative_deepening(search_board, player, callback)
            if callback: callback(result.move, -1, result.score)

        self._thread = threading.Thread(target=worker, daemon=True)
        self._thread.start()

    def stop(self):
        self._stop_event.set()
        if self._thread:
            self._thread.join(timeout=0.2)

    def _iterative_deepening(self, board: Board, player: Piece, callback: Optional[Callable]) -> SearchResult:
        self.nodes = 0
        self._aborted = False
        self._deadline = None
        start_time = self.clock()
        budget = self.difficulty.time_budget_ms / 1000.0

        result = SearchResult(None)
        moves = order_moves(board.legal_moves(player))
        if not moves:
            return result

        for depth in range(1, self.difficulty.max_depth + 1):
            if self._stop_event.is_set(): break

            depth_best = None
            depth_score = -INF
            alpha = -INF
            for move in moves:
                child = self._expand(board, move, player)
                score = self._minimax(child, depth - 1, alpha, INF, False, player)
                if self._aborted:
                    break
                if score > depth_score:
                    depth_score = score
                    depth_best = move
                alpha = max(alpha, score)

            # An unfinished depth never replaces the previous answer.
            if self._aborted:
                break

            result.move = depth_best
            result.score = depth_score
            result.depth_reached = depth

            elapsed = self.clock() - start_time
            print_info(depth, depth_score, self.nodes, elapsed, depth_best)
            if callback: callback(depth_best, depth, depth_score)

            if elapsed > budget:
                break
            # From here on a deeper iteration may be cut short.
            self._deadline = start_time + budget

        result.positions_evaluated = self.nodes
        result.elapsed = self.clock() - start_time
        return result

    def _should_abort(self) -> bool:
        if self._stop_event.is_set():
            return True
        return self._deadline is not None and self.clock() > self._deadline

    def _expand(self, board: Board, move: Move, mover: Piece) -> Board:
        child = board.clone()
        returned = None
        if self.difficulty.use_return_optimization and len(move.captured) >= 2:
            returned = self.best_return_piece(board, move, mover)
        child.apply(move, mover, returned)
        return child

    def _minimax(self, board: Board, depth: int, alpha: float, beta: float, maximizing: bool, player: Piece) -> float:
        self.nodes += 1
        if self._aborted:
            return 0.0
        if self.nodes % self.check_interval == 0 and self._should_abort():
            self._aborted = True
            return 0.0

        if depth == 0 or board.is_full():
            return self.evaluator.evaluate(board, player)

        mover = player if maximizing else player.opponent
        moves = board.legal_moves(mover)
        if not moves:
            if not board.has_legal_move(mover.opponent):
                return self.evaluator.evaluate(board, player)
            # Forced pass: the other side moves, depth is not consumed.
            return self._minimax(board, depth, alpha, beta, not maximizing, player)

        if maximizing:
            value = -INF
            for move in order_moves(moves):
                score = self._minimax(self._expand(board, move, mover), depth - 1, alpha, beta, False, player)
                value = max(value, score)
                alpha = max(alpha, score)
                if beta <= alpha:
                    break
            return value

        value = INF
        for move in order_moves(moves):
            score = self._minimax(self._expand(board, move, mover), depth - 1, alpha, beta, True, player)
            value = min(value, score)
            beta = min(beta, score)
            if beta <= alpha:
                break
        return value


def compute_move(
    board: Board,
    player: Piece,
    difficulty: Union[str, DifficultyConfig, None] = None,
    rng: Optional[random.Random] = None,
) -> Tuple[Optional[Move], SearchResult]:
    """Synchronous move choice for the computer side."""
    return SearchEngine(difficulty=difficulty, rng=rng).choose_move(board, player)


def compute_return_selection(
    board: Board,
    move: Move,
    player: Piece,
    difficulty: Union[str, DifficultyConfig, None] = None,
    rng: Optional[random.Random] = None,
) -> Cell:
    """Return-cell choice for the computer side; `board` is the position before `move`."""
    return SearchEngine(difficulty=difficulty, rng=rng).choose_return(board, move, player)
