"""Phase-weighted positional evaluator: material, corners, edges, mobility, stability."""

import random
from typing import Dict, Optional, Set

from othello.config import CONFIG, EvalConfig
from othello.core.board import BOARD_SIZE, CORNERS, EDGES, Board, Cell, Piece

# One direction per axis: horizontal, vertical, two diagonals.
AXES = ((0, 1), (1, 0), (1, 1), (1, -1))


class Evaluator:
    def __init__(
        self,
        cfg: Optional[EvalConfig] = None,
        jitter: Optional[float] = None,
        rng: Optional[random.Random] = None,
    ):
        self.cfg = cfg or CONFIG.eval
        self.jitter = jitter
        self.rng = rng or random.Random()

    def evaluate(self, board: Board, player: Piece) -> float:
        """Return the score of `board` from `player`'s point of view."""
        material = self._eval_material(board, player)

        if self.jitter is not None:
            # Deliberately weak play: material plus noise.
            return material + self.rng.random() * self.jitter

        weights = self.phase_weights(board)
        return (
            weights["material"] * material
            + weights["corner"] * self._eval_corners(board, player)
            + weights["edge"] * self._eval_edges(board, player)
            + weights["mobility"] * self._eval_mobility(board, player)
            + weights["stability"] * self._eval_stability(board, player)
        )

    def phase(self, board: Board) -> str:
        black, white = board.count_pieces()
        fill_rate = (black + white) / (BOARD_SIZE * BOARD_SIZE)
        if fill_rate < self.cfg.opening_fill:
            return "opening"
        if fill_rate < self.cfg.midgame_fill:
            return "midgame"
        return "endgame"

    def phase_weights(self, board: Board) -> Dict[str, float]:
        return self.cfg.phase_weights[self.phase(board)]

    def _eval_material(self, board: Board, player: Piece) -> int:
        black, white = board.count_pieces()
        return black - white if player is Piece.BLACK else white - black

    def _eval_corners(self, board: Board, player: Piece) -> int:
        return self._occupancy(board, player, CORNERS, self.cfg.corner_value)

    def _eval_edges(self, board: Board, player: Piece) -> int:
        """Non-corner edge cells only."""
        return self._occupancy(board, player, EDGES, self.cfg.edge_value)

    def _occupancy(self, board, player, cells, value):
        opponent = player.opponent
        score = 0
        for r, c in cells:
            piece = board.grid[r][c]
            if piece is player:
                score += value
            elif piece is opponent:
                score -= value
        return score

    def _eval_mobility(self, board: Board, player: Piece) -> float:
        player_moves = len(board.legal_moves(player))
        opponent_moves = len(board.legal_moves(player.opponent))
        total = player_moves + opponent_moves
        if total == 0:
            return 0.0
        return self.cfg.mobility_scale * (player_moves - opponent_moves) / total

    def _eval_stability(self, board: Board, player: Piece) -> int:
        opponent = player.opponent
        score = 0
        for r, c in self.find_stable_pieces(board):
            if board.grid[r][c] is player:
                score += self.cfg.stable_value
            elif board.grid[r][c] is opponent:
                score -= self.cfg.stable_value
        return score

    def find_stable_pieces(self, board: Board) -> Set[Cell]:
        """Fixed-point closure of stable pieces, seeded by the occupied corners."""
        stable = {(r, c) for r, c in CORNERS if board.grid[r][c] is not Piece.EMPTY}

        grew = True
        while grew:
            grew = False
            for r in range(BOARD_SIZE):
                for c in range(BOARD_SIZE):
                    if board.grid[r][c] is Piece.EMPTY or (r, c) in stable:
                        continue
                    if self._is_stable(board, r, c, stable):
                        stable.add((r, c))
                        grew = True
        return stable

    def _is_stable(self, board: Board, row: int, col: int, stable: Set[Cell]) -> bool:
        """Every axis needs at least one anchored direction."""
        for dr, dc in AXES:
            if not (
                self._anchored(board, row, col, dr, dc, stable)
                or self._anchored(board, row, col, -dr, -dc, stable)
            ):
                return False
        return True

    def _anchored(self, board, row, col, dr, dc, stable) -> bool:
        """Walk outward over occupied cells until the edge or a stable piece of the same colour."""
        color = board.grid[row][col]
        r, c = row + dr, col + dc
        while 0 <= r < BOARD_SIZE and 0 <= c < BOARD_SIZE:
            piece = board.grid[r][c]
            if piece is Piece.EMPTY:
                return False
            if piece is color and (r, c) in stable:
                return True
            r += dr
            c += dc
        return True
