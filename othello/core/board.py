"""8x8 Othello board with capture scanning and the return-capture variant."""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple

BOARD_SIZE = 8

Cell = Tuple[int, int]

# E, SE, S, SW, W, NW, N, NE
DIRECTIONS = ((0, 1), (1, 1), (1, 0), (1, -1), (0, -1), (-1, -1), (-1, 0), (-1, 1))

CORNERS = ((0, 0), (0, 7), (7, 0), (7, 7))
EDGES = tuple(
    cell
    for i in range(1, BOARD_SIZE - 1)
    for cell in ((0, i), (7, i), (i, 0), (i, 7))
)


class Piece(Enum):
    BLACK = "X"
    WHITE = "O"
    EMPTY = "."

    @property
    def opponent(self) -> "Piece":
        if self is Piece.BLACK:
            return Piece.WHITE
        if self is Piece.WHITE:
            return Piece.BLACK
        return Piece.EMPTY

    @property
    def label(self) -> str:
        return self.name.capitalize()


class IllegalReturnError(ValueError):
    """Raised when the returned cell is not one of the move's captured cells."""


@dataclass(frozen=True)
class Move:
    row: int
    col: int
    captured: Tuple[Cell, ...]

    @property
    def cell(self) -> Cell:
        return (self.row, self.col)


def on_board(row: int, col: int) -> bool:
    return 0 <= row < BOARD_SIZE and 0 <= col < BOARD_SIZE


class Board:
    def __init__(self, grid: Optional[List[List[Piece]]] = None):
        """Initialize from a grid or the standard starting position."""
        if grid is not None:
            self.grid = [list(row) for row in grid]
        else:
            self.grid = [[Piece.EMPTY] * BOARD_SIZE for _ in range(BOARD_SIZE)]
            self.reset()

    @classmethod
    def from_string(cls, text: str) -> "Board":
        """Parse 8 rows of X / O / '.' characters (whitespace ignored)."""
        symbols = [ch for ch in text if not ch.isspace()]
        if len(symbols) != BOARD_SIZE * BOARD_SIZE:
            raise ValueError(f"Expected 64 cells, got {len(symbols)}")
        grid = [
            [Piece(s) for s in symbols[r * BOARD_SIZE:(r + 1) * BOARD_SIZE]]
            for r in range(BOARD_SIZE)
        ]
        return cls(grid)

    def reset(self):
        """Reset to the initial position."""
        for row in self.grid:
            row[:] = [Piece.EMPTY] * BOARD_SIZE
        self.grid[3][3] = Piece.BLACK
        self.grid[4][4] = Piece.BLACK
        self.grid[3][4] = Piece.WHITE
        self.grid[4][3] = Piece.WHITE

    def get_piece(self, row: int, col: int) -> Piece:
        if on_board(row, col):
            return self.grid[row][col]
        return Piece.EMPTY

    def set_piece(self, row: int, col: int, piece: Piece):
        if on_board(row, col):
            self.grid[row][col] = piece

    def count_pieces(self) -> Tuple[int, int]:
        """Return (black, white) piece counts."""
        black = white = 0
        for row in self.grid:
            for piece in row:
                if piece is Piece.BLACK:
                    black += 1
                elif piece is Piece.WHITE:
                    white += 1
        return black, white

    def is_full(self) -> bool:
        return all(piece is not Piece.EMPTY for row in self.grid for piece in row)

    def captured_cells(self, row: int, col: int, player: Piece) -> List[Cell]:
        """Cells that would flip if `player` played at (row, col)."""
        if self.grid[row][col] is not Piece.EMPTY:
            return []
        opponent = player.opponent
        captured = []
        for dr, dc in DIRECTIONS:
            r, c = row + dr, col + dc
            run = []
            while on_board(r, c) and self.grid[r][c] is opponent:
                run.append((r, c))
                r += dr
                c += dc
            # a run touching the edge without a closing piece captures nothing
            if run and on_board(r, c) and self.grid[r][c] is player:
                captured.extend(run)
        return captured

    def legal_moves(self, player: Piece) -> List[Move]:
        """Legal moves in row-major order."""
        moves = []
        for row in range(BOARD_SIZE):
            for col in range(BOARD_SIZE):
                if self.grid[row][col] is not Piece.EMPTY:
                    continue
                captured = self.captured_cells(row, col, player)
                if captured:
                    moves.append(Move(row, col, tuple(captured)))
        return moves

    def has_legal_move(self, player: Piece) -> bool:
        for row in range(BOARD_SIZE):
            for col in range(BOARD_SIZE):
                if self.grid[row][col] is Piece.EMPTY and self.captured_cells(row, col, player):
                    return True
        return False

    def apply(self, move: Move, player: Piece, returned: Optional[Cell] = None):
        """Place `player` at the move cell and flip its captures.

        `returned`, when given, must be one of `move.captured`; that cell ends
        up with the opponent's colour instead of flipping to `player`.
        """
        if returned is not None and tuple(returned) not in move.captured:
            raise IllegalReturnError(f"{returned} is not among the captured cells of {move.cell}")
        self.grid[move.row][move.col] = player
        for r, c in move.captured:
            self.grid[r][c] = player
        if returned is not None:
            r, c = returned
            self.grid[r][c] = player.opponent

    def clone(self) -> "Board":
        return Board(self.grid)

    def __eq__(self, other) -> bool:
        return isinstance(other, Board) and self.grid == other.grid

    def __str__(self) -> str:
        return "\n".join("".join(piece.value for piece in row) for row in self.grid)

    def print_board(self):
        """Print ASCII representation with row and column indices."""
        print("  " + " ".join(str(c) for c in range(BOARD_SIZE)))
        for r, row in enumerate(self.grid):
            print(f"{r} " + " ".join(piece.value for piece in row))
