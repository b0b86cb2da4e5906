"""Core engine components: board, evaluator and search."""

from .board import Board, Move, Piece
from .evaluator import Evaluator
from .search import SearchEngine, SearchResult
