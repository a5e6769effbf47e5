"""
Tic-Tac-Toe Board and Rules

The 3x3 board is a flat sequence of 9 cells in row-major order:

    0 | 1 | 2
    ---------
    3 | 4 | 5
    ---------
    6 | 7 | 8

A cell is None (empty), 'X' (human) or 'O' (AI). The rules functions accept a
Board or any plain 9-length list/tuple, so the AI can run them on its own
scratch copy.
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

HUMAN_SYMBOL = 'X'
AI_SYMBOL = 'O'
EMPTY = None

BOARD_SIZE = 9

# Checked in this order; the first complete line decides the winner
WIN_CONDITIONS = (
    (0, 1, 2), (3, 4, 5), (6, 7, 8),  # Rows
    (0, 3, 6), (1, 4, 7), (2, 5, 8),  # Columns
    (0, 4, 8), (2, 4, 6),             # Diagonals
)

STATUS_IN_PROGRESS = 'in_progress'
STATUS_WIN = 'win'
STATUS_DRAW = 'draw'


def opponent(symbol):
    """Return the other player's symbol."""
    if symbol == HUMAN_SYMBOL:
        return AI_SYMBOL
    if symbol == AI_SYMBOL:
        return HUMAN_SYMBOL
    raise ValueError(f"Unknown symbol: {symbol!r}")


@dataclass(frozen=True)
class Outcome:
    """
    Classification of a board: still in progress, won by a symbol along a line,
    or drawn. Always derived from a board, never kept alongside one.
    """
    status: str
    winner: Optional[str] = None
    line: Optional[Tuple[int, int, int]] = None

    @classmethod
    def in_progress(cls) -> "Outcome":
        return cls(STATUS_IN_PROGRESS)

    @classmethod
    def won_by(cls, symbol: str, line: Tuple[int, int, int]) -> "Outcome":
        return cls(STATUS_WIN, symbol, tuple(line))

    @classmethod
    def drawn(cls) -> "Outcome":
        return cls(STATUS_DRAW)

    @property
    def is_terminal(self) -> bool:
        return self.status != STATUS_IN_PROGRESS

    def to_dict(self) -> dict:
        return {
            'status': self.status,
            'winner': self.winner,
            'winningLine': list(self.line) if self.line else [],
        }


class Board:
    """
    Read-only view of the 9 cells plus a single mutation, place().

    Behaves like a sequence (indexing, len, iteration) so it can be handed
    straight to evaluate() and the AI.
    """

    def __init__(self, cells: Optional[Sequence[Optional[str]]] = None):
        if cells is None:
            cells = [EMPTY] * BOARD_SIZE
        if len(cells) != BOARD_SIZE:
            raise ValueError(f"A board has exactly {BOARD_SIZE} cells, got {len(cells)}")
        for cell in cells:
            if cell not in (EMPTY, HUMAN_SYMBOL, AI_SYMBOL):
                raise ValueError(f"Invalid cell value: {cell!r}")
        self._cells = list(cells)

    @property
    def cells(self) -> Tuple[Optional[str], ...]:
        """Snapshot of the cells."""
        return tuple(self._cells)

    def is_empty_cell(self, index) -> bool:
        """True when index is an int in 0..8 pointing at an empty cell."""
        return is_valid_index(index) and self._cells[index] is EMPTY

    def place(self, index: int, symbol: str) -> None:
        """
        Put symbol on the board.

        Raises:
            ValueError: If index is outside 0..8, the cell is taken or the
                symbol is not 'X' or 'O'
        """
        if symbol not in (HUMAN_SYMBOL, AI_SYMBOL):
            raise ValueError(f"Unknown symbol: {symbol!r}")
        if not is_valid_index(index):
            raise ValueError(f"Invalid index: {index}. Must be between 0 and 8.")
        if self._cells[index] is not EMPTY:
            raise ValueError(f"Cell {index} is already occupied")
        self._cells[index] = symbol

    def __getitem__(self, index):
        return self._cells[index]

    def __len__(self):
        return BOARD_SIZE

    def __iter__(self):
        return iter(self._cells)

    def __eq__(self, other):
        if isinstance(other, Board):
            return self._cells == other._cells
        return NotImplemented

    def __repr__(self):
        return f"Board({self._cells!r})"

    def __str__(self):
        rows = []
        for i in range(0, BOARD_SIZE, 3):
            rows.append(" | ".join(cell or " " for cell in self._cells[i:i + 3]))
        return "\n---------\n".join(rows)


def is_valid_index(index) -> bool:
    # bool is an int subclass but never a cell index
    return isinstance(index, int) and not isinstance(index, bool) and 0 <= index < BOARD_SIZE


def check_winner(board) -> Optional[Tuple[str, Tuple[int, int, int]]]:
    """
    Find the first complete line.

    Returns:
        tuple: (symbol, line) for the first line in WIN_CONDITIONS holding
        three equal symbols, or None
    """
    for line in WIN_CONDITIONS:
        a, b, c = line
        if board[a] is not EMPTY and board[a] == board[b] == board[c]:
            return board[a], line
    return None


def is_board_full(board) -> bool:
    return all(cell is not EMPTY for cell in board)


def available_moves(board):
    """Indices of empty cells, in ascending order."""
    return [i for i, cell in enumerate(board) if cell is EMPTY]


def evaluate(board) -> Outcome:
    """
    Classify a board.

    Args:
        board: A Board or any 9-length sequence of None/'X'/'O'

    Returns:
        Outcome: win for the first complete line, draw for a full board
        without one, in progress otherwise
    """
    result = check_winner(board)
    if result is not None:
        symbol, line = result
        return Outcome.won_by(symbol, line)
    if is_board_full(board):
        return Outcome.drawn()
    return Outcome.in_progress()
