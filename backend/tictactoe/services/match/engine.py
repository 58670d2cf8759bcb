"""Pure 3x3 board logic.

A board is a list of nine cells, each ``EMPTY`` or one of the two marks.
Nothing here touches sessions, sockets or the database.
"""

from typing import List, Optional

X = 'X'
O = 'O'
EMPTY = ''
DRAW = 'draw'
BOARD_SIZE = 9

WINNING_LINES = (
    (0, 1, 2), (3, 4, 5), (6, 7, 8),  # rows
    (0, 3, 6), (1, 4, 7), (2, 5, 8),  # columns
    (0, 4, 8), (2, 4, 6),             # diagonals
)


def empty_board() -> List[str]:
    return [EMPTY] * BOARD_SIZE


def other_mark(mark: str) -> str:
    return O if mark == X else X


def is_cell_index(index) -> bool:
    # bool is an int subclass; JSON true must not address cell 1
    return isinstance(index, int) and not isinstance(index, bool) and 0 <= index < BOARD_SIZE


def apply_move(board: List[str], index: int, mark: str) -> List[str]:
    """Return a copy of ``board`` with ``mark`` placed at ``index``.

    The caller validates the move first; an illegal one raises ValueError.
    """
    if not is_cell_index(index) or board[index] != EMPTY:
        raise ValueError('illegal move: cell %r is not an empty cell' % (index,))
    updated = list(board)
    updated[index] = mark
    return updated


def evaluate(board: List[str]) -> Optional[str]:
    """Return the winning mark, ``DRAW`` for a full board, or None while ongoing."""
    for a, b, c in WINNING_LINES:
        if board[a] and board[a] == board[b] == board[c]:
            return board[a]
    if all(cell != EMPTY for cell in board):
        return DRAW
    return None
