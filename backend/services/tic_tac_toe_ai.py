"""
Tic-Tac-Toe AI

Exhaustive minimax over the 3x3 game tree, searched in full on every move
(no pruning, no cache). Among equally scored moves the lowest index wins.
"""

import logging

from services.tic_tac_toe_board import (
    AI_SYMBOL,
    EMPTY,
    available_moves,
    check_winner,
    evaluate,
    is_board_full,
    opponent,
)

logger = logging.getLogger(__name__)

WIN_SCORE = 10


class NoLegalMoveError(ValueError):
    """Raised when the AI is asked to move on a finished or full board."""


def minimax(cells, depth, is_maximizing, player=AI_SYMBOL):
    """
    Score a position for `player`.

    Args:
        cells (list): Scratch board; mutated while searching and restored
            before returning
        depth (int): Plies played since the root move
        is_maximizing (bool): True if `player` moves next
        player (str): Symbol the score is computed for

    Returns:
        int: 10 - depth for a win, depth - 10 for a loss, 0 for a draw, so
        faster wins and slower losses score higher
    """
    result = check_winner(cells)
    if result is not None:
        winner, _ = result
        return WIN_SCORE - depth if winner == player else depth - WIN_SCORE
    if is_board_full(cells):
        return 0

    mover = player if is_maximizing else opponent(player)
    best_score = None

    for move in available_moves(cells):
        cells[move] = mover
        try:
            score = minimax(cells, depth + 1, not is_maximizing, player)
        finally:
            cells[move] = EMPTY

        if best_score is None:
            best_score = score
        elif is_maximizing:
            best_score = max(best_score, score)
        else:
            best_score = min(best_score, score)

    return best_score


def best_move(board, player=AI_SYMBOL):
    """
    Get the optimal move for `player`.

    Ties go to the lowest index.

    Args:
        board: A Board or any 9-length sequence; left untouched
        player (str): Side to move (default: 'O')

    Returns:
        int: Index of the best move

    Raises:
        NoLegalMoveError: If the board is already won or full
    """
    if evaluate(board).is_terminal:
        raise NoLegalMoveError("No legal move: the game is already over")

    cells = list(board)
    best_index = None
    best_score = None

    for move in available_moves(cells):
        cells[move] = player
        try:
            score = minimax(cells, 0, False, player)
        finally:
            cells[move] = EMPTY

        if best_score is None or score > best_score:
            best_score = score
            best_index = move

    logger.debug(f"AI ({player}) best move: {best_index} (score: {best_score})")
    return best_index
