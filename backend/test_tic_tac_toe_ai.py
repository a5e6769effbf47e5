"""
Tests for the minimax AI
"""

import pytest

from services.tic_tac_toe_ai import NoLegalMoveError, best_move, minimax
from services.tic_tac_toe_board import Board, available_moves, evaluate

X, O, _ = 'X', 'O', None


def test_ai_takes_immediate_win():
    cells = [
        X, X, _,
        O, O, _,
        _, _, _,
    ]
    assert best_move(cells) == 5


def test_ai_blocks_human_win():
    cells = [
        X, X, _,
        _, O, _,
        _, _, _,
    ]
    assert best_move(cells) == 2


def test_ai_prefers_winning_over_blocking():
    cells = [
        X, X, _,
        _, _, _,
        O, O, _,
    ]
    assert best_move(cells) == 8


def test_ai_takes_center_against_corner_opening():
    cells = [
        X, _, _,
        _, _, _,
        _, _, _,
    ]
    assert best_move(cells) == 4


def test_equal_moves_go_to_lowest_index():
    # Both 2 and 6 win on the spot
    cells = [
        O, O, _,
        O, X, _,
        _, X, X,
    ]
    assert best_move(cells) == 2


def test_ai_can_play_x():
    cells = [
        O, O, _,
        X, X, _,
        _, _, _,
    ]
    assert best_move(cells, X) == 5


def test_board_is_left_untouched():
    cells = [X, _, _, _, O, _, _, _, X]
    before = list(cells)
    best_move(cells)
    assert cells == before

    board = Board(before)
    best_move(board)
    assert board.cells == tuple(before)


def test_minimax_depth_bias():
    # O has already won: score shrinks with depth
    won = [O, O, O, X, X, _, _, _, _]
    assert minimax(list(won), 0, False) == 10
    assert minimax(list(won), 3, False) == 7

    lost = [X, X, X, O, O, _, _, _, _]
    assert minimax(list(lost), 2, True) == -8

    drawn = [X, O, X, X, O, O, O, X, X]
    assert minimax(list(drawn), 5, True) == 0


def test_minimax_restores_scratch_board():
    cells = [X, _, _, _, O, _, _, _, X]
    before = list(cells)
    minimax(cells, 0, True)
    assert cells == before


def test_no_move_on_full_board():
    with pytest.raises(NoLegalMoveError):
        best_move([X, O, X, X, O, O, O, X, X])


def test_no_move_on_won_board():
    with pytest.raises(NoLegalMoveError):
        best_move([X, X, X, O, O, _, _, _, _])


def test_no_legal_move_is_a_value_error():
    assert issubclass(NoLegalMoveError, ValueError)


def _play_out_every_human_strategy(cells, results):
    """
    X to move. Try every human reply, let the AI answer each one, and collect
    every final outcome.
    """
    for human_move in available_moves(cells):
        cells[human_move] = X
        outcome = evaluate(cells)
        if outcome.is_terminal:
            results.append(outcome)
        else:
            ai_move = best_move(cells)
            assert cells[ai_move] is None
            cells[ai_move] = O
            outcome = evaluate(cells)
            if outcome.is_terminal:
                results.append(outcome)
            else:
                _play_out_every_human_strategy(cells, results)
            cells[ai_move] = None
        cells[human_move] = None


def test_ai_never_loses_against_any_human_strategy():
    results = []
    _play_out_every_human_strategy([None] * 9, results)

    assert results
    assert all(outcome.winner != X for outcome in results)
    # A careless human gets punished somewhere in the tree
    assert any(outcome.winner == O for outcome in results)
