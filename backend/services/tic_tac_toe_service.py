"""
Tic-Tac-Toe Game Service

This module provides a self-contained Tic-Tac-Toe session for human vs. AI gameplay.
The human plays 'X' and always opens; the AI plays 'O' and answers with the
minimax search from tic_tac_toe_ai, which makes it unbeatable.
The session owns the board, whose turn it is and the running score, and it is the
only place where moves are applied.

Usage:
    game = TicTacToeGame()

    # Human makes a move at index 4 (center cell)
    game.apply_human_move(4)

    # AI answers after its presentation delay (inside a running event loop)
    move = await game.request_computer_move()

    # Get the current game state
    state = game.serialize_game_state()

Invalid moves (occupied cell, wrong turn, finished round, index outside 0..8)
are rejected without touching the game and reported through the return value.
"""

import asyncio
import logging
from dataclasses import dataclass, field

from services.tic_tac_toe_ai import best_move
from services.tic_tac_toe_board import (
    AI_SYMBOL,
    HUMAN_SYMBOL,
    Board,
    evaluate,
    is_valid_index,
    opponent,
)
from services.tic_tac_toe_score import ScoreTracker

logger = logging.getLogger(__name__)

STATUS_PLAYING = 'playing'
STATUS_CONCLUDED = 'concluded'

EVENT_MOVE_APPLIED = 'move_applied'
EVENT_ROUND_CONCLUDED = 'round_concluded'
EVENT_SCORE_CHANGED = 'score_changed'

# Pause before the AI answers, so its reply doesn't look instantaneous
DEFAULT_AI_DELAY = 0.8


@dataclass(frozen=True)
class GameEvent:
    """A notification for the presentation layer."""
    kind: str
    payload: dict = field(default_factory=dict)


class TicTacToeGame:
    """
    A human vs. AI Tic-Tac-Toe session.

    Rounds come and go through start_new_round(); the score survives them and
    is only cleared by reset_session().
    """

    def __init__(self, ai_delay=DEFAULT_AI_DELAY, move_search=best_move):
        """
        Args:
            ai_delay (float): Seconds to wait before the AI plays when no delay
                is passed to request_computer_move()
            move_search (callable): (cells, symbol) -> index used to pick the
                AI's move (default: minimax best_move)
        """
        self.ai_delay = ai_delay
        self.move_search = move_search
        self.score = ScoreTracker()

        self._listeners = []
        self._pending_ai_move = None
        self._reset_round()

    def _reset_round(self):
        self._board = Board()
        self.current_player = HUMAN_SYMBOL
        self.status = STATUS_PLAYING

    # --- Notifications ---

    def subscribe(self, listener):
        """Register a callable receiving every GameEvent."""
        self._listeners.append(listener)

    def unsubscribe(self, listener):
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _emit(self, kind, payload):
        event = GameEvent(kind, payload)
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception as e:
                logger.error(f"❌ Game event listener failed on {kind}: {e}")

    # --- Read-only views ---

    def get_board(self):
        return self._board.cells

    def get_outcome(self):
        return evaluate(self._board)

    def get_turn_state(self):
        return {
            'currentPlayer': self.current_player,
            'status': self.status,
            'outcome': self.get_outcome().to_dict() if self.status == STATUS_CONCLUDED else None,
        }

    def get_score(self):
        return self.score.to_dict()

    @property
    def computer_thinking(self):
        """True while a scheduled AI move has not been played yet."""
        return self._pending_ai_move is not None and not self._pending_ai_move.done()

    @property
    def input_enabled(self):
        return (
            self.status == STATUS_PLAYING
            and self.current_player == HUMAN_SYMBOL
            and not self.computer_thinking
        )

    @property
    def status_text(self):
        if self.status == STATUS_PLAYING:
            return "Your turn (X)" if self.current_player == HUMAN_SYMBOL else "AI's turn (O)"
        outcome = self.get_outcome()
        if outcome.winner == HUMAN_SYMBOL:
            return "You Win!"
        if outcome.winner == AI_SYMBOL:
            return "AI Wins!"
        return "It's a Draw!"

    # --- Moves ---

    def apply_human_move(self, index):
        """
        Process a human move at the specified index.

        Args:
            index (int): Board position (0-8) for the move

        Returns:
            bool: True if the move was applied, False if it was rejected (the
            game is left unchanged)
        """
        reason = None
        if self.status != STATUS_PLAYING:
            reason = "Game is already over"
        elif self.current_player != HUMAN_SYMBOL:
            reason = "It's not your turn"
        elif self.computer_thinking:
            reason = "AI is still thinking"
        elif not is_valid_index(index):
            reason = f"Invalid index: {index!r}. Must be between 0 and 8."
        elif not self._board.is_empty_cell(index):
            reason = f"Cell {index} is already occupied"

        if reason:
            logger.info(f"Human move at {index!r} rejected: {reason}")
            return False

        self._apply_move(index, HUMAN_SYMBOL)
        return True

    def apply_computer_move(self):
        """
        Play the AI's move right away.

        Returns:
            int: The index played, or None if it is not the AI's turn or a
            scheduled AI move is already pending
        """
        if self.computer_thinking:
            logger.info("AI move rejected: an AI move is already pending")
            return None
        return self._play_ai_move()

    def _play_ai_move(self):
        if self.status != STATUS_PLAYING or self.current_player != AI_SYMBOL:
            logger.info("AI move rejected: it's not the AI's turn")
            return None

        move = self.move_search(self._board.cells, AI_SYMBOL)
        self._apply_move(move, AI_SYMBOL)
        return move

    def _apply_move(self, index, symbol):
        # Board, turn, status and score are all settled before any listener runs
        self._board.place(index, symbol)
        self.current_player = opponent(symbol)
        events = [(EVENT_MOVE_APPLIED, {'player': symbol, 'index': index})]

        outcome = evaluate(self._board)
        if outcome.is_terminal:
            self.status = STATUS_CONCLUDED
            logger.info(f"Round over: {outcome.status} (winner: {outcome.winner})")
            events.append((EVENT_ROUND_CONCLUDED, {'outcome': outcome.to_dict()}))

            if outcome.winner is not None:
                self.score.record_win(outcome.winner)
                events.append((EVENT_SCORE_CHANGED, self.score.to_dict()))

        for kind, payload in events:
            self._emit(kind, payload)

    # --- Delayed AI move ---

    def schedule_computer_move(self, delay=None, listener=None):
        """
        Schedule the AI's move on the running event loop.

        Only one AI move can be pending at a time. Starting a new round cancels
        the pending move, so it never lands on the new board.

        Args:
            delay (float): Seconds to wait first (default: self.ai_delay)
            listener (callable): Receives the events of this move only, on
                top of the subscribed listeners

        Returns:
            asyncio.Task: Resolves to the index played, or None if nothing was
            scheduled
        """
        if self.status != STATUS_PLAYING or self.current_player != AI_SYMBOL:
            return None
        if self.computer_thinking:
            return None

        if delay is None:
            delay = self.ai_delay
        self._pending_ai_move = asyncio.get_running_loop().create_task(self._delayed_ai_move(delay, listener))
        return self._pending_ai_move

    async def _delayed_ai_move(self, delay, listener):
        try:
            await asyncio.sleep(delay)
            if listener is None:
                return self._play_ai_move()

            self.subscribe(listener)
            try:
                return self._play_ai_move()
            finally:
                self.unsubscribe(listener)
        finally:
            if self._pending_ai_move is asyncio.current_task():
                self._pending_ai_move = None

    async def request_computer_move(self, delay=None, listener=None):
        """
        Schedule the AI's move and wait for it.

        `listener` only sees the events raised by this move, not those of other
        calls made on the game while it waits.

        Returns:
            int: The index played, or None if the move was not allowed or was
            discarded by a new round
        """
        task = self.schedule_computer_move(delay, listener)
        if task is None:
            logger.info("AI move not scheduled: it's not the AI's turn or one is already pending")
            return None

        await asyncio.wait({task})
        if task.cancelled():
            return None
        return task.result()

    def _discard_pending_ai_move(self):
        task = self._pending_ai_move
        self._pending_ai_move = None
        if task is not None and not task.done():
            task.cancel()
            logger.info("Pending AI move discarded")

    def close(self):
        """Drop a pending AI move; the session is being thrown away."""
        self._discard_pending_ai_move()

    # --- Rounds ---

    def start_new_round(self):
        """Clear the board and give the first move back to the human. Keeps the score."""
        self._discard_pending_ai_move()
        self._reset_round()
        return self.serialize_game_state()

    def reset_session(self):
        """Start a new round and zero the score."""
        self._discard_pending_ai_move()
        self._reset_round()
        self.score.reset()
        self._emit(EVENT_SCORE_CHANGED, dict(self.score.to_dict(), reset=True))
        return self.serialize_game_state()

    def serialize_game_state(self):
        """
        Convert the game state to a JSON-serializable format for frontend communication.

        Returns:
            dict: Serialized game state
        """
        outcome = self.get_outcome()
        return {
            'board': list(self._board.cells),
            'currentPlayer': self.current_player,
            'status': self.status,
            'gameOver': self.status == STATUS_CONCLUDED,
            'outcome': outcome.status,
            'winner': outcome.winner,
            'winningLine': list(outcome.line) if outcome.line else [],
            'score': self.score.to_dict(),
            'computerThinking': self.computer_thinking,
            'inputEnabled': self.input_enabled,
            'statusText': self.status_text,
            'humanSymbol': HUMAN_SYMBOL,
            'aiSymbol': AI_SYMBOL,
        }
