"""
Scoreboard for the human vs. AI session. Outlives individual rounds.
"""

from services.tic_tac_toe_board import AI_SYMBOL, HUMAN_SYMBOL


class ScoreTracker:
    def __init__(self):
        self._human_wins = 0
        self._ai_wins = 0

    @property
    def human_wins(self) -> int:
        return self._human_wins

    @property
    def computer_wins(self) -> int:
        return self._ai_wins

    def record_win(self, symbol: str) -> None:
        """Count a round won by `symbol` ('X' or 'O')."""
        if symbol == HUMAN_SYMBOL:
            self._human_wins += 1
        elif symbol == AI_SYMBOL:
            self._ai_wins += 1
        else:
            raise ValueError(f"Unknown symbol: {symbol!r}")

    def reset(self) -> None:
        self._human_wins = 0
        self._ai_wins = 0

    def to_dict(self) -> dict:
        return {'humanWins': self._human_wins, 'computerWins': self._ai_wins}
