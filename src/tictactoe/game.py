"""Core rules, scoring and round lifecycle for two-player tic-tac-toe."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

Player = str  # "X" or "O"

PLAYER_X: Player = "X"
PLAYER_O: Player = "O"
EMPTY = " "

# Round outcomes
PLAYING = "playing"
WON = "won"
DRAW = "draw"

WINNING_LINES: Tuple[Tuple[int, int, int], ...] = (
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    (0, 4, 8),
    (2, 4, 6),
)


# ---------- Board helpers ----------


def other_player(player: Player) -> Player:
    return PLAYER_O if player == PLAYER_X else PLAYER_X


def calculate_winner(cells: Sequence[str]) -> Optional[Player]:
    """Return the owner of the first completed line, or None."""
    for a, b, c in WINNING_LINES:
        v = cells[a]
        if v != EMPTY and v == cells[b] == cells[c]:
            return v
    return None


def is_full(cells: Sequence[str]) -> bool:
    return all(c != EMPTY for c in cells)


def evaluate_board(cells: Sequence[str]) -> Tuple[str, Optional[Player]]:
    """
    Classify a board as (status, winner):
    (WON, 'X'|'O') if a line is complete, (DRAW, None) if the board is full,
    otherwise (PLAYING, None).
    """
    winner = calculate_winner(cells)
    if winner is not None:
        return WON, winner
    if is_full(cells):
        return DRAW, None
    return PLAYING, None


def _empty_board() -> List[str]:
    return [EMPTY] * 9


# ---------- Scores ----------


@dataclass
class ScoreTally:
    x_wins: int = 0
    o_wins: int = 0
    draws: int = 0

    def record(self, status: str, winner: Optional[Player]) -> None:
        if status == WON:
            if winner == PLAYER_X:
                self.x_wins += 1
            else:
                self.o_wins += 1
        elif status == DRAW:
            self.draws += 1

    def wins_for(self, player: Player) -> int:
        return self.x_wins if player == PLAYER_X else self.o_wins


@dataclass(frozen=True)
class GameSnapshot:
    """Read-only view of the engine at one instant."""

    cells: Tuple[str, ...]
    current_player: Player
    status: str
    winner: Optional[Player]
    scores: ScoreTally
    round_starter: Player

    @property
    def drawn(self) -> bool:
        return self.status == DRAW

    @property
    def finished(self) -> bool:
        return self.status != PLAYING


# ---------- Game ----------


@dataclass
class TicTacToeGame:
    cells: List[str] = field(default_factory=_empty_board)
    current_player: Player = PLAYER_X
    # Symbol that made (or will make) the first move of the current round
    round_starter: Player = PLAYER_X
    scores: ScoreTally = field(default_factory=ScoreTally)

    # ---- outcome, always derived from the cells ----

    @property
    def status(self) -> str:
        return evaluate_board(self.cells)[0]

    @property
    def winner(self) -> Optional[Player]:
        return evaluate_board(self.cells)[1]

    # ---- API used by the UI ----

    def available_moves(self) -> List[int]:
        if self.status != PLAYING:
            return []
        return [i for i, c in enumerate(self.cells) if c == EMPTY]

    def submit_move(self, index: int) -> bool:
        """
        Place the current player's mark at ``index``.

        Moves on an occupied cell or after the round is decided are ignored,
        as are indices outside 0..8. Returns whether the move was applied.
        """
        if not isinstance(index, int) or not 0 <= index < 9:
            logger.warning("Ignoring move at out-of-range index %r", index)
            return False
        if self.status != PLAYING:
            logger.debug("Ignoring move at %d: round already decided", index)
            return False
        if self.cells[index] != EMPTY:
            logger.debug("Ignoring move at %d: cell occupied", index)
            return False

        self.cells[index] = self.current_player
        self.current_player = other_player(self.current_player)

        status, winner = evaluate_board(self.cells)
        if status != PLAYING:
            self.scores.record(status, winner)
            logger.info(
                "Round over: %s",
                f"{winner} wins" if status == WON else "draw",
            )
        return True

    def start_new_round(self) -> None:
        """Clear the board and hand the first move to the other symbol."""
        self.round_starter = other_player(self.round_starter)
        self.cells = _empty_board()
        self.current_player = self.round_starter

    def start_new_match(self) -> None:
        """Reset the scores and open a fresh round with X to move."""
        self.scores = ScoreTally()
        self.round_starter = PLAYER_X
        self.cells = _empty_board()
        self.current_player = PLAYER_X

    def snapshot(self) -> GameSnapshot:
        status, winner = evaluate_board(self.cells)
        return GameSnapshot(
            cells=tuple(self.cells),
            current_player=self.current_player,
            status=status,
            winner=winner,
            scores=replace(self.scores),
            round_starter=self.round_starter,
        )
