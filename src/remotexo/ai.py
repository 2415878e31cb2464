"""Exhaustive alpha-beta minimax advisor for RemoteXO."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple
import math

from .game import BOARD_SIZE, WINNING_LINES, Coord, Mark, Match, other_mark

WIN_SCORE = 10.0

# Flat 9-cell view of the board, row-major. Never mutated during search.
Cells = Tuple[Optional[Mark], ...]

_FLAT_LINES: Tuple[Tuple[int, int, int], ...] = tuple(
    tuple(r * BOARD_SIZE + c for r, c in line)  # type: ignore[misc]
    for line in WINNING_LINES
)


class DecidedMatchError(ValueError):
    """Raised when a recommendation is requested for a finished match."""


def flatten(match: Match) -> Cells:
    return tuple(cell for row in match.board for cell in row)


def score_board(cells: Cells, maximizer: Mark) -> Optional[float]:
    """Terminal score from ``maximizer``'s point of view, None if play goes on."""

    for a, b, c in _FLAT_LINES:
        v = cells[a]
        if v is not None and v == cells[b] == cells[c]:
            return WIN_SCORE if v == maximizer else -WIN_SCORE
    if all(v is not None for v in cells):
        return 0.0
    return None


@dataclass
class MinimaxAdvisor:
    """Recommends a move for whichever side is to move.

    The search is exhaustive with no depth discount, so every winning line is
    worth the same. Among equally scored cells the first one in row-major
    order wins. Alpha-beta only cuts branches that cannot beat the current
    best strictly, which leaves that choice untouched.
    """

    _cache: Dict[Tuple[Cells, Mark], Coord] = field(default_factory=dict, repr=False)

    # ---- public API ----

    def choose(self, match: Match) -> Coord:
        if match.decided:
            raise DecidedMatchError("Advisor called on a decided match")

        cells = flatten(match)
        key = (cells, match.turn)
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        best = self._best_move(cells, match.turn)
        self._cache[key] = best
        return best

    # ---- core search ----

    def _best_move(self, cells: Cells, me: Mark) -> Coord:
        opp = other_mark(me)
        best_value = -math.inf
        best_index: Optional[int] = None

        for i, v in enumerate(cells):
            if v is not None:
                continue
            child = cells[:i] + (me,) + cells[i + 1 :]
            value = self._minimax(child, me, opp, False, best_value, math.inf)
            if value > best_value:
                best_value, best_index = value, i

        if best_index is None:
            raise DecidedMatchError("No empty cells left to recommend")
        return divmod(best_index, BOARD_SIZE)

    def _minimax(
        self,
        cells: Cells,
        me: Mark,
        opp: Mark,
        maximizing: bool,
        alpha: float,
        beta: float,
    ) -> float:
        terminal = score_board(cells, me)
        if terminal is not None:
            return terminal

        mark = me if maximizing else opp
        if maximizing:
            value = -math.inf
            for i, v in enumerate(cells):
                if v is not None:
                    continue
                child = cells[:i] + (mark,) + cells[i + 1 :]
                value = max(value, self._minimax(child, me, opp, False, alpha, beta))
                alpha = max(alpha, value)
                if alpha >= beta:
                    break
        else:
            value = math.inf
            for i, v in enumerate(cells):
                if v is not None:
                    continue
                child = cells[:i] + (mark,) + cells[i + 1 :]
                value = min(value, self._minimax(child, me, opp, True, alpha, beta))
                beta = min(beta, value)
                if alpha >= beta:
                    break
        return value


def recommend(match: Match, advisor: Optional[MinimaxAdvisor] = None) -> Coord:
    """Best (row, col) for ``match.turn``.

    Pass a long-lived ``advisor`` to reuse its cache across calls.
    """
    return (advisor or MinimaxAdvisor()).choose(match)
