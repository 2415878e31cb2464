"""Core rules for RemoteXO: match records, move transitions and outcomes."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Sequence, Tuple
import random
import uuid

Mark = str  # "x" or "o"
Cell = Optional[Mark]
Board = Tuple[Tuple[Cell, Cell, Cell], ...]
Coord = Tuple[int, int]  # (row, col)
Outcome = Optional[str]  # "x", "o", "tie" or None while undecided

MARKS: Tuple[Mark, Mark] = ("x", "o")
TIE = "tie"
BOARD_SIZE = 3

# Each line is three (row, col) cells: rows, then columns, then diagonals.
WINNING_LINES: Tuple[Tuple[Coord, Coord, Coord], ...] = (
    ((0, 0), (0, 1), (0, 2)),
    ((1, 0), (1, 1), (1, 2)),
    ((2, 0), (2, 1), (2, 2)),
    ((0, 0), (1, 0), (2, 0)),
    ((0, 1), (1, 1), (2, 1)),
    ((0, 2), (1, 2), (2, 2)),
    ((0, 0), (1, 1), (2, 2)),
    ((2, 0), (1, 1), (0, 2)),
)

NAME_POOL: Tuple[str, ...] = (
    "Time", "Past", "Future", "Dev", "Fly", "Flying", "Soar", "Soaring",
    "Power", "Falling", "Fall", "Jump", "Cliff", "Mountain", "Rend", "Red",
    "Blue", "Green", "Yellow", "Gold", "Demon", "Demonic", "Panda", "Cat",
    "Kitty", "Kitten", "Zero", "Memory", "Trooper", "XX", "Bandit", "Fear",
    "Light", "Glow", "Tread", "Deep", "Deeper", "Deepest", "Mine", "Your",
    "Worst", "Enemy", "Hostile", "Force", "Video", "Game", "Donkey", "Mule",
    "Colt", "Cult", "Cultist", "Magnum", "Gun", "Assault", "Recon", "Trap",
    "Trapper", "Redeem", "Code", "Script", "Writer", "Near", "Close", "Open",
    "Cube", "Circle", "Geo", "Genome", "Germ", "Spaz", "Shot", "Echo", "Beta",
    "Alpha", "Gamma", "Omega", "Seal", "Squid", "Money", "Cash", "Lord",
    "King", "Duke", "Rest", "Fire", "Flame", "Morrow", "Break", "Breaker",
    "Numb", "Ice", "Cold", "Rotten", "Sick", "Sickly", "Janitor", "Camel",
    "Rooster", "Sand", "Desert", "Dessert", "Hurdle", "Racer", "Eraser",
    "Erase", "Big", "Small", "Short", "Tall", "Sith", "Bounty", "Hunter",
    "Cracked", "Broken", "Sad", "Happy", "Joy", "Joyful", "Crimson", "Destiny",
    "Deceit", "Lies", "Lie", "Honest", "Destined", "Bloxxer", "Hawk", "Eagle",
    "Hawker", "Walker", "Zombie", "Sarge", "Capt", "Captain", "Punch", "One",
    "Two", "Uno", "Slice", "Slash", "Melt", "Melted", "Melting", "Fell",
    "Wolf", "Hound", "Legacy", "Sharp", "Dead", "Mew", "Chuckle", "Bubba",
    "Bubble", "Sandwich", "Smasher", "Extreme", "Multi", "Universe",
    "Ultimate", "Death", "Ready", "Monkey", "Elevator", "Wrench", "Grease",
    "Head", "Theme", "Grand", "Cool", "Kid", "Boy", "Girl", "Vortex",
    "Paradox",
)


class InvalidMarkError(ValueError):
    """Raised when a mark is neither "x" nor "o"."""


class OutOfRangeMoveError(ValueError):
    """Raised when a move addresses a cell outside the 3x3 grid."""


class MatchFinishedError(ValueError):
    """Raised when a move targets an empty cell of an already decided match."""


def other_mark(mark: Mark) -> Mark:
    return "o" if mark == "x" else "x"


def empty_board() -> Board:
    return tuple((None, None, None) for _ in range(BOARD_SIZE))


def pick_name(rng: random.Random) -> str:
    """Two words from the name pool, e.g. ``"Crimson Panda"``."""

    return f"{rng.choice(NAME_POOL)} {rng.choice(NAME_POOL)}"


def _check_mark(mark: object) -> Mark:
    if mark not in MARKS:
        raise InvalidMarkError(f"Unknown mark {mark!r}, expected 'x' or 'o'")
    return mark  # type: ignore[return-value]


# ---------- Match ----------


@dataclass(frozen=True)
class Match:
    """Immutable snapshot of one game. Transitions return new instances."""

    id: str
    name: str
    turn: Mark
    board: Board = field(default_factory=empty_board)
    outcome: Outcome = None

    @property
    def decided(self) -> bool:
        return self.outcome is not None

    def cell(self, row: int, col: int) -> Cell:
        return self.board[row][col]

    def occupied(self) -> int:
        return sum(1 for row in self.board for c in row if c is not None)

    def empty_cells(self) -> List[Coord]:
        """Empty cells in row-major order."""
        return [
            (r, c)
            for r in range(BOARD_SIZE)
            for c in range(BOARD_SIZE)
            if self.board[r][c] is None
        ]

    def to_record(self) -> Dict[str, object]:
        """Serialize to the store/wire shape (board as nested nullable tags)."""
        return {
            "id": self.id,
            "name": self.name,
            "board": [list(row) for row in self.board],
            "currentPlayer": self.turn,
            "endState": self.outcome,
        }

    @classmethod
    def from_record(cls, record: Dict[str, object]) -> "Match":
        raw_board: Sequence[Sequence[Cell]] = record["board"]  # type: ignore[assignment]
        if len(raw_board) != BOARD_SIZE or any(
            len(row) != BOARD_SIZE for row in raw_board
        ):
            raise ValueError("Record board must be a 3x3 grid")
        board = tuple(
            tuple(None if c is None else _check_mark(c) for c in row)
            for row in raw_board
        )
        outcome = record.get("endState")
        if outcome is not None and outcome != TIE:
            _check_mark(outcome)
        return cls(
            id=str(record["id"]),
            name=str(record["name"]),
            turn=_check_mark(record["currentPlayer"]),
            board=board,  # type: ignore[arg-type]
            outcome=outcome,  # type: ignore[arg-type]
        )


def create_match(
    starting_mark: Mark,
    rng: Optional[random.Random] = None,
    match_id: Optional[str] = None,
) -> Match:
    """Start an empty match with ``starting_mark`` to move first."""

    turn = _check_mark(starting_mark)
    rng = rng or random.Random()
    return Match(
        id=match_id or str(uuid.uuid4()),
        name=pick_name(rng),
        turn=turn,
    )


# ---------- Transitions ----------


def evaluate(board: Board, mover: Mark) -> Outcome:
    """Outcome after ``mover`` played on ``board``.

    Any complete line is credited to the mover, since only the side that just
    moved can have completed one.
    """
    for line in WINNING_LINES:
        a, b, c = (board[r][col] for r, col in line)
        if a is not None and a == b == c:
            return mover
    if all(c is not None for row in board for c in row):
        return TIE
    return None


def apply_move(match: Match, coord: Coord) -> Match:
    """Return the match after the side in ``match.turn`` plays ``coord``.

    A move onto an occupied cell is ignored and the same match comes back.
    """
    row, col = coord
    if not (0 <= row < BOARD_SIZE and 0 <= col < BOARD_SIZE):
        raise OutOfRangeMoveError(f"Cell ({row}, {col}) is outside the board")

    if match.board[row][col] is not None:
        return match

    if match.decided:
        raise MatchFinishedError("Game already finished")

    mover = match.turn
    board = tuple(
        tuple(mover if (r, c) == (row, col) else cell for c, cell in enumerate(cells))
        for r, cells in enumerate(match.board)
    )
    return replace(
        match,
        board=board,
        turn=other_mark(mover),
        outcome=evaluate(board, mover),  # type: ignore[arg-type]
    )
