"""RemoteXO package exposing game rules, the move advisor, and the web application."""

from .ai import MinimaxAdvisor, recommend
from .api import create_app
from .directory import MatchDirectory, MatchNotFoundError
from .game import Match, apply_move, create_match, evaluate
from .rooms import RoomBroadcaster
from .store import InMemoryRecordStore

__all__ = [
    "InMemoryRecordStore",
    "Match",
    "MatchDirectory",
    "MatchNotFoundError",
    "MinimaxAdvisor",
    "RoomBroadcaster",
    "apply_move",
    "create_app",
    "create_match",
    "evaluate",
    "recommend",
]
