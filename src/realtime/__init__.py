"""
Farkle Party Realtime Layer.

The in-process owner of the current game: identity checks, serialized
engine calls, event classification and snapshot broadcast.
"""

from src.realtime.events import Action, EventPayload, GameEvent, classify_transition
from src.realtime.session import Credentials, GameSession, get_session
from src.realtime.snapshot import GameSnapshot

__all__ = [
    "Action",
    "Credentials",
    "EventPayload",
    "GameEvent",
    "GameSession",
    "GameSnapshot",
    "classify_transition",
    "get_session",
]
