"""
Session Module - Manages ephemeral game sessions.

A session represents one game served to one rendering client:
- Created when the client starts a game
- Holds the game loop that owns the current state
- Destroyed when the client ends it

Sessions are EPHEMERAL: no persistence, no save files.
"""

from .manager import SessionManager, Session
from .game_loop import GameLoop

__all__ = [
    "SessionManager",
    "Session",
    "GameLoop",
]
