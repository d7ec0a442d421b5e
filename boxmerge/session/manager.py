"""
Session Manager - Creates and manages game sessions.

A session is one board served to one rendering client:
- Created when the client starts a game
- Holds the GameLoop that owns the current state
- Destroyed when the client ends it or it goes stale

Sessions are EPHEMERAL: in-memory only, no persistence.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging
import random
import threading
import time
import uuid

from ..config import MIN_GRID_SIZE, EngineConfig
from .game_loop import GameLoop


logger = logging.getLogger(__name__)


@dataclass
class Session:
    """An ephemeral game session."""
    session_id: str
    loop: GameLoop
    created_at: float
    seed: int | None = None
    last_active: float = field(default_factory=time.time)

    def touch(self):
        self.last_active = time.time()


class SessionManager:
    """
    Manages game sessions.

    Responsibilities:
    - Create sessions with a configured GameLoop
    - Track active sessions
    - Clean up idle sessions
    """

    def __init__(self, config: EngineConfig | None = None):
        self.config = config or EngineConfig()
        self._sessions: dict[str, Session] = {}
        self._lock = threading.Lock()

    def create_session(self, size: int | None = None, seed: int | None = None) -> Session:
        """
        Create a new game session.

        Args:
            size: Board size (defaults to the configured size)
            seed: Optional seed for reproducible spawns

        Returns:
            New Session in phase INIT
        """
        size = size or self.config.grid_size
        if size < MIN_GRID_SIZE:
            raise ValueError(f"Grid size must be at least {MIN_GRID_SIZE}, got {size}")

        loop = GameLoop(
            size=size,
            random_source=random.Random(seed),
            win_value=self.config.win_value,
            animation_timeout=self.config.animation_timeout,
        )
        session = Session(
            session_id=str(uuid.uuid4()),
            loop=loop,
            created_at=time.time(),
            seed=seed,
        )
        with self._lock:
            self._sessions[session.session_id] = session
        logger.info("Created session %s (%sx%s)", session.session_id, size, size)
        return session

    def get_session(self, session_id: str) -> Session | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def end_session(self, session_id: str) -> bool:
        """End a session. Returns False if it did not exist."""
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session:
            logger.info("Ended session %s", session_id)
        return session is not None

    def list_sessions(self) -> list[str]:
        """List IDs of active sessions."""
        return list(self._sessions)

    def cleanup_stale_sessions(self, max_age_seconds: int = 3600) -> list[str]:
        """
        Remove sessions idle for longer than max_age_seconds.

        Returns the removed session IDs.
        """
        current_time = time.time()
        stale = [
            session_id
            for session_id, session in list(self._sessions.items())
            if current_time - session.last_active > max_age_seconds
        ]
        for session_id in stale:
            self.end_session(session_id)
        return stale
