"""In-process registry of navigation sessions, one tracker per session."""

import logging
import time
import uuid
from dataclasses import dataclass, field

from geoshare.core.errors import SessionNotFoundError
from geoshare.core.navigation import NavigationConfig, NavigationPosition, NavigationTracker
from geoshare.core.route_model import Route

logger = logging.getLogger(__name__)


@dataclass
class NavigationSession:
    id: str
    tracker: NavigationTracker
    created_at: float = field(default_factory=time.monotonic)
    last_activity: float = field(default_factory=time.monotonic)

    def touch(self, now: float | None = None) -> None:
        self.last_activity = time.monotonic() if now is None else now


class SessionRegistry:
    """Owns every live session. Only touched from the event loop thread."""

    def __init__(
        self,
        config: NavigationConfig | None = None,
        idle_timeout_seconds: float = 1800.0,
    ) -> None:
        self.config = config or NavigationConfig()
        self.idle_timeout_seconds = idle_timeout_seconds
        self._sessions: dict[str, NavigationSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions

    def open(self, route: Route) -> NavigationSession:
        """Start navigating ``route`` in a fresh session."""
        tracker = NavigationTracker(self.config)
        tracker.start(route)  # raises before anything is registered
        session = NavigationSession(id=uuid.uuid4().hex, tracker=tracker)
        self._sessions[session.id] = session
        logger.info("Session %s opened on route %s", session.id, route.id)
        return session

    def get(self, session_id: str) -> NavigationSession:
        try:
            return self._sessions[session_id]
        except KeyError:
            raise SessionNotFoundError(session_id) from None

    def update(self, session_id: str, pos: NavigationPosition) -> tuple[NavigationSession, bool]:
        """Feed one fix to a session. Returns the session and whether the fix was used."""
        session = self.get(session_id)
        accepted = session.tracker.on_position(pos)
        session.touch()
        return session, accepted

    def close(self, session_id: str) -> None:
        session = self._sessions.pop(session_id, None)
        if session is None:
            raise SessionNotFoundError(session_id)
        session.tracker.stop()
        logger.info("Session %s closed", session_id)

    def sweep_idle(self, now: float | None = None) -> list[str]:
        """Close sessions without activity for longer than the idle timeout."""
        now = time.monotonic() if now is None else now
        expired = [
            sid for sid, s in self._sessions.items()
            if now - s.last_activity > self.idle_timeout_seconds
        ]
        for sid in expired:
            self.close(sid)
        if expired:
            logger.info("Swept %d idle navigation sessions", len(expired))
        return expired
