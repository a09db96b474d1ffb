"""Session driver that alternates human and engine turns."""

from duels.app.session import Session, SessionConfig, SessionState

__all__ = ["Session", "SessionConfig", "SessionState"]
