from .core import Agent
from .session import Session, SessionState

__all__ = ["Agent", "Session", "SessionState"]
