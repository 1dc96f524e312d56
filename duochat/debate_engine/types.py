"""Types for the debate engine."""

from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any


class SessionStatus(Enum):
    """Lifecycle of a debate session."""

    NOT_STARTED = "not_started"
    RUNNING = "running"
    STOPPED = "stopped"


class DebateEvent(str, Enum):
    """Events pushed to observers."""

    SESSION_STARTED = "session_started"
    MESSAGE = "message"
    SCORES = "scores"
    ERROR = "error"
    SESSION_STOPPED = "session_stopped"


EventCallback = Callable[[str, dict[str, Any]], Awaitable[None]]
