"""Debate orchestration."""

from .core import DebateEngine
from .models import TranscriptEntry
from .types import DebateEvent, EventCallback, SessionStatus

__all__ = [
    "DebateEngine",
    "TranscriptEntry",
    "DebateEvent",
    "EventCallback",
    "SessionStatus",
]
