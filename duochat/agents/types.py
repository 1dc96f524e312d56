"""Agent runtime state."""

from dataclasses import dataclass
from enum import Enum


class AgentStatus(Enum):
    """Lifecycle states of a debater."""

    IDLE = "idle"
    THINKING = "thinking"
    SPEAKING = "speaking"
    ERROR = "error"


# status -> statuses reachable from it; stop() may force IDLE from anywhere
ALLOWED_TRANSITIONS: dict[AgentStatus, frozenset[AgentStatus]] = {
    AgentStatus.IDLE: frozenset({AgentStatus.THINKING, AgentStatus.SPEAKING}),
    AgentStatus.THINKING: frozenset({AgentStatus.IDLE, AgentStatus.ERROR}),
    AgentStatus.SPEAKING: frozenset({AgentStatus.IDLE, AgentStatus.ERROR}),
    AgentStatus.ERROR: frozenset({AgentStatus.THINKING, AgentStatus.SPEAKING}),
}


@dataclass(frozen=True)
class AgentRuntimeState:
    """Snapshot of one debater for presentation layers."""

    status: AgentStatus = AgentStatus.IDLE
    volume: float = 0.0
    thinking_step: str = ""

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "volume": self.volume,
            "thinking_step": self.thinking_step,
        }
