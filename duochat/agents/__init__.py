"""Debater runtimes."""

from .runtime import THINKING_STEPS, AgentRuntime
from .types import AgentRuntimeState, AgentStatus

__all__ = ["AgentRuntime", "AgentRuntimeState", "AgentStatus", "THINKING_STEPS"]
