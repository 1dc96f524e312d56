from pydantic import BaseModel, Field, field_validator

from duochat.config.settings import AgentConfig


class SessionStartRequest(BaseModel):
    """Request model for starting a debate."""

    topic: str
    language: str | None = None
    turn_delay_ms: int | None = Field(default=None, ge=0, le=5000)
    agent_a: AgentConfig | None = None
    agent_b: AgentConfig | None = None

    @field_validator("topic")
    @classmethod
    def strip_topic(cls, v: str) -> str:
        return v.strip()


class TurnDelayRequest(BaseModel):
    """Request model for changing the pause between turns."""

    turn_delay_ms: int = Field(..., ge=0, le=5000)
