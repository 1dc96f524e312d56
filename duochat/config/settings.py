"""Configuration settings and data models."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

logger = logging.getLogger(__name__)

ProviderId = Literal["google", "openai", "anthropic", "custom"]

PROVIDER_LABELS: dict[str, str] = {
    "google": "Google Gemini",
    "openai": "OpenAI (Compatible)",
    "anthropic": "Anthropic",
    "custom": "Custom / Local",
}

SUGGESTED_MODELS: dict[str, list[str]] = {
    "google": ["gemini-2.5-flash", "gemini-3-pro-preview"],
    "openai": ["gpt-4o", "gpt-4o-mini", "gpt-3.5-turbo"],
    "anthropic": ["claude-3-5-sonnet-20240620", "claude-3-opus-20240229"],
    "custom": ["llama3", "mistral", "custom-model"],
}

# mood name -> (label, tone instruction appended to the persona)
MOODS: dict[str, tuple[str, str]] = {
    "Neutral": (
        "Neutral",
        "Maintain a professional, objective, and composed tone.",
    ),
    "Happy": (
        "Happy/Optimistic",
        "You are in a fantastic mood! Be cheerful, optimistic, and energetic.",
    ),
    "Angry": (
        "Angry",
        "You are furious! Speak with intense anger, frustration, and impatience.",
    ),
    "Funny": (
        "Funny/Sarcastic",
        "Be hilarious, sarcastic, and witty. Crack jokes, use puns.",
    ),
    "Understanding": (
        "Understanding",
        "Be deeply empathetic, calm, and understanding.",
    ),
    "Bully": (
        "Bully",
        "Act like a bully. Be mean, condescending, and mock your opponent.",
    ),
    "Vulgar": (
        "Vulgar/Rude",
        "Use slang, street language, and mild profanity. Be raw and unfiltered.",
    ),
}

LANGUAGES: list[str] = [
    "English",
    "Spanish",
    "French",
    "German",
    "Italian",
    "Portuguese",
    "Chinese",
    "Japanese",
    "Korean",
    "Russian",
    "Arabic",
    "Hindi",
    "Darija Moroccan",
]

PRO_INSTRUCTION = (
    "You are {self_name}. You are a competitive debater arguing IN FAVOR of the "
    "user's topic. If the topic is a choice (e.g., 'Cats vs Dogs'), argue for the "
    "FIRST option. You must use concrete facts, scientific studies, statistics, "
    "and logical reasoning to back up your support. Respectfully but firmly "
    "dismantle {opponent_name}'s counter-arguments."
)

CON_INSTRUCTION = (
    "You are {self_name}. You are a competitive debater arguing AGAINST the "
    "user's topic. If the topic is a choice (e.g., 'Cats vs Dogs'), argue for the "
    "SECOND option. You must use historical precedents, risk analysis, "
    "counter-facts, and critical thinking to expose flaws in {opponent_name}'s "
    "position. Be skeptical and factual."
)


def _env_key(*names: str) -> str | None:
    for name in names:
        value = os.getenv(name)
        if value:
            return value
    return None


class AgentConfig(BaseModel):
    """Configuration for one debater."""

    name: str = Field(..., description="Display name, substituted into personas")
    voice: str = Field(default="Kore", description="Prebuilt TTS voice name")
    color: str = Field(default="#818cf8", description="Display color")
    provider: ProviderId = Field(default="google", description="Text provider")
    model: str = Field(default="gemini-2.5-flash", description="Model identifier")
    api_key: str | None = Field(default=None, description="Optional per-agent key")
    api_endpoint: str | None = Field(
        default=None, description="Endpoint override (needed for openai/custom)"
    )
    mood: str = Field(default="Neutral", description="Tone applied to the persona")
    system_instruction: str = Field(
        default=PRO_INSTRUCTION,
        description="Persona template with {self_name} and {opponent_name}",
    )

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Agent name must not be blank")
        return v.strip()

    @field_validator("mood")
    @classmethod
    def validate_mood(cls, v: str) -> str:
        if v not in MOODS:
            raise ValueError(f"Mood must be one of: {list(MOODS)}")
        return v


class DebateConfig(BaseModel):
    """Session-level debate settings."""

    topic: str = Field(
        default="Artificial Intelligence: Threat or Savior?",
        description="Debate topic",
    )
    language: str = Field(default="English", description="Language of the debate")
    turn_delay_ms: int = Field(
        default=1000, ge=0, le=5000, description="Pause between turns"
    )

    @field_validator("language")
    @classmethod
    def validate_language(cls, v: str) -> str:
        if v not in LANGUAGES:
            raise ValueError(f"Language must be one of: {LANGUAGES}")
        return v


class JudgingConfig(BaseModel):
    """Persuasion judge configuration."""

    enabled: bool = Field(default=True, description="Score each utterance")
    provider: ProviderId = Field(default="google")
    model: str = Field(default="gemini-2.5-flash")
    api_key: str | None = Field(default=None)
    api_endpoint: str | None = Field(default=None)


class TTSConfig(BaseModel):
    """Speech synthesis configuration. Always served by Gemini TTS."""

    model: str = Field(default="gemini-2.5-flash-preview-tts")
    api_key: str | None = Field(
        default=None,
        description="Shared key used when an agent has no Google key "
        "(falls back to GEMINI_API_KEY / API_KEY)",
    )
    sample_rate: int = Field(default=24000, gt=0)

    def resolve_api_key(self) -> str | None:
        return self.api_key or _env_key("GEMINI_API_KEY", "API_KEY")


class RetryConfig(BaseModel):
    """Backoff policy for transient provider failures."""

    max_attempts: int = Field(default=3, ge=1)
    base_delay_ms: int = Field(default=2000, ge=0)


class AudioConfig(BaseModel):
    """Audio output and amplitude analysis settings."""

    backend: Literal["sounddevice", "null"] = Field(default="sounddevice")
    device: str | int | None = Field(default=None, description="Output device")
    fft_size: int = Field(default=32, ge=32)
    smoothing: float = Field(default=0.8, ge=0.0, lt=1.0)
    safety_margin_ms: int = Field(
        default=500, ge=0, description="Extra wait before forcing completion"
    )

    @field_validator("fft_size")
    @classmethod
    def validate_fft_size(cls, v: int) -> int:
        if v & (v - 1):
            raise ValueError("fft_size must be a power of two")
        return v


class SystemConfig(BaseModel):
    """System-wide configuration."""

    google_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta"
    )
    anthropic_base_url: str = Field(default="https://api.anthropic.com/v1")
    openai_endpoint: str = Field(
        default="https://api.openai.com/v1/chat/completions",
        description="Default endpoint for openai/custom agents",
    )
    request_timeout: float | None = Field(
        default=None, description="Seconds; None waits indefinitely"
    )
    retry: RetryConfig = Field(default_factory=RetryConfig)
    audio: AudioConfig = Field(default_factory=AudioConfig)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")


class AppConfig(BaseModel):
    """Complete application configuration."""

    debate: DebateConfig = Field(default_factory=DebateConfig)
    agent_a: AgentConfig
    agent_b: AgentConfig
    judging: JudgingConfig = Field(default_factory=JudgingConfig)
    tts: TTSConfig = Field(default_factory=TTSConfig)
    system: SystemConfig = Field(default_factory=SystemConfig)

    @model_validator(mode="after")
    def validate_agent_names(self) -> "AppConfig":
        if self.agent_a.name == self.agent_b.name:
            raise ValueError("Agent names must differ")
        return self

    @classmethod
    def load_from_file(cls, config_path: Path) -> "AppConfig":
        """Load configuration from a JSON or YAML file."""
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path, "r", encoding="utf-8") as f:
            if config_path.suffix in (".yaml", ".yml"):
                data = yaml.safe_load(f) or {}
            else:
                data = json.load(f)

        missing_agents = [key for key in ("agent_a", "agent_b") if key not in data]
        if missing_agents:
            raise ValueError(f"Missing required config sections: {missing_agents}")

        return cls(**data)

    def save_to_file(self, config_path: Path) -> None:
        """Save configuration to YAML file."""
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "w", encoding="utf-8") as f:
            yaml.dump(
                self.model_dump(exclude_unset=True),
                f,
                default_flow_style=False,
                indent=2,
                allow_unicode=True,
            )


@dataclass(frozen=True)
class AgentIdentity:
    """Resolved, immutable view of an agent for the duration of a session."""

    name: str
    color: str
    voice: str
    provider: str
    model: str
    system_persona: str
    api_key: str | None = None
    api_endpoint: str | None = None


def compose_persona(agent: AgentConfig, opponent_name: str) -> str:
    """Fill the persona template with both names and append the mood."""
    # custom templates may contain literal braces, so no str.format here
    base = agent.system_instruction.replace("{self_name}", agent.name).replace(
        "{opponent_name}", opponent_name
    )
    _, instruction = MOODS[agent.mood]
    return f"{base} \n\nCURRENT MOOD: {instruction}"


def build_identity(agent: AgentConfig, opponent: AgentConfig) -> AgentIdentity:
    return AgentIdentity(
        name=agent.name,
        color=agent.color,
        voice=agent.voice,
        provider=agent.provider,
        model=agent.model,
        system_persona=compose_persona(agent, opponent.name),
        api_key=agent.api_key or None,
        api_endpoint=agent.api_endpoint or None,
    )


def get_template_config() -> AppConfig:
    """Get template configuration for config file generation."""
    return AppConfig(
        debate=DebateConfig(
            topic="Artificial Intelligence: Threat or Savior?",
            language="English",
            turn_delay_ms=1000,
        ),
        agent_a=AgentConfig(
            name="Nova",
            voice="Kore",
            color="#818cf8",
            provider="google",
            model="gemini-2.5-flash",
            system_instruction=PRO_INSTRUCTION,
        ),
        agent_b=AgentConfig(
            name="Sage",
            voice="Fenrir",
            color="#fb7185",
            provider="google",
            model="gemini-2.5-flash",
            system_instruction=CON_INSTRUCTION,
        ),
        judging=JudgingConfig(),
        tts=TTSConfig(),
        system=SystemConfig(),
    )


def get_default_config(config_path: Path = Path("duochat_config.json")) -> AppConfig:
    """Load configuration from disk, writing the template first if it is missing."""
    if not config_path.exists():
        logger.info(f"No config at {config_path}, writing template")
        template = get_template_config()
        config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(template.model_dump(), f, indent=2)
    return AppConfig.load_from_file(config_path)
