"""Configuration models and helpers."""

from .settings import (
    LANGUAGES,
    MOODS,
    AgentConfig,
    AgentIdentity,
    AppConfig,
    AudioConfig,
    DebateConfig,
    JudgingConfig,
    RetryConfig,
    SystemConfig,
    TTSConfig,
    build_identity,
    get_default_config,
    get_template_config,
)

__all__ = [
    "LANGUAGES",
    "MOODS",
    "AgentConfig",
    "AgentIdentity",
    "AppConfig",
    "AudioConfig",
    "DebateConfig",
    "JudgingConfig",
    "RetryConfig",
    "SystemConfig",
    "TTSConfig",
    "build_identity",
    "get_default_config",
    "get_template_config",
]
