"""Pytest configuration and shared fixtures."""

import pytest

from duochat.config.settings import AppConfig, get_template_config


# =============================================================================
# SHARED FIXTURES - Available to all test modules
# =============================================================================


@pytest.fixture
def sample_debate_topic() -> str:
    """Provide a standard debate topic for testing."""
    return "Remote work"


@pytest.fixture
def app_config() -> AppConfig:
    """Template configuration with silent audio and no pause between turns."""
    config = get_template_config()
    config.system.audio.backend = "null"
    config.debate.turn_delay_ms = 0
    return config


@pytest.fixture
def clear_api_keys(monkeypatch: pytest.MonkeyPatch) -> None:
    """Make sure no real credentials leak into a test."""
    for name in ("GEMINI_API_KEY", "API_KEY", "OPENAI_API_KEY", "ANTHROPIC_API_KEY"):
        monkeypatch.delenv(name, raising=False)


# =============================================================================
# PYTEST CONFIGURATION HOOKS
# =============================================================================


def pytest_configure(config: pytest.Config) -> None:
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line("markers", "integration: marks tests as integration tests")
