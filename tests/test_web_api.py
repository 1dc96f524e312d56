"""Tests for the FastAPI session endpoints."""

from __future__ import annotations

import asyncio

import numpy as np
import pytest
from fastapi.testclient import TestClient

from duochat.audio.analyser import AmplitudeAnalyser
from duochat.audio.output import NullAudioOutput
from duochat.audio.pcm import Waveform
from duochat.config.settings import AppConfig, TTSConfig
from duochat.debate_engine.core import DebateEngine
from duochat.web.api import create_app
from duochat.web.session_manager import SessionManager


class HangingGateway:
    """Never finishes the first turn, so the session stays running."""

    def __init__(self):
        self.calls = 0

    async def generate_text(self, transcript, topic, language, identity) -> str:
        self.calls += 1
        await asyncio.Event().wait()
        return "unreachable"

    async def complete(self, provider_name, request, *, retry=True, description=None):
        return "5"


class FakeSynthesizer:
    tts_config = TTSConfig(api_key="shared")

    async def synthesize(self, text, voice, api_key=None) -> Waveform:
        return Waveform(samples=np.zeros(24, dtype=np.float32))


@pytest.fixture
def client(app_config: AppConfig):
    def engine_factory(config, callback) -> DebateEngine:
        return DebateEngine(
            config,
            gateway=HangingGateway(),
            synthesizer=FakeSynthesizer(),
            output_factory=lambda _c: NullAudioOutput(AmplitudeAnalyser(), realtime=False),
            event_callback=callback,
        )

    manager = SessionManager(app_config, engine_factory=engine_factory)
    with TestClient(create_app(manager)) as test_client:
        yield test_client


def test_health(client: TestClient) -> None:
    assert client.get("/api/health").json() == {"isAlive": True}


def test_options(client: TestClient) -> None:
    data = client.get("/api/options").json()

    assert len(data["languages"]) == 13
    assert "Darija Moroccan" in data["languages"]
    assert [mood["id"] for mood in data["moods"]] == [
        "Neutral",
        "Happy",
        "Angry",
        "Funny",
        "Understanding",
        "Bully",
        "Vulgar",
    ]
    assert {p["id"] for p in data["providers"]} == {"google", "openai", "anthropic", "custom"}


def test_initial_snapshot(client: TestClient) -> None:
    data = client.get("/api/session").json()

    assert data["status"] == "not_started"
    assert data["transcript"] == []
    assert [agent["name"] for agent in data["agents"]] == ["Nova", "Sage"]


def test_blank_topic_is_rejected(client: TestClient) -> None:
    response = client.post("/api/session/start", json={"topic": "   "})

    assert response.status_code == 400
    assert "topic" in response.json()["detail"]


def test_unknown_language_is_rejected(client: TestClient) -> None:
    response = client.post(
        "/api/session/start", json={"topic": "Remote work", "language": "Klingon"}
    )

    assert response.status_code == 400


def test_out_of_range_delay_is_rejected(client: TestClient) -> None:
    response = client.post(
        "/api/session/start", json={"topic": "Remote work", "turn_delay_ms": 6000}
    )

    assert response.status_code == 422


def test_duplicate_agent_names_are_rejected(client: TestClient) -> None:
    response = client.post(
        "/api/session/start",
        json={"topic": "Remote work", "agent_a": {"name": "Sage"}},
    )

    assert response.status_code == 400


def test_start_twice_and_stop(client: TestClient) -> None:
    first = client.post("/api/session/start", json={"topic": "Remote work"})
    second = client.post("/api/session/start", json={"topic": "Remote work"})
    stopped = client.post("/api/session/stop")

    assert first.status_code == 200
    assert first.json()["topic"] == "Remote work"
    assert second.status_code == 400
    assert "already running" in second.json()["detail"]
    assert stopped.status_code == 200


def test_change_delay(client: TestClient) -> None:
    response = client.put("/api/session/delay", json={"turn_delay_ms": 2500})

    assert response.status_code == 200
    assert client.get("/api/session").json()["turn_delay_ms"] == 2500
    assert client.put("/api/session/delay", json={"turn_delay_ms": 9000}).status_code == 422


def test_websocket_sends_snapshot(client: TestClient) -> None:
    with client.websocket_connect("/ws/session") as websocket:
        message = websocket.receive_json()

    assert message["type"] == "snapshot"
    assert message["data"]["status"] == "not_started"
