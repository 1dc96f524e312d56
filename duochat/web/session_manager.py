"""Owns the debate engine behind the web API and fans events out to clients."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from fastapi import WebSocket

from duochat.config.settings import LANGUAGES, AgentConfig, AppConfig
from duochat.debate_engine.core import DebateEngine
from duochat.debate_engine.types import EventCallback

logger = logging.getLogger(__name__)

EngineFactory = Callable[[AppConfig, EventCallback], DebateEngine]

TICK_INTERVAL = 0.05


def _default_engine_factory(config: AppConfig, callback: EventCallback) -> DebateEngine:
    return DebateEngine(config, event_callback=callback)


class SessionManager:
    """Runs at most one debate at a time and streams it over WebSockets."""

    def __init__(
        self,
        config: AppConfig,
        engine_factory: EngineFactory | None = None,
        tick_interval: float = TICK_INTERVAL,
    ):
        self.config = config
        self.engine = (engine_factory or _default_engine_factory)(config, self._on_event)
        self.tick_interval = tick_interval
        self.connections: list[WebSocket] = []
        self._session_task: asyncio.Task | None = None
        self._tick_task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        return self._session_task is not None and not self._session_task.done()

    async def start_session(
        self,
        topic: str,
        language: str | None = None,
        turn_delay_ms: int | None = None,
        agent_a: AgentConfig | None = None,
        agent_b: AgentConfig | None = None,
    ) -> dict[str, Any]:
        """Validate the request and launch the debate in the background."""
        if self.is_running or self.engine.is_active:
            raise RuntimeError("A debate is already running")
        if not topic.strip():
            raise ValueError("Debate topic must not be blank")
        if language is not None and language not in LANGUAGES:
            raise ValueError(f"Language must be one of: {LANGUAGES}")

        if agent_a is not None or agent_b is not None:
            self.engine.update_agents(
                agent_a or self.engine.config.agent_a,
                agent_b or self.engine.config.agent_b,
            )
        if turn_delay_ms is not None:
            self.engine.set_turn_delay(turn_delay_ms)

        self._session_task = asyncio.create_task(self._run_session(topic, language))
        logger.info(f"Session requested: '{topic}'")
        return {"status": "starting", "topic": topic}

    async def _run_session(self, topic: str, language: str | None) -> None:
        self._tick_task = asyncio.create_task(self._tick_loop())
        try:
            await self.engine.start(topic, language)
        except (ValueError, RuntimeError) as e:
            logger.error(f"Debate could not start: {e}")
            await self.broadcast({"type": "error", "data": {"message": str(e)}})
        finally:
            if self._tick_task is not None:
                self._tick_task.cancel()
                self._tick_task = None
            await self.broadcast({"type": "snapshot", "data": self.engine.snapshot()})

    async def _tick_loop(self) -> None:
        while True:
            await asyncio.sleep(self.tick_interval)
            if not self.connections:
                continue
            await self.broadcast(
                {
                    "type": "tick",
                    "data": {
                        "status": self.engine.status.value,
                        "agents": [
                            {"name": runtime.name, **runtime.state.to_dict()}
                            for runtime in self.engine.runtimes
                        ],
                    },
                }
            )

    async def _on_event(self, event_type: str, data: dict[str, Any]) -> None:
        await self.broadcast({"type": event_type, "data": data})

    def stop_session(self) -> dict[str, Any]:
        self.engine.stop()
        return self.engine.snapshot()

    def set_turn_delay(self, turn_delay_ms: int) -> None:
        self.engine.set_turn_delay(turn_delay_ms)

    def snapshot(self) -> dict[str, Any]:
        return self.engine.snapshot()

    async def shutdown(self) -> None:
        """Stop the debate and tear down background tasks."""
        task = self._session_task
        self.engine.stop()
        if task is not None and not task.done():
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        await self.engine.close()
        logger.info("Session manager shut down")

    async def broadcast(self, message: dict[str, Any]) -> None:
        """Send ``message`` to every client, dropping dead connections."""
        dead_connections = []
        for websocket in list(self.connections):
            try:
                await websocket.send_json(message)
            except Exception as e:
                logger.debug(f"WebSocket send failed: {e}")
                dead_connections.append(websocket)

        for websocket in dead_connections:
            self.remove_connection(websocket)

    def add_connection(self, websocket: WebSocket) -> None:
        self.connections.append(websocket)

    def remove_connection(self, websocket: WebSocket) -> None:
        if websocket in self.connections:
            self.connections.remove(websocket)
