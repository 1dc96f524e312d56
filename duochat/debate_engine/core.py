"""Turn orchestration for a two-agent debate."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from duochat.agents.runtime import AgentRuntime
from duochat.audio.exceptions import AudioError
from duochat.audio.output import AudioOutput, create_audio_output
from duochat.audio.synthesizer import SpeechSynthesizer
from duochat.config.settings import (
    LANGUAGES,
    AgentConfig,
    AppConfig,
    AudioConfig,
    build_identity,
)
from duochat.judges.persuasion_judge import PersuasionJudge
from duochat.judges.scoring import ScoreState
from duochat.models.gateway import ProviderGateway

from .models import TranscriptEntry
from .types import DebateEvent, EventCallback, SessionStatus

logger = logging.getLogger(__name__)

MAX_TURN_DELAY_MS = 5000

OutputFactory = Callable[[AudioConfig], AudioOutput]


class DebateEngine:
    """Runs agent A and agent B in strict alternation until stopped.

    Stopping is cooperative: ``stop()`` clears the running flag, which the
    loop checks before a turn, after text generation and before the
    inter-turn delay. Calls already in flight are allowed to finish.
    """

    def __init__(
        self,
        config: AppConfig,
        gateway: ProviderGateway | None = None,
        synthesizer: SpeechSynthesizer | None = None,
        output_factory: OutputFactory | None = None,
        event_callback: EventCallback | None = None,
    ):
        self.config = config
        self.gateway = gateway or ProviderGateway(config.system)
        self.synthesizer = synthesizer or SpeechSynthesizer(config.tts, config.system)
        self.output_factory = output_factory or create_audio_output
        self.event_callback = event_callback

        self.topic = config.debate.topic
        self.language = config.debate.language
        self.turn_delay_ms = config.debate.turn_delay_ms
        self.transcript: list[TranscriptEntry] = []
        self.scores = ScoreState()
        self.status = SessionStatus.NOT_STARTED
        self.error: str | None = None

        self.judge = PersuasionJudge(
            self.gateway, config.judging, self.scores, on_scored=self._on_scored
        )

        safety_margin = config.system.audio.safety_margin_ms / 1000
        self.agent_a = AgentRuntime(
            build_identity(config.agent_a, config.agent_b),
            self.gateway,
            self.synthesizer,
            safety_margin=safety_margin,
        )
        self.agent_b = AgentRuntime(
            build_identity(config.agent_b, config.agent_a),
            self.gateway,
            self.synthesizer,
            safety_margin=safety_margin,
        )

        self._running = False
        self._loop_active = False
        self._judge_tasks: set[asyncio.Task] = set()

    @property
    def runtimes(self) -> tuple[AgentRuntime, AgentRuntime]:
        return (self.agent_a, self.agent_b)

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def is_active(self) -> bool:
        """True until the loop has fully unwound, even after ``stop()``."""
        return self._loop_active

    async def start(
        self,
        topic: str | None = None,
        language: str | None = None,
        max_turns: int | None = None,
    ) -> None:
        """Run a debate until it is stopped, fails or reaches ``max_turns``."""
        topic = (self.topic if topic is None else topic).strip()
        language = language or self.language
        if not topic:
            raise ValueError("Debate topic must not be blank")
        if language not in LANGUAGES:
            raise ValueError(f"Language must be one of: {LANGUAGES}")
        if max_turns is not None and max_turns < 1:
            raise ValueError("max_turns must be at least 1")
        if self._loop_active:
            raise RuntimeError("A debate is already running")

        self._loop_active = True
        try:
            await self._run_session(topic, language, max_turns)
        finally:
            self._loop_active = False

    async def _run_session(
        self, topic: str, language: str, max_turns: int | None
    ) -> None:
        self.error = None
        output = self.output_factory(self.config.system.audio)
        try:
            await output.open()
        except AudioError as e:
            self.error = f"Audio Error: {e}"
            logger.error(self.error)
            await self._emit(DebateEvent.ERROR, {"message": self.error})
            return

        self.topic = topic
        self.language = language
        self.transcript = []
        self.judge.begin_session(self.agent_a.name, self.agent_b.name)
        for runtime in self.runtimes:
            runtime.attach_output(output)

        self._running = True
        self.status = SessionStatus.RUNNING
        logger.info(
            f"Debate started: '{topic}' in {language} "
            f"({self.agent_a.name} vs {self.agent_b.name})"
        )
        await self._emit(
            DebateEvent.SESSION_STARTED,
            {
                "topic": topic,
                "language": language,
                "agents": [runtime.name for runtime in self.runtimes],
            },
        )

        try:
            await self._debate_loop(max_turns)
        finally:
            self._running = False
            self.status = SessionStatus.STOPPED
            for runtime in self.runtimes:
                runtime.detach_output()
            try:
                await output.close()
            except AudioError as e:
                logger.warning(f"Closing audio output failed: {e}")
            logger.info(f"Debate stopped after {len(self.transcript)} turns")
            await self._emit(
                DebateEvent.SESSION_STOPPED,
                {"turns": len(self.transcript), "error": self.error},
            )

    async def _debate_loop(self, max_turns: int | None) -> None:
        while self._running:
            for runtime in self.runtimes:
                # checkpoint: pre-turn
                if not self._running:
                    return

                try:
                    text = await runtime.generate_text(
                        list(self.transcript), self.topic, self.language
                    )
                except Exception as e:
                    await self._handle_generation_failure(runtime, e)
                    return

                # checkpoint: post-text
                if not self._running:
                    logger.info(f"Discarding reply from {runtime.name}; debate stopped")
                    return

                entry = TranscriptEntry(sender=runtime.name, text=text)
                self.transcript.append(entry)
                logger.info(f"Turn {len(self.transcript)}: {runtime.name}")
                await self._emit(DebateEvent.MESSAGE, entry.to_dict())
                self._launch_judge(entry)

                if text:
                    await runtime.speak(text)

                if max_turns is not None and len(self.transcript) >= max_turns:
                    logger.info(f"Reached {max_turns} turns")
                    self._running = False

                # checkpoint: pre-delay
                if not self._running:
                    return
                await asyncio.sleep(self.turn_delay_ms / 1000)

    async def _handle_generation_failure(
        self, runtime: AgentRuntime, error: Exception
    ) -> None:
        if not self._running:
            # already stopping; the failure is not a session error
            runtime.stop()
            return

        self.error = f"Error: {error}"
        logger.error(f"Debate aborted by {runtime.name}: {error}")
        self.stop()
        await self._emit(DebateEvent.ERROR, {"message": self.error})

    def _launch_judge(self, entry: TranscriptEntry) -> None:
        if not self.config.judging.enabled:
            return
        task = asyncio.get_running_loop().create_task(
            self.judge.judge(entry.text, entry.sender, self.topic)
        )
        self._judge_tasks.add(task)
        task.add_done_callback(self._judge_tasks.discard)

    async def _on_scored(self, scores: ScoreState) -> None:
        await self._emit(DebateEvent.SCORES, scores.to_dict())

    async def _emit(self, event: DebateEvent, data: dict[str, Any]) -> None:
        if self.event_callback is None:
            return
        try:
            await self.event_callback(event.value, data)
        except Exception as e:
            logger.error(f"Event callback failed for {event.value}: {e}")

    def stop(self) -> None:
        """Request a stop and halt both agents."""
        if self._running:
            logger.info("Stopping debate")
        self._running = False
        if self.status is SessionStatus.RUNNING:
            self.status = SessionStatus.STOPPED
        for runtime in self.runtimes:
            runtime.stop()

    async def close(self) -> None:
        """Stop and wait for outstanding judge calls."""
        self.stop()
        if self._judge_tasks:
            await asyncio.gather(*list(self._judge_tasks), return_exceptions=True)

    def set_turn_delay(self, delay_ms: int) -> None:
        """Change the pause between turns; applies from the next pause."""
        if not 0 <= delay_ms <= MAX_TURN_DELAY_MS:
            raise ValueError(f"Turn delay must be between 0 and {MAX_TURN_DELAY_MS} ms")
        self.turn_delay_ms = delay_ms

    def update_agents(self, agent_a: AgentConfig, agent_b: AgentConfig) -> None:
        """Replace both agents' configuration between sessions."""
        if self._loop_active:
            raise RuntimeError("Agents cannot be changed while a debate is running")
        self.config = AppConfig.model_validate(
            {**self.config.model_dump(), "agent_a": agent_a, "agent_b": agent_b}
        )
        self.agent_a.update_identity(build_identity(agent_a, agent_b))
        self.agent_b.update_identity(build_identity(agent_b, agent_a))

    def snapshot(self) -> dict[str, Any]:
        """JSON-ready view of the whole session."""
        agents = []
        for side, runtime in zip(("a", "b"), self.runtimes):
            agents.append(
                {
                    "side": side,
                    "name": runtime.name,
                    "color": runtime.identity.color,
                    "voice": runtime.identity.voice,
                    "provider": runtime.identity.provider,
                    "model": runtime.identity.model,
                    **runtime.state.to_dict(),
                }
            )
        return {
            "status": self.status.value,
            "error": self.error,
            "topic": self.topic,
            "language": self.language,
            "turn_delay_ms": self.turn_delay_ms,
            "transcript": [entry.to_dict() for entry in self.transcript],
            "scores": self.scores.to_dict(),
            "agents": agents,
        }
