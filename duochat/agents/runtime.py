"""Runtime wrapper around a single debater."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from duochat.audio.output import AudioOutput
from duochat.audio.playback import PlaybackEngine
from duochat.audio.synthesizer import SpeechSynthesizer, tts_key_for
from duochat.config.settings import AgentIdentity
from duochat.models.gateway import ProviderGateway

from .types import ALLOWED_TRANSITIONS, AgentRuntimeState, AgentStatus

if TYPE_CHECKING:
    from duochat.debate_engine.models import TranscriptEntry

logger = logging.getLogger(__name__)

# Cosmetic progress hints; they do not reflect real provider progress.
THINKING_STEPS = [
    "Analyzing context...",
    "Searching Google for facts...",
    "Reviewing case studies...",
    "Calculating probabilities...",
    "Verifying sources...",
    "Formulating argument...",
]
THINKING_INITIAL_STEP = "Initializing..."
THINKING_INTERVAL = 0.8


class AgentRuntime:
    """Owns one debater's status and drives its text and voice pipelines.

    The runtime never touches the other debater or the transcript; the
    orchestrator passes in everything a turn needs, including the session's
    audio output via ``attach_output``.
    """

    def __init__(
        self,
        identity: AgentIdentity,
        gateway: ProviderGateway,
        synthesizer: SpeechSynthesizer,
        safety_margin: float = 0.5,
    ):
        self.identity = identity
        self.gateway = gateway
        self.synthesizer = synthesizer
        self.safety_margin = safety_margin

        self._status = AgentStatus.IDLE
        self._thinking_step = ""
        self._thinking_task: asyncio.Task | None = None
        self._playback: PlaybackEngine | None = None
        # bumped by stop(); work started under an older epoch leaves status alone
        self._stop_epoch = 0

    @property
    def name(self) -> str:
        return self.identity.name

    @property
    def status(self) -> AgentStatus:
        return self._status

    @property
    def thinking_step(self) -> str:
        return self._thinking_step

    @property
    def volume(self) -> float:
        if self._status is AgentStatus.SPEAKING and self._playback is not None:
            return self._playback.amplitude()
        return 0.0

    @property
    def state(self) -> AgentRuntimeState:
        return AgentRuntimeState(
            status=self._status, volume=self.volume, thinking_step=self._thinking_step
        )

    def attach_output(self, output: AudioOutput) -> None:
        self._playback = PlaybackEngine(output, safety_margin=self.safety_margin)

    def detach_output(self) -> None:
        self._playback = None

    def update_identity(self, identity: AgentIdentity) -> None:
        if self._status in (AgentStatus.THINKING, AgentStatus.SPEAKING):
            raise RuntimeError(f"Cannot change {self.name} while it is {self._status.value}")
        self.identity = identity

    def _transition(self, status: AgentStatus) -> None:
        if status is self._status:
            return
        if status not in ALLOWED_TRANSITIONS[self._status]:
            logger.warning(
                f"{self.name}: unexpected transition "
                f"{self._status.value} -> {status.value}"
            )
        logger.debug(f"{self.name}: {self._status.value} -> {status.value}")
        self._status = status

    async def _rotate_thinking_steps(self) -> None:
        index = 0
        while True:
            await asyncio.sleep(THINKING_INTERVAL)
            self._thinking_step = THINKING_STEPS[index % len(THINKING_STEPS)]
            index += 1

    def _start_thinking(self) -> None:
        self._stop_thinking()
        self._thinking_step = THINKING_INITIAL_STEP
        self._thinking_task = asyncio.get_running_loop().create_task(
            self._rotate_thinking_steps()
        )

    def _stop_thinking(self) -> None:
        if self._thinking_task is not None:
            self._thinking_task.cancel()
            self._thinking_task = None
        self._thinking_step = ""

    async def generate_text(
        self,
        transcript: Sequence["TranscriptEntry"],
        topic: str,
        language: str,
    ) -> str:
        """Produce this agent's next argument.

        Raises whatever the gateway raised, after moving to ``ERROR``.
        """
        epoch = self._stop_epoch
        self._transition(AgentStatus.THINKING)
        self._start_thinking()
        try:
            text = await self.gateway.generate_text(
                transcript, topic, language, self.identity
            )
        except Exception as e:
            logger.error(f"{self.name}: text generation failed: {e}")
            if epoch == self._stop_epoch:
                self._transition(AgentStatus.ERROR)
            raise
        finally:
            self._stop_thinking()

        self._transition(AgentStatus.IDLE)
        return text

    async def speak(self, text: str) -> None:
        """Synthesize and play ``text``. Failures end in ``ERROR``, never raise."""
        playback = self._playback
        if playback is None:
            logger.error(f"{self.name}: no audio output attached")
            self._transition(AgentStatus.ERROR)
            return

        epoch = self._stop_epoch
        self._transition(AgentStatus.SPEAKING)
        try:
            waveform = await self.synthesizer.synthesize(
                text,
                self.identity.voice,
                tts_key_for(self.identity, self.synthesizer.tts_config),
            )
            if epoch != self._stop_epoch:
                logger.debug(f"{self.name}: stopped during synthesis, not playing")
                return
            await playback.play(waveform)
        except Exception as e:
            logger.error(f"{self.name}: speech failed: {e}")
            if epoch == self._stop_epoch:
                self._transition(AgentStatus.ERROR)
            return

        if epoch == self._stop_epoch:
            self._transition(AgentStatus.IDLE)

    def stop(self) -> None:
        """Halt playback and the thinking hints, and force ``IDLE``."""
        self._stop_epoch += 1
        if self._playback is not None:
            self._playback.stop()
        self._stop_thinking()
        if self._status is not AgentStatus.IDLE:
            logger.debug(f"{self.name}: {self._status.value} -> idle (stop)")
        self._status = AgentStatus.IDLE
