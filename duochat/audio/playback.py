"""Single-shot playback with a completion safety net."""

from __future__ import annotations

import asyncio
import logging

from .exceptions import AudioError
from .output import AudioOutput, PlaybackHandle
from .pcm import Waveform

logger = logging.getLogger(__name__)

PLAYBACK_ENDED = "ended"
PLAYBACK_TIMEOUT = "timeout"


class PlaybackEngine:
    """Plays waveforms on a shared output and resolves exactly once per play.

    Completion is whichever comes first: the output's ended callback, or a
    timer of ``duration + safety_margin`` seconds for outputs that never
    report the end.
    """

    def __init__(self, output: AudioOutput, safety_margin: float = 0.5):
        self.output = output
        self.safety_margin = safety_margin
        self._source: PlaybackHandle | None = None

    @property
    def is_playing(self) -> bool:
        return self._source is not None

    async def play(self, waveform: Waveform) -> str:
        """Play ``waveform`` and return how it completed."""
        loop = asyncio.get_running_loop()
        done: asyncio.Future[str] = loop.create_future()

        def finish(reason: str) -> None:
            if not done.done():
                done.set_result(reason)

        self.output.analyser.reset()
        source = self.output.play(waveform, lambda: finish(PLAYBACK_ENDED))
        self._source = source
        timer = loop.call_later(
            waveform.duration + self.safety_margin, finish, PLAYBACK_TIMEOUT
        )

        try:
            reason = await done
        finally:
            timer.cancel()
            if self._source is source:
                self._source = None

        if reason == PLAYBACK_TIMEOUT:
            logger.warning(
                f"Output never reported the end of a {waveform.duration:.2f}s clip; "
                "completed by timer"
            )
        return reason

    def stop(self) -> None:
        source = self._source
        if source is None:
            return
        try:
            source.stop()
        except AudioError as e:
            logger.debug(f"Ignoring stop failure: {e}")

    def amplitude(self) -> float:
        return self.output.analyser.level()
