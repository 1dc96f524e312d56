"""Audio outputs shared by both debaters for the length of a session."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from duochat.config.settings import AudioConfig

from .analyser import AmplitudeAnalyser
from .exceptions import AudioOutputError
from .pcm import Waveform

logger = logging.getLogger(__name__)

EndedCallback = Callable[[], None]


class PlaybackHandle(ABC):
    """A scheduled waveform that can be halted."""

    @abstractmethod
    def stop(self) -> None:
        """Halt playback. Stopping a finished source is a no-op."""


class AudioOutput(ABC):
    """An open audio device with an analyser on its signal path."""

    def __init__(self, analyser: AmplitudeAnalyser):
        self.analyser = analyser
        self._is_open = False

    @property
    def is_open(self) -> bool:
        return self._is_open

    async def open(self) -> None:
        self._is_open = True

    async def close(self) -> None:
        self._is_open = False

    @abstractmethod
    def play(self, waveform: Waveform, on_ended: EndedCallback) -> PlaybackHandle:
        """Start ``waveform`` and call ``on_ended`` on the loop when it stops."""

    async def __aenter__(self) -> "AudioOutput":
        await self.open()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


class _TaskHandle(PlaybackHandle):
    def __init__(self, task: asyncio.Task, fire_ended: EndedCallback):
        self._task = task
        self._fire_ended = fire_ended

    def stop(self) -> None:
        if self._task.done():
            return
        self._task.cancel()
        self._fire_ended()


class NullAudioOutput(AudioOutput):
    """Silent output: feeds the analyser at playback speed and reports the end.

    With ``realtime=False`` every block is delivered without waiting, which is
    what tests and dry runs want.
    """

    def __init__(
        self,
        analyser: AmplitudeAnalyser,
        block_size: int = 1024,
        realtime: bool = True,
    ):
        super().__init__(analyser)
        self.block_size = block_size
        self.realtime = realtime

    def play(self, waveform: Waveform, on_ended: EndedCallback) -> PlaybackHandle:
        if not self._is_open:
            raise AudioOutputError("Audio output is not open")

        ended = False

        def fire_ended() -> None:
            nonlocal ended
            if not ended:
                ended = True
                on_ended()

        async def run() -> None:
            samples = waveform.samples
            for start in range(0, len(samples), self.block_size):
                block = samples[start : start + self.block_size]
                self.analyser.push(block)
                await asyncio.sleep(
                    len(block) / waveform.sample_rate if self.realtime else 0
                )
            fire_ended()

        task = asyncio.get_running_loop().create_task(run())
        return _TaskHandle(task, fire_ended)


class _StreamHandle(PlaybackHandle):
    def __init__(self, stream: Any, error_types: tuple[type[BaseException], ...]):
        self._stream = stream
        self._error_types = error_types
        self._closed = False

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        try:
            self._stream.close()
        except self._error_types as e:
            logger.debug(f"Closing finished stream failed: {e}")

    def stop(self) -> None:
        if self._closed:
            return
        try:
            # abort() still triggers the finished callback
            self._stream.abort()
        except self._error_types as e:
            logger.debug(f"Aborting stream failed: {e}")
        self.close()


class SoundDeviceOutput(AudioOutput):
    """Plays through PortAudio using ``sounddevice.OutputStream``.

    Audio blocks are pushed into the analyser from the device callback thread;
    the end of playback is marshalled back onto the event loop.
    """

    def __init__(self, analyser: AmplitudeAnalyser, device: str | int | None = None):
        super().__init__(analyser)
        self.device = device
        self._sd: Any = None

    async def open(self) -> None:
        try:
            import sounddevice as sd
        except (ImportError, OSError) as e:
            raise AudioOutputError(f"sounddevice is unavailable: {e}") from e

        try:
            info = sd.query_devices(self.device, kind="output")
        except (ValueError, sd.PortAudioError) as e:
            raise AudioOutputError(f"No usable output device: {e}") from e

        logger.info(f"Audio output opened on {info['name']}")
        self._sd = sd
        await super().open()

    async def close(self) -> None:
        self._sd = None
        await super().close()

    def play(self, waveform: Waveform, on_ended: EndedCallback) -> PlaybackHandle:
        sd = self._sd
        if sd is None:
            raise AudioOutputError("Audio output is not open")

        loop = asyncio.get_running_loop()
        samples = waveform.samples
        analyser = self.analyser
        position = 0
        handle: _StreamHandle | None = None

        def callback(outdata, frames, time_info, status) -> None:
            nonlocal position
            chunk = samples[position : position + frames]
            outdata[: len(chunk), 0] = chunk
            outdata[len(chunk) :] = 0
            analyser.push(chunk)
            position += len(chunk)
            if position >= len(samples):
                raise sd.CallbackStop

        def finished_on_loop() -> None:
            if handle is not None:
                handle.close()
            on_ended()

        def finished() -> None:
            if not loop.is_closed():
                loop.call_soon_threadsafe(finished_on_loop)

        try:
            stream = sd.OutputStream(
                samplerate=waveform.sample_rate,
                channels=1,
                dtype="float32",
                device=self.device,
                callback=callback,
                finished_callback=finished,
            )
            handle = _StreamHandle(stream, (sd.PortAudioError,))
            stream.start()
        except sd.PortAudioError as e:
            if handle is not None:
                handle.close()
            raise AudioOutputError(f"Could not start playback: {e}") from e
        return handle


def create_audio_output(config: AudioConfig) -> AudioOutput:
    """Build the configured output with a fresh analyser."""
    analyser = AmplitudeAnalyser(fft_size=config.fft_size, smoothing=config.smoothing)
    if config.backend == "null":
        return NullAudioOutput(analyser)
    return SoundDeviceOutput(analyser, device=config.device)
