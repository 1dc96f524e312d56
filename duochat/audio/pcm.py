"""Raw PCM decoding.

Gemini TTS returns base64 encoded, little-endian, signed 16-bit mono PCM at
24 kHz with no container. These helpers turn that payload into a float32
waveform in [-1.0, 1.0].
"""

from __future__ import annotations

import base64
import binascii
import logging
from dataclasses import dataclass

import numpy as np

from .exceptions import AudioError

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_RATE = 24000

_NEGATIVE_SCALE = 32768.0
_POSITIVE_SCALE = 32767.0


@dataclass(frozen=True)
class Waveform:
    """Decoded mono audio ready for playback."""

    samples: np.ndarray
    sample_rate: int = DEFAULT_SAMPLE_RATE

    @property
    def duration(self) -> float:
        """Length in seconds."""
        return len(self.samples) / self.sample_rate

    def __len__(self) -> int:
        return len(self.samples)


def decode_base64_audio(data: str) -> bytes:
    try:
        return base64.b64decode(data, validate=False)
    except (binascii.Error, ValueError) as e:
        raise AudioError(f"Invalid base64 audio payload: {e}") from e


def _aligned_bytes(data: bytes | bytearray | memoryview) -> np.ndarray:
    """View ``data`` as uint8, copying when offset or length is odd."""
    raw = np.frombuffer(data, dtype=np.uint8)
    if raw.ctypes.data % 2 == 0 and raw.nbytes % 2 == 0:
        return raw

    usable = raw.nbytes - (raw.nbytes % 2)
    if usable != raw.nbytes:
        logger.debug("PCM payload has an odd byte count; dropping the trailing byte")
    # fresh allocations from numpy are always at least 2-byte aligned
    aligned = np.empty(usable, dtype=np.uint8)
    aligned[:] = raw[:usable]
    return aligned


def pcm16_to_waveform(
    data: bytes | bytearray | memoryview, sample_rate: int = DEFAULT_SAMPLE_RATE
) -> Waveform:
    """Decode little-endian int16 mono PCM into a float32 waveform."""
    samples = _aligned_bytes(data).view("<i2")
    # asymmetric divisors map -32768 to -1.0 and 32767 to 1.0 exactly
    normalized = np.where(
        samples < 0, samples / _NEGATIVE_SCALE, samples / _POSITIVE_SCALE
    ).astype(np.float32)
    return Waveform(samples=normalized, sample_rate=sample_rate)
