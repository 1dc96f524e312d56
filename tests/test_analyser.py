"""Tests for the amplitude analyser."""

from __future__ import annotations

import numpy as np
import pytest

from duochat.audio.analyser import AmplitudeAnalyser


def tone(frequency: float = 3000.0, samples: int = 256, rate: int = 24000) -> np.ndarray:
    t = np.arange(samples) / rate
    return np.sin(2 * np.pi * frequency * t).astype(np.float32)


def test_silence_reads_zero() -> None:
    analyser = AmplitudeAnalyser()

    assert analyser.level() == 0.0
    assert analyser.byte_frequency_data().shape == (16,)


def test_tone_raises_level() -> None:
    analyser = AmplitudeAnalyser()
    analyser.push(tone())

    assert analyser.level() > 0.0
    assert analyser.byte_frequency_data().max() <= 255


def test_smoothing_ramps_up_over_reads() -> None:
    analyser = AmplitudeAnalyser(smoothing=0.8)
    analyser.push(tone(samples=32) * 0.01)

    first = analyser.level()
    second = analyser.level()

    assert second >= first


def test_reset_clears_signal_and_history() -> None:
    analyser = AmplitudeAnalyser()
    analyser.push(tone())
    analyser.level()

    analyser.reset()

    assert analyser.level() == 0.0


def test_short_blocks_accumulate() -> None:
    analyser = AmplitudeAnalyser()
    for start in range(0, 64, 8):
        analyser.push(tone()[start : start + 8])

    assert analyser.level() > 0.0


@pytest.mark.parametrize("fft_size", [16, 48])
def test_fft_size_validation(fft_size: int) -> None:
    with pytest.raises(ValueError):
        AmplitudeAnalyser(fft_size=fft_size)
