"""Amplitude analysis modelled on the WebAudio AnalyserNode.

The output pushes every block it plays into ``push``; readers call ``level``
on each animation tick. Frequency data follows the AnalyserNode algorithm:
Blackman window over the latest ``fft_size`` samples, magnitude spectrum,
exponential smoothing across reads, decibel conversion and byte scaling
between ``min_decibels`` and ``max_decibels``.
"""

from __future__ import annotations

import threading

import numpy as np


class AmplitudeAnalyser:
    """Shared, thread-safe amplitude meter for the session's audio output."""

    def __init__(
        self,
        fft_size: int = 32,
        smoothing: float = 0.8,
        min_decibels: float = -100.0,
        max_decibels: float = -30.0,
    ):
        if fft_size < 32 or fft_size & (fft_size - 1):
            raise ValueError("fft_size must be a power of two >= 32")
        if not 0.0 <= smoothing < 1.0:
            raise ValueError("smoothing must be in [0, 1)")
        if min_decibels >= max_decibels:
            raise ValueError("min_decibels must be below max_decibels")

        self.fft_size = fft_size
        self.smoothing = smoothing
        self.min_decibels = min_decibels
        self.max_decibels = max_decibels

        self._lock = threading.Lock()
        self._window = np.blackman(fft_size).astype(np.float64)
        self._buffer = np.zeros(fft_size, dtype=np.float64)
        self._smoothed = np.zeros(fft_size // 2, dtype=np.float64)

    @property
    def frequency_bin_count(self) -> int:
        return self.fft_size // 2

    def push(self, block: np.ndarray) -> None:
        """Feed samples that were just sent to the device."""
        block = np.asarray(block, dtype=np.float64).reshape(-1)
        if block.size == 0:
            return
        with self._lock:
            if block.size >= self.fft_size:
                self._buffer[:] = block[-self.fft_size :]
            else:
                self._buffer = np.roll(self._buffer, -block.size)
                self._buffer[-block.size :] = block

    def reset(self) -> None:
        with self._lock:
            self._buffer[:] = 0.0
            self._smoothed[:] = 0.0

    def byte_frequency_data(self) -> np.ndarray:
        """Smoothed magnitude spectrum scaled to 0..255."""
        with self._lock:
            spectrum = np.fft.rfft(self._buffer * self._window)[: self.frequency_bin_count]
            magnitude = np.abs(spectrum) / self.fft_size
            self._smoothed = (
                self.smoothing * self._smoothed + (1.0 - self.smoothing) * magnitude
            )
            smoothed = self._smoothed.copy()

        with np.errstate(divide="ignore"):
            decibels = 20.0 * np.log10(smoothed)
        scale = 255.0 / (self.max_decibels - self.min_decibels)
        scaled = np.floor(scale * (decibels - self.min_decibels))
        return np.clip(np.nan_to_num(scaled, neginf=0.0), 0, 255).astype(np.uint8)

    def level(self) -> float:
        """Average byte magnitude across bins; the value avatars animate with."""
        data = self.byte_frequency_data()
        return float(data.mean()) if data.size else 0.0
