"""Speech synthesis, PCM decoding and playback."""

from .analyser import AmplitudeAnalyser
from .exceptions import AudioError, AudioOutputError, NoAudioDataError
from .output import (
    AudioOutput,
    NullAudioOutput,
    PlaybackHandle,
    SoundDeviceOutput,
    create_audio_output,
)
from .pcm import DEFAULT_SAMPLE_RATE, Waveform, pcm16_to_waveform
from .playback import PlaybackEngine
from .synthesizer import SpeechSynthesizer, tts_key_for

__all__ = [
    "AmplitudeAnalyser",
    "AudioError",
    "AudioOutputError",
    "NoAudioDataError",
    "AudioOutput",
    "NullAudioOutput",
    "PlaybackHandle",
    "SoundDeviceOutput",
    "create_audio_output",
    "DEFAULT_SAMPLE_RATE",
    "Waveform",
    "pcm16_to_waveform",
    "PlaybackEngine",
    "SpeechSynthesizer",
    "tts_key_for",
]
