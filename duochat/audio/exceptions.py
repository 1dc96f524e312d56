class AudioError(Exception):
    """Synthesis or playback failure. Never fatal to a debate."""


class NoAudioDataError(AudioError):
    """The TTS response carried no inline audio payload."""


class AudioOutputError(AudioError):
    """The audio output could not be acquired or used."""
