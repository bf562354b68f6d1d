# voicenav/core/audio_manager.py

"""
Microphone capture and UI audio cues.

- AudioManager records one short phrase for a recognition session
- AudioCuePlayer plays the short tones that mark listening and loading
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Dict

import numpy as np
import sounddevice as sd

from .interfaces import AudioCues


class AudioManager:
    def __init__(self, sample_rate: int = 16000, channels: int = 1):
        self.sample_rate = sample_rate
        self.channels = channels

    def record_phrase(self, duration_sec: float = 4.0) -> tuple[np.ndarray, int]:
        """
        Record a short audio phrase from the default microphone.

        Returns:
            (audio_samples, sample_rate)
            audio_samples is a 1D float32 numpy array in range [-1, 1]
        """
        frames = int(duration_sec * self.sample_rate)
        recording = sd.rec(
            frames,
            samplerate=self.sample_rate,
            channels=self.channels,
            dtype="float32",
        )
        sd.wait()  # blocking until recording is done or stop() is called
        audio = recording.reshape(-1)
        return audio, self.sample_rate

    def stop(self):
        """Abort a recording in progress."""
        sd.stop()


@dataclass(frozen=True)
class Tone:
    frequency: float
    duration_ms: int
    volume: float
    shape: str = "sine"
    blocking: bool = False


CUES: Dict[str, Tone] = {
    # played to the end before the microphone opens; sd.rec() stops any playback
    "listen_start": Tone(880, 100, 0.3, blocking=True),
    "listen_stop": Tone(660, 300, 0.3),
    "loading": Tone(440, 50, 0.2),
    "alert": Tone(310, 500, 0.25, shape="square"),
}


class AudioCuePlayer(AudioCues):
    """
    Short generated tones for UI feedback.
    Playback is fire-and-forget, except for blocking tones (listen_start),
    which finish before the caller continues.
    """

    def __init__(self, enabled: bool = True, sample_rate: int = 44100):
        self.logger = logging.getLogger("voicenav.cues")
        self.enabled = enabled
        self.sample_rate = sample_rate

    def play(self, name: str) -> None:
        if not self.enabled:
            return
        tone = CUES.get(name)
        if tone is None:
            self.logger.warning(f"Unknown audio cue '{name}'")
            return
        try:
            sd.play(self._render(tone), samplerate=self.sample_rate, blocking=tone.blocking)
        except Exception as e:
            self.logger.error(f"Failed to play cue '{name}': {e}")

    def start_loading(self, interval_sec: float = 1.0) -> Callable[[], None]:
        """
        Repeat the loading tone until the returned function is called.
        """
        stop_event = threading.Event()

        def loop():
            while not stop_event.is_set():
                self.play("loading")
                stop_event.wait(interval_sec)

        if self.enabled:
            threading.Thread(target=loop, daemon=True).start()
        return stop_event.set

    def _render(self, tone: Tone) -> np.ndarray:
        n = int(self.sample_rate * tone.duration_ms / 1000)
        t = np.arange(n, dtype=np.float32) / self.sample_rate
        wave = np.sin(2 * np.pi * tone.frequency * t)
        if tone.shape == "square":
            wave = np.sign(wave)
        # exponential fade to 1% like the browser gain ramp
        envelope = np.exp(np.log(0.01) * t / max(t[-1], 1e-6)) if n else t
        return (tone.volume * wave * envelope).astype(np.float32)
