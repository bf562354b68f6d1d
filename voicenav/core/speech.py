# voicenav/core/speech.py

from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from .interfaces import AudioCues, SpeechInput, SpeechOutput


Post = Callable[[Callable[[], None]], None]


def _call_now(fn: Callable[[], None]) -> None:
    fn()


class SpeechCoordinator:
    """
    Single gate to speech output and speech input.

    At most one utterance or one recognition session is outstanding at any
    time: starting either one cancels whatever is active first. Every
    operation gets a generation number; completions that arrive for an
    older generation are dropped, so a cancelled operation never drives the
    caller again.

    Collaborator callbacks may arrive on worker threads. `post` moves them
    onto the thread that owns the narration state (the Qt event loop in the
    app, a direct call in tests).

    Cancellation is best-effort on the audio side: the coordinator stops
    waiting immediately, the device may take a moment to fall silent.
    """

    def __init__(
        self,
        output: SpeechOutput,
        recognizer: SpeechInput,
        post: Optional[Post] = None,
        listen_timeout: Optional[float] = None,
        cues: Optional[AudioCues] = None,
    ):
        self.logger = logging.getLogger("voicenav.speech")
        self.output = output
        self.recognizer = recognizer
        self._post = post or _call_now
        self.listen_timeout = listen_timeout
        self.cues = cues

        self._generation = 0
        self._speaking = False
        self._listening = False
        self._timer: Optional[threading.Timer] = None

    # ---------- state ----------

    @property
    def is_speaking(self) -> bool:
        return self._speaking

    @property
    def is_listening(self) -> bool:
        return self._listening

    @property
    def is_busy(self) -> bool:
        return self._speaking or self._listening

    # ---------- public API ----------

    def say(self, text: str, language: str, on_done: Optional[Callable[[], None]] = None) -> None:
        self.cancel()
        generation = self._generation
        self._speaking = True
        self.logger.debug(f"say[{generation}] ({language}): {text[:60]}")

        def completed():
            self._post(lambda: self._speech_done(generation, on_done))

        self.output.speak(text, language, completed)

    def listen(self, language: str, on_result: Callable[[str], None]) -> None:
        self.cancel()
        generation = self._generation
        self._listening = True
        self.logger.debug(f"listen[{generation}] ({language})")

        if self.cues is not None:
            self.cues.play("listen_start")

        if self.listen_timeout:
            self._timer = threading.Timer(
                self.listen_timeout,
                lambda: self._post(lambda: self._listen_expired(generation, on_result)),
            )
            self._timer.daemon = True
            self._timer.start()

        def resolved(transcript: str):
            self._post(lambda: self._listen_done(generation, on_result, transcript))

        self.recognizer.listen(language, resolved)

    def cancel(self) -> None:
        """Void whatever is outstanding; safe to call when idle."""
        self._generation += 1
        self._stop_timer()
        if self._speaking:
            self._speaking = False
            self.output.cancel()
        if self._listening:
            self._listening = False
            self.recognizer.cancel()
            if self.cues is not None:
                self.cues.play("listen_stop")

    # ---------- completions ----------

    def _speech_done(self, generation: int, on_done: Optional[Callable[[], None]]):
        if generation != self._generation or not self._speaking:
            self.logger.debug(f"Dropping stale speech completion [{generation}]")
            return
        self._speaking = False
        if on_done is not None:
            on_done()

    def _listen_done(self, generation: int, on_result: Callable[[str], None], transcript: str):
        if generation != self._generation or not self._listening:
            self.logger.debug(f"Dropping stale transcript [{generation}]")
            return
        self._finish_listening()
        on_result(transcript or "")

    def _listen_expired(self, generation: int, on_result: Callable[[str], None]):
        if generation != self._generation or not self._listening:
            return
        self.logger.warning(f"Recognition timed out after {self.listen_timeout}s")
        self._generation += 1
        self.recognizer.cancel()
        self._finish_listening()
        on_result("")

    def _finish_listening(self):
        self._listening = False
        self._stop_timer()
        if self.cues is not None:
            self.cues.play("listen_stop")

    def _stop_timer(self):
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
