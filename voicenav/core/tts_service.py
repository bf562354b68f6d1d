"""
Text-to-Speech Service.
Speech output with one completion signal per utterance, using pyttsx3.
Runs in a background thread to keep the GUI responsive.
"""

import logging
import threading
import queue
from typing import Callable, Dict, Optional

import pyttsx3

from .interfaces import SpeechOutput


class Pyttsx3SpeechOutput(SpeechOutput):
    """
    pyttsx3 speech output.
    One worker thread owns the engine and speaks queued utterances in order.
    """

    def __init__(self, rate: int = 150, volume: float = 0.9):
        """
        Args:
            rate: words per minute
            volume: 0.0 .. 1.0
        """
        self.logger = logging.getLogger("voicenav.tts")
        self.engine = None
        self.speech_queue: "queue.Queue" = queue.Queue()
        self.speech_thread = None
        self.is_running = False
        self.lock = threading.Lock()

        self._rate = rate
        self._volume = volume
        self._voice_cache: Dict[str, Optional[str]] = {}
        self._engine_ready = threading.Event()

        self._start_speech_thread()

    def _initialize_engine(self):
        """Initialize pyttsx3 engine inside the worker thread that will use it."""
        try:
            self.engine = pyttsx3.init()
            self.engine.setProperty('rate', self._rate)
            self.engine.setProperty('volume', self._volume)
            self.logger.info("TTS engine initialized successfully")
        except Exception as e:
            self.logger.error(f"Failed to initialize TTS engine: {e}", exc_info=True)
            self.engine = None
        finally:
            self._engine_ready.set()

    def _start_speech_thread(self):
        """Start background thread for speech synthesis."""
        if self.speech_thread and self.speech_thread.is_alive():
            return

        with self.lock:
            self.is_running = True

        self.speech_thread = threading.Thread(target=self._speech_worker, daemon=True)
        self.speech_thread.start()
        self.logger.debug("TTS speech thread started")

    def _speech_worker(self):
        """
        Background worker thread that processes the speech queue.
        Every dequeued utterance signals completion, even on error.
        """
        self._initialize_engine()

        while self.is_running:
            try:
                item = self.speech_queue.get(timeout=0.5)
            except queue.Empty:
                continue

            if item is None:  # Exit signal
                break

            text, language, on_done = item
            try:
                if not self.engine:
                    self.logger.warning("TTS engine not available, skipping speech")
                else:
                    self._select_voice(language)
                    self.logger.debug(f"Speaking: '{text[:50]}...'")
                    self.engine.say(text)
                    self.engine.runAndWait()
                    self.logger.debug("Speech completed")
            except Exception as e:
                self.logger.error(f"Error during speech synthesis: {e}", exc_info=True)
            finally:
                self._signal(on_done)

    def _select_voice(self, language: str):
        if language not in self._voice_cache:
            self._voice_cache[language] = self._find_voice(language)
        voice_id = self._voice_cache[language]
        if voice_id:
            self.engine.setProperty('voice', voice_id)

    def _find_voice(self, language: str) -> Optional[str]:
        primary = language.replace("_", "-").split("-")[0].lower()
        for voice in self.engine.getProperty('voices') or []:
            tags = []
            for lang in getattr(voice, "languages", None) or []:
                if isinstance(lang, bytes):
                    lang = lang.decode("utf-8", errors="ignore")
                tags.append(str(lang).lstrip("\x05").lower())
            tags.append(str(voice.id).lower())
            for tag in tags:
                if tag == primary or tag.startswith(primary + "-") or tag.startswith(primary + "_") \
                        or f"/{primary}" in tag or f"\\{primary}" in tag:
                    self.logger.info(f"Using voice '{voice.id}' for '{language}'")
                    return voice.id
        self.logger.warning(f"No installed voice for '{language}', using default voice")
        return None

    def _signal(self, on_done: Callable[[], None]):
        try:
            on_done()
        except Exception as e:
            self.logger.error(f"Error in speech completion callback: {e}", exc_info=True)

    def speak(self, text: str, language: str, on_done: Callable[[], None]) -> None:
        """
        Queue text for speech synthesis (non-blocking).

        Args:
            text: Text string to speak
            language: locale tag used to pick a voice
            on_done: called once when the utterance ends or is dropped
        """
        if not text or not text.strip() or not self.is_running:
            self.logger.warning("Empty text provided to speak()")
            self._signal(on_done)
            return

        self.speech_queue.put((text.strip(), language, on_done))

    def cancel(self) -> None:
        """Stop current speech and drop queued utterances."""
        dropped = []
        while True:
            try:
                item = self.speech_queue.get_nowait()
            except queue.Empty:
                break
            if item is not None:
                dropped.append(item)

        if self.engine:
            try:
                self.engine.stop()
            except Exception as e:
                self.logger.error(f"Error stopping TTS: {e}", exc_info=True)

        for _, _, on_done in dropped:
            self._signal(on_done)

        if dropped:
            self.logger.debug(f"TTS cancelled, {len(dropped)} queued utterance(s) dropped")

    def shutdown(self):
        """Shutdown TTS service and clean up resources."""
        with self.lock:
            self.is_running = False

        self.cancel()
        self.speech_queue.put(None)

        if self.speech_thread and self.speech_thread.is_alive():
            self.speech_thread.join(timeout=2.0)

        self.logger.info("TTS service shut down")
