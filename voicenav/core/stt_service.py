"""
Speech-to-Text Service.
One recognition session at a time: record a short phrase, transcribe it,
deliver a lowercase transcript (or "" on silence, no-match or error).
"""

import logging
import threading
from typing import Callable, Optional

import numpy as np
from faster_whisper import WhisperModel

from .audio_manager import AudioManager
from .interfaces import SpeechInput


class WhisperSpeechInput(SpeechInput):
    def __init__(
        self,
        audio_manager: Optional[AudioManager] = None,
        model_size: str = "base",
        device: str = "cpu",
        compute_type: str = "int8",
        phrase_seconds: float = 4.0,
    ):
        """
        model_size: "tiny", "base", "small", ... (multilingual models)
        device: "cpu" or "cuda"
        compute_type: "int8" for CPU, "float16" for GPU
        """
        self.logger = logging.getLogger("voicenav.stt")
        self.audio_manager = audio_manager or AudioManager()
        self.phrase_seconds = phrase_seconds
        self._model_args = dict(device=device, compute_type=compute_type)
        self._model_size = model_size
        self._model: Optional[WhisperModel] = None
        self._model_lock = threading.Lock()
        self._cancelled = threading.Event()

    @property
    def model(self) -> WhisperModel:
        with self._model_lock:
            if self._model is None:
                self.logger.info(f"Loading Whisper model '{self._model_size}'")
                self._model = WhisperModel(self._model_size, **self._model_args)
            return self._model

    def listen(self, language: str, on_result: Callable[[str], None]) -> None:
        self._cancelled.clear()
        worker = threading.Thread(
            target=self._record_and_transcribe,
            args=(language, on_result),
            daemon=True,
        )
        worker.start()

    def cancel(self) -> None:
        self._cancelled.set()
        try:
            self.audio_manager.stop()
        except Exception as e:
            self.logger.error(f"Failed to stop recording: {e}")

    def _record_and_transcribe(self, language: str, on_result: Callable[[str], None]):
        text = ""
        try:
            self.logger.info("Recording voice phrase...")
            audio, sr = self.audio_manager.record_phrase(duration_sec=self.phrase_seconds)
            if self._cancelled.is_set():
                self.logger.info("Recognition cancelled; discarding audio.")
            else:
                text = self.transcribe(audio, sample_rate=sr, language=language)
                self.logger.info(f"STT result: '{text}'")
        except Exception as e:
            self.logger.error(f"Voice capture/STT failed: {e}", exc_info=True)
            text = ""
        on_result(text)

    def transcribe(self, audio: np.ndarray, sample_rate: int, language: str = "en") -> str:
        """
        Transcribe a mono float32 audio array.
        Returns the recognized text lowercased, without surrounding
        whitespace or closing sentence punctuation.
        """
        if audio.ndim != 1:
            audio = audio.reshape(-1)

        primary = language.replace("_", "-").split("-")[0].lower()
        segments, _ = self.model.transcribe(
            audio,
            language=primary,
            beam_size=1,
            best_of=1,
            condition_on_previous_text=False,
            temperature=0,
            vad_filter=True,
            vad_parameters={"min_silence_duration_ms": 400},
        )

        text = "".join(segment.text for segment in segments).strip().lower()
        # Whisper punctuates sentences; the browser recognizer never did.
        return text.rstrip(".!?¡¿…").strip()
