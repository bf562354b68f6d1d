"""
Contracts for the speech and audio collaborators.
The narration core only depends on these; concrete engines live in
tts_service, stt_service and audio_manager.
"""

from abc import ABC, abstractmethod
from typing import Callable


class SpeechOutput(ABC):
    """
    Speech output contract.

    speak() must call `on_done` exactly once for every utterance, whether it
    was spoken, failed or was dropped by cancel(). The callback may arrive on
    any thread.
    """

    @abstractmethod
    def speak(self, text: str, language: str, on_done: Callable[[], None]) -> None:
        pass

    @abstractmethod
    def cancel(self) -> None:
        """Best-effort immediate stop; safe to call with nothing active."""
        pass

    def shutdown(self) -> None:
        pass


class SpeechInput(ABC):
    """
    Speech input contract.

    listen() opens one recognition session and calls `on_result` exactly
    once with a lowercase transcript, or "" when nothing usable was heard.
    The callback may arrive on any thread.
    """

    @abstractmethod
    def listen(self, language: str, on_result: Callable[[str], None]) -> None:
        pass

    @abstractmethod
    def cancel(self) -> None:
        """Abort the open session, if any; its result is ignored by the caller."""
        pass


class AudioCues(ABC):
    """Short UI tones: listen_start, listen_stop, loading, alert."""

    @abstractmethod
    def play(self, name: str) -> None:
        pass

    @abstractmethod
    def start_loading(self) -> Callable[[], None]:
        """Start the repeating loading tone; returns the function that stops it."""
        pass
