# voicenav/controller.py

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any, Callable, Optional

from PyQt6 import QtCore

from .ui import VoiceNavWindow
from .core.api_client import WikiApiClient
from .core.audio_manager import AudioCuePlayer, AudioManager
from .core.config import Config
from .core.locale_table import LocaleCommandTable
from .core.logger import setup_logging
from .core.models import HighlightTarget, Mode, NarrationState
from .core.session import VoiceSession
from .core.speech import SpeechCoordinator
from .core.stt_service import WhisperSpeechInput
from .core.tts_service import Pyttsx3SpeechOutput


class VoiceNavController(QtCore.QObject):
    """
    Main orchestrator for VoiceNav:
    - Builds services from the config and hands them to the VoiceSession.
    - Connects window signals to session operations and session callbacks
      to window updates.
    - Every collaborator callback from a worker thread (speech, recognition,
      HTTP) is re-posted onto the Qt event loop, so the narration state is
      only ever touched from the GUI thread.
    """

    # Signals into UI
    system_message = QtCore.pyqtSignal(str)
    status_change = QtCore.pyqtSignal(str)
    results_ready = QtCore.pyqtSignal(object)
    article_ready = QtCore.pyqtSignal(object)
    highlight_changed = QtCore.pyqtSignal(str)
    result_highlighted = QtCore.pyqtSignal(int)
    search_reset = QtCore.pyqtSignal()

    # Cross-thread hand-off of callables onto the event loop
    _dispatch = QtCore.pyqtSignal(object)

    def __init__(self, window: VoiceNavWindow, config: Optional[Config] = None):
        super().__init__()
        self.window = window
        self.config = config or Config()

        self.logger = setup_logging(Path(self.config.logs_path))
        self._dispatch.connect(self._run_dispatched, QtCore.Qt.ConnectionType.QueuedConnection)

        # ---- Core components ----
        self.table = LocaleCommandTable.from_directory(
            Path(self.config.locales_path),
            fallback_language=self.config.fallback_language,
        )
        self.cues = AudioCuePlayer(enabled=self.config.audio_cues)
        self.tts = Pyttsx3SpeechOutput(
            rate=self.config.get("speech.rate", 150),
            volume=self.config.get("speech.volume", 0.9),
        )
        self.stt = WhisperSpeechInput(
            audio_manager=AudioManager(),
            model_size=self.config.get("stt.model_size", "base"),
            device=self.config.get("stt.device", "cpu"),
            compute_type=self.config.get("stt.compute_type", "int8"),
            phrase_seconds=float(self.config.get("stt.phrase_seconds", 4.0)),
        )
        self.speech = SpeechCoordinator(
            self.tts,
            self.stt,
            post=self.post,
            listen_timeout=self.config.listen_timeout,
            cues=self.cues,
        )
        self.client = WikiApiClient(
            self.config.api_base_url,
            timeout=self.config.api_timeout,
            legacy=self.config.api_legacy,
        )
        self.session = VoiceSession(
            self.client,
            self.speech,
            self.table,
            language=self.config.language,
            search_types=self.config.search_types,
            limit=self.config.search_limit,
            cues=self.cues,
            run_task=self.run_in_background,
            on_mode_change=self._on_mode_change,
            on_results=self.results_ready.emit,
            on_article=self.article_ready.emit,
            on_message=self.system_message.emit,
            on_highlight=self._on_highlight,
            on_result_highlight=self.result_highlighted.emit,
            on_narration_state=self._on_narration_state,
        )

        # ---- Wire UI signals ----
        self.system_message.connect(self.window.append_message)
        self.status_change.connect(self.window.set_status)
        self.results_ready.connect(self.window.show_results)
        self.article_ready.connect(self.window.show_article)
        self.highlight_changed.connect(self.window.set_highlight)
        self.result_highlighted.connect(self.window.highlight_result)
        self.search_reset.connect(self.window.show_search)

        # UI -> controller inputs
        self.window.search_submitted.connect(self.handle_search)
        self.window.voice_listen_requested.connect(self.session.press_voice_button)
        self.window.result_activated.connect(self.session.open_article)
        self.window.play_pause_requested.connect(self.session.toggle_playback)
        self.window.repeat_requested.connect(self.session.narration.repeat)
        self.window.previous_text_requested.connect(self.session.narration.previous_text)
        self.window.next_text_requested.connect(self.session.narration.next_text)
        self.window.previous_section_requested.connect(self.session.narration.previous_section)
        self.window.next_section_requested.connect(self.session.narration.next_section)
        self.window.home_requested.connect(self.handle_home)

        self.status_change.emit("SEARCH")
        self.logger.info(
            f"VoiceNav ready: language={self.config.language}, "
            f"backend={self.config.api_base_url}, search={self.config.search_types}"
        )

    # -------------------------------------------------------------------------
    # UI ENTRY POINTS
    # -------------------------------------------------------------------------

    @QtCore.pyqtSlot(str)
    def handle_search(self, text: str):
        self.logger.info(f"Search (typed): {text}")
        self.session.submit_search(text, voice=False)

    @QtCore.pyqtSlot()
    def handle_home(self):
        self.session.go_home()
        self.search_reset.emit()

    # -------------------------------------------------------------------------
    # THREAD HAND-OFF
    # -------------------------------------------------------------------------

    def post(self, fn: Callable[[], None]) -> None:
        """Run `fn` on the Qt event loop; safe to call from any thread."""
        self._dispatch.emit(fn)

    @QtCore.pyqtSlot(object)
    def _run_dispatched(self, fn: Callable[[], None]):
        fn()

    def run_in_background(self, task: Callable[[], Any], on_done: Callable[[Any], None]) -> None:
        def worker():
            result = task()
            self.post(lambda: on_done(result))

        threading.Thread(target=worker, daemon=True).start()

    # -------------------------------------------------------------------------
    # SESSION CALLBACKS
    # -------------------------------------------------------------------------

    def _on_mode_change(self, mode: Mode):
        self.status_change.emit(mode.name.replace("_", " "))
        if mode is Mode.SEARCH:
            self.search_reset.emit()

    def _on_highlight(self, target: HighlightTarget):
        self.highlight_changed.emit(target.element_id)

    def _on_narration_state(self, state: NarrationState):
        self.status_change.emit(f"ARTICLE / {state.name.replace('_', ' ')}")

    # -------------------------------------------------------------------------
    # SHUTDOWN
    # -------------------------------------------------------------------------

    def shutdown(self):
        """Clean shutdown when the app is closing."""
        self.speech.cancel()
        self.tts.shutdown()
        self.logger.info("VoiceNav shutting down.")
