# voicenav/core/session.py

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, List, Optional

from .api_client import WikiApiClient
from .command_engine import CommandRouter, CommandType
from .interfaces import AudioCues
from .locale_table import LocaleCommandTable
from .models import Article, HighlightTarget, Mode, NarrationState, SearchResult
from .narration import NarrationController
from .result_narrator import ResultNarrator
from .speech import SpeechCoordinator


TaskRunner = Callable[[Callable[[], Any], Callable[[Any], None]], None]


def _run_now(task: Callable[[], Any], on_done: Callable[[Any], None]) -> None:
    on_done(task())


class VoiceSession:
    """
    Top-level interaction state: the current mode, the result set and
    which article is open. Owns the NarrationController and the
    ResultNarrator and is the only writer of the mode.

    Blocking API calls go through `run_task(task, on_done)`; the default
    runs them inline, the Qt controller runs them on a worker thread and
    posts `on_done` back to the event loop.
    """

    def __init__(
        self,
        client: WikiApiClient,
        speech: SpeechCoordinator,
        table: LocaleCommandTable,
        language: str = "en",
        search_types: Iterable[str] = ("lexical",),
        limit: int = 5,
        cues: Optional[AudioCues] = None,
        run_task: Optional[TaskRunner] = None,
        on_mode_change: Optional[Callable[[Mode], None]] = None,
        on_results: Optional[Callable[[List[SearchResult]], None]] = None,
        on_article: Optional[Callable[[Article], None]] = None,
        on_message: Optional[Callable[[str], None]] = None,
        on_highlight: Optional[Callable[[HighlightTarget], None]] = None,
        on_result_highlight: Optional[Callable[[int], None]] = None,
        on_narration_state: Optional[Callable[[NarrationState], None]] = None,
    ):
        self.logger = logging.getLogger("voicenav.session")
        self.client = client
        self.speech = speech
        self.table = table
        self.router = CommandRouter(table)
        self.language = language
        self.search_types = list(search_types)
        self.limit = limit
        self.cues = cues
        self.run_task = run_task or _run_now

        self.on_mode_change = on_mode_change
        self.on_results = on_results
        self.on_article = on_article
        self.on_message = on_message

        self.narration = NarrationController(
            speech,
            language=language,
            on_highlight=on_highlight,
            on_state_change=on_narration_state,
        )
        self.reader = ResultNarrator(
            speech,
            self.router,
            table,
            language=language,
            on_select=lambda result: self.open_article(result.id),
            on_highlight=on_result_highlight,
            on_home=self.go_home,
        )

        self.mode = Mode.SEARCH
        self.results: List[SearchResult] = []
        self.voice_search = False
        self._request_id = 0

        self._navigation = {
            CommandType.NEXT: self.narration.next_text,
            CommandType.PREVIOUS: self.narration.previous_text,
            CommandType.NEXT_SECTION: self.narration.next_section,
            CommandType.PREVIOUS_SECTION: self.narration.previous_section,
        }

    # ---------- configuration ----------

    def set_language(self, language: str) -> None:
        self.language = language
        self.narration.language = language
        self.reader.language = language
        self.logger.info(f"Language set to '{language}'")

    # ---------- search ----------

    def submit_search(self, query: str, voice: bool = False) -> None:
        query = (query or "").strip()
        if not query or not self.search_types:
            return

        self._reset()
        self.voice_search = voice
        self._message(f"{self.table.sentence(self.language, 'searching')} \"{query}\"")

        stop_loading = self.cues.start_loading() if voice and self.cues is not None else None
        request_id = self._request_id

        def done(results: List[SearchResult]):
            if stop_loading is not None:
                stop_loading()
            if request_id != self._request_id:
                self.logger.debug(f"Ignoring superseded search '{query}'")
                return
            self._search_done(query, results)

        self.run_task(
            lambda: self.client.search_all(query, self.search_types, self.limit),
            done,
        )

    def _search_done(self, query: str, results: List[SearchResult]) -> None:
        if not results:
            self._message(f"No results found for \"{query}\"")
            if self.voice_search:
                self.voice_search = False
                if self.cues is not None:
                    self.cues.play("alert")
                self.speech.say(self.table.sentence(self.language, "search_no_results"), self.language)
            return

        if len(results) == 1:
            self.open_article(results[0].id)
            return

        self.results = list(results)
        self._set_mode(Mode.RESULT_LIST)
        if self.on_results is not None:
            self.on_results(self.results)
        if self.voice_search:
            self.reader.start_reading(self.results)

    # ---------- article ----------

    def open_article(self, article_id: int) -> None:
        self.reader.stop()
        self._request_id += 1
        request_id = self._request_id

        def done(article: Optional[Article]):
            if request_id != self._request_id:
                self.logger.debug(f"Ignoring superseded article {article_id}")
                return
            self._article_done(article_id, article)

        self.run_task(lambda: self.client.fetch_article(article_id), done)

    def _article_done(self, article_id: int, article: Optional[Article]) -> None:
        if article is None:
            self._message(f"Could not open article {article_id}")
            if self.voice_search:
                self.speech.say(self.table.sentence(self.language, "article_not_found"), self.language)
            return

        self.results = []
        self.narration.load(article)
        self._set_mode(Mode.ARTICLE)
        if self.on_article is not None:
            self.on_article(article)
        if self.voice_search:
            self.narration.start()

    def go_home(self) -> None:
        self._reset()
        self.voice_search = False
        self.logger.info("Back to search")

    def _reset(self) -> None:
        self._request_id += 1
        self.reader.stop()
        self.narration.unload()
        self.speech.cancel()
        self.results = []
        self._set_mode(Mode.SEARCH)

    # ---------- manual controls ----------

    def toggle_playback(self) -> None:
        if self.narration.is_playing:
            self.narration.stop()
        else:
            self.narration.start()

    # ---------- voice ----------

    def press_voice_button(self) -> None:
        """
        Microphone button: what happens depends on the mode.

        Search:     ask what to search, listen, search for the transcript.
        ResultList: read the results aloud from the top.
        Article:    pause, ask for a command, listen, run it.
        """
        language = self.language

        if self.mode is Mode.ARTICLE:
            self.narration.stop()
            self.speech.say(
                self.table.sentence(language, "article_prompt"),
                language,
                lambda: self.speech.listen(language, self._article_command),
            )
        elif self.mode is Mode.RESULT_LIST:
            self.voice_search = True
            self.reader.start_reading(self.results)
        else:
            self.voice_search = False
            self.speech.say(
                self.table.sentence(language, "search_prompt"),
                language,
                lambda: self.speech.listen(language, self._search_query),
            )

    def _search_query(self, transcript: str) -> None:
        command = self.router.route(transcript, self.language, Mode.SEARCH)
        if command.type is CommandType.HOME:
            self.go_home()
        elif not transcript.strip():
            self.speech.say(command.message_to_user, self.language)
        else:
            self.submit_search(transcript, voice=True)

    def _article_command(self, transcript: str) -> None:
        command = self.router.route(transcript, self.language, Mode.ARTICLE)
        kind = command.type

        if kind is CommandType.PLAY:
            self.narration.start()
        elif kind is CommandType.STOP:
            self.narration.stop()
        elif kind is CommandType.REPEAT:
            self.narration.repeat()
        elif kind in self._navigation:
            self._navigation[kind]()
            if self.narration.state in (NarrationState.IDLE, NarrationState.PAUSED):
                self.narration.start()
        elif kind is CommandType.HOME:
            self.go_home()
        else:
            self.speech.say(command.message_to_user, self.language)

    # ---------- helpers ----------

    def _set_mode(self, mode: Mode) -> None:
        if mode is self.mode:
            return
        self.logger.info(f"Mode: {self.mode.name} -> {mode.name}")
        self.mode = mode
        if self.on_mode_change is not None:
            self.on_mode_change(mode)

    def _message(self, text: str) -> None:
        self.logger.info(text)
        if self.on_message is not None:
            self.on_message(text)
