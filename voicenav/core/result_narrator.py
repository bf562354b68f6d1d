# voicenav/core/result_narrator.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from .command_engine import CommandRouter, CommandType
from .locale_table import LocaleCommandTable
from .models import Mode, SearchResult
from .speech import SpeechCoordinator


@dataclass
class ResultNarrationCursor:
    result_index: int = 0
    active: bool = False


class ResultNarrator:
    """
    Reads a ranked result list aloud, one item at a time.

    For each item: highlight it, speak its title, speak the "open this?"
    prompt, listen once. Then:
      - confirm  -> select the item, reading ends
      - back     -> previous item (wrapping to the last)
      - home     -> hand control back to the session
      - anything else, silence included -> next item (wrapping to the first)

    Reading only ends through confirm, home, or stop().
    """

    def __init__(
        self,
        speech: SpeechCoordinator,
        router: CommandRouter,
        table: LocaleCommandTable,
        language: str = "en",
        on_select: Optional[Callable[[SearchResult], None]] = None,
        on_highlight: Optional[Callable[[int], None]] = None,
        on_home: Optional[Callable[[], None]] = None,
    ):
        self.logger = logging.getLogger("voicenav.results")
        self.speech = speech
        self.router = router
        self.table = table
        self.language = language
        self.on_select = on_select
        self.on_highlight = on_highlight
        self.on_home = on_home

        self.results: List[SearchResult] = []
        self.cursor = ResultNarrationCursor()

    @property
    def active(self) -> bool:
        return self.cursor.active

    @property
    def current(self) -> Optional[SearchResult]:
        if not self.results:
            return None
        return self.results[self.cursor.result_index]

    def start_reading(self, results: Sequence[SearchResult]) -> None:
        self.results = list(results)
        self.cursor = ResultNarrationCursor(result_index=0, active=bool(self.results))
        if not self.results:
            self.logger.warning("start_reading() called with no results")
            return
        self.logger.info(f"Reading {len(self.results)} results")
        self._read_current()

    def stop(self) -> None:
        if not self.cursor.active:
            return
        self.cursor.active = False
        self.speech.cancel()
        self.logger.info("Result reading stopped")

    # ---------- sequence ----------

    def _read_current(self) -> None:
        index = self.cursor.result_index
        if self.on_highlight is not None:
            self.on_highlight(index)
        self.speech.say(
            self.results[index].title,
            self.language,
            lambda: self._title_done(index),
        )

    def _title_done(self, index: int) -> None:
        if not self._still_reading(index):
            return
        prompt = self.table.sentence(self.language, "search_open")
        self.speech.say(prompt, self.language, lambda: self._prompt_done(index))

    def _prompt_done(self, index: int) -> None:
        if not self._still_reading(index):
            return
        self.speech.listen(self.language, lambda transcript: self._heard(index, transcript))

    def _heard(self, index: int, transcript: str) -> None:
        if not self._still_reading(index):
            return

        command = self.router.route(transcript, self.language, Mode.RESULT_LIST)
        n = len(self.results)

        if command.type is CommandType.CONFIRM:
            self.cursor.active = False
            selected = self.results[index]
            self.logger.info(f"Result confirmed: {selected.title} ({selected.id})")
            if self.on_select is not None:
                self.on_select(selected)
            return

        if command.type is CommandType.HOME:
            self.cursor.active = False
            if self.on_home is not None:
                self.on_home()
            return

        if command.type is CommandType.BACK:
            self.cursor.result_index = (index - 1 + n) % n
        else:
            self.cursor.result_index = (index + 1) % n
        self._read_current()

    def _still_reading(self, index: int) -> bool:
        return self.cursor.active and self.cursor.result_index == index
