# voicenav/core/narration.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from .models import (
    Article,
    HighlightTarget,
    NarrationState,
    PlaybackPosition,
    SegmentKind,
)
from .speech import SpeechCoordinator


@dataclass(frozen=True)
class NarrationStop:
    kind: SegmentKind
    position: PlaybackPosition

    @property
    def target(self) -> HighlightTarget:
        return HighlightTarget(self.kind, self.position)


_PLAYING_STATE = {
    SegmentKind.TITLE: NarrationState.PLAYING_TITLE,
    SegmentKind.SECTION_TITLE: NarrationState.PLAYING_SECTION_TITLE,
    SegmentKind.TEXT: NarrationState.PLAYING_TEXT,
}


def build_stops(article: Article) -> List[NarrationStop]:
    """
    Autoplay order for one article:

        title, section 0 title, texts of section 0, section 1 title, ...

    A section without texts contributes only its title.
    """
    stops = [NarrationStop(SegmentKind.TITLE, PlaybackPosition(0, 0))]
    for s, section in enumerate(article.sections):
        stops.append(NarrationStop(SegmentKind.SECTION_TITLE, PlaybackPosition(s, 0)))
        for t in range(len(section.texts)):
            stops.append(NarrationStop(SegmentKind.TEXT, PlaybackPosition(s, t)))
    return stops


class NarrationController:
    """
    Interruptible narration of one article.

    The narration pointer is an index into the stop list built by
    build_stops(). Autoplay only ever moves it from the single completion
    handler (_on_utterance_done); user operations move it explicitly.

    Navigation while playing (or after Finished) speaks the new stop.
    Navigation while Idle or Paused only moves and highlights the pointer;
    start() then speaks from there. A paused text restarts from its
    beginning on resume.

    Callbacks:
      on_highlight(HighlightTarget)    - exactly one element is current
      on_state_change(NarrationState)
    """

    def __init__(
        self,
        speech: SpeechCoordinator,
        language: str = "en",
        on_highlight: Optional[Callable[[HighlightTarget], None]] = None,
        on_state_change: Optional[Callable[[NarrationState], None]] = None,
    ):
        self.logger = logging.getLogger("voicenav.narration")
        self.speech = speech
        self.language = language
        self.on_highlight = on_highlight
        self.on_state_change = on_state_change

        self.article: Optional[Article] = None
        self._stops: List[NarrationStop] = []
        self._index = 0
        self._state = NarrationState.IDLE

    # ---------- state ----------

    @property
    def state(self) -> NarrationState:
        return self._state

    @property
    def is_playing(self) -> bool:
        return self._state.is_playing

    @property
    def position(self) -> PlaybackPosition:
        if not self._stops:
            return PlaybackPosition(0, 0)
        return self._stops[self._index].position

    @property
    def current_stop(self) -> Optional[NarrationStop]:
        if not self._stops:
            return None
        return self._stops[self._index]

    # ---------- lifecycle ----------

    def load(self, article: Article) -> None:
        """Take a freshly fetched article; position (0,0), Idle."""
        if self.is_playing:
            self.speech.cancel()
        self.article = article
        self._stops = build_stops(article)
        self._index = 0
        self._set_state(NarrationState.IDLE)
        self.logger.info(
            f"Article loaded: '{article.title}' ({len(article.sections)} sections, "
            f"{len(self._stops)} stops)"
        )

    def unload(self) -> None:
        if self.is_playing:
            self.speech.cancel()
        self.article = None
        self._stops = []
        self._index = 0
        self._set_state(NarrationState.IDLE)

    # ---------- playback ----------

    def start(self) -> None:
        if not self._require_article("start") or self.is_playing:
            return
        self.speech.cancel()
        self._speak_current()

    def stop(self) -> None:
        if not self._require_article("stop"):
            return
        self.speech.cancel()
        if self.is_playing:
            self._set_state(NarrationState.PAUSED)

    def repeat(self) -> None:
        if not self._require_article("repeat"):
            return
        self.speech.cancel()
        self._speak_current()

    # ---------- navigation ----------

    def next_text(self) -> None:
        if not self._require_article("next_text"):
            return
        current = self._stops[self._index]
        if current.kind is SegmentKind.TITLE:
            target = self._find(lambda stop: stop.kind is SegmentKind.TEXT)
        else:
            target = self._find(
                lambda stop: stop.kind is SegmentKind.TEXT and stop.position > current.position
            )

        if target is None:
            self.speech.cancel()
            self._set_state(NarrationState.FINISHED)
            self.logger.info("Last text reached; narration finished.")
            return
        self._move_to(target)

    def previous_text(self) -> None:
        if not self._require_article("previous_text"):
            return
        if self._state is NarrationState.FINISHED:
            # re-enter at the position narration finished on
            self.speech.cancel()
            self._speak_current()
            return

        current = self._stops[self._index]
        if current.kind is SegmentKind.TITLE:
            return
        target = self._find(
            lambda stop: stop.kind is SegmentKind.TEXT and stop.position < current.position,
            last=True,
        )
        if target is None:
            return
        self._move_to(target)

    def next_section(self) -> None:
        if not self._require_article("next_section"):
            return
        section = self.position.section + 1
        if section >= len(self.article.sections):
            return
        self._move_to(self._section_title_index(section))

    def previous_section(self) -> None:
        if not self._require_article("previous_section"):
            return
        section = self.position.section - 1
        if section < 0:
            return
        self._move_to(self._section_title_index(section))

    # ---------- internals ----------

    def _move_to(self, index: int) -> None:
        speak = self._state.is_playing or self._state is NarrationState.FINISHED
        self.speech.cancel()
        self._index = index
        if speak:
            self._speak_current()
        else:
            self._highlight()

    def _speak_current(self) -> None:
        stop = self._stops[self._index]
        self._set_state(_PLAYING_STATE[stop.kind])
        self._highlight()
        self.speech.say(self._text_of(stop), self.language, self._on_utterance_done)

    def _on_utterance_done(self) -> None:
        """Autoplay step: the one place narration advances by itself."""
        if not self.is_playing:
            return
        if self._index + 1 < len(self._stops):
            self._index += 1
            self._speak_current()
        else:
            self._set_state(NarrationState.FINISHED)
            self.logger.info("Narration finished.")

    def _text_of(self, stop: NarrationStop) -> str:
        if stop.kind is SegmentKind.TITLE:
            return self.article.title
        section = self.article.sections[stop.position.section]
        if stop.kind is SegmentKind.SECTION_TITLE:
            return section.title
        return section.texts[stop.position.text]

    def _find(self, predicate, last: bool = False) -> Optional[int]:
        indexes = range(len(self._stops))
        if last:
            indexes = reversed(indexes)
        for i in indexes:
            if predicate(self._stops[i]):
                return i
        return None

    def _section_title_index(self, section: int) -> int:
        return self._find(
            lambda stop: stop.kind is SegmentKind.SECTION_TITLE and stop.position.section == section
        )

    def _highlight(self) -> None:
        if self.on_highlight is not None:
            self.on_highlight(self._stops[self._index].target)

    def _set_state(self, state: NarrationState) -> None:
        if state is self._state:
            return
        self.logger.debug(f"Narration state: {self._state.name} -> {state.name}")
        self._state = state
        if self.on_state_change is not None:
            self.on_state_change(state)

    def _require_article(self, operation: str) -> bool:
        if self.article is None:
            self.logger.warning(f"{operation}() ignored: no article loaded")
            return False
        return True
