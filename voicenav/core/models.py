# voicenav/core/models.py

"""
Data model shared by the narration core and the UI.

Articles and search results are immutable once built from an API payload.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Dict, Optional, Tuple


class NarrationState(Enum):
    IDLE = auto()
    PLAYING_TITLE = auto()
    PLAYING_SECTION_TITLE = auto()
    PLAYING_TEXT = auto()
    PAUSED = auto()
    FINISHED = auto()

    @property
    def is_playing(self) -> bool:
        return self in (
            NarrationState.PLAYING_TITLE,
            NarrationState.PLAYING_SECTION_TITLE,
            NarrationState.PLAYING_TEXT,
        )


class Mode(Enum):
    SEARCH = auto()
    RESULT_LIST = auto()
    ARTICLE = auto()


class SegmentKind(Enum):
    """What a narration stop speaks: the article title, a section title or a text."""

    TITLE = auto()
    SECTION_TITLE = auto()
    TEXT = auto()


@dataclass(frozen=True)
class Section:
    title: str
    texts: Tuple[str, ...] = ()

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "Section":
        """
        Accepts both the current shape ({"title", "texts": [...]}) and the
        legacy one ({"title", "content": "..."}), which becomes one text.
        """
        title = str(payload.get("title") or "")
        if "texts" in payload and payload["texts"] is not None:
            texts = tuple(str(t) for t in payload["texts"] if str(t).strip())
        else:
            content = str(payload.get("content") or "")
            texts = (content,) if content.strip() else ()
        return cls(title=title, texts=texts)


@dataclass(frozen=True)
class Article:
    id: Optional[int]
    title: str
    sections: Tuple[Section, ...] = ()

    @classmethod
    def from_payload(cls, payload: Dict[str, Any], article_id: Optional[int] = None) -> "Article":
        sections = tuple(Section.from_payload(s) for s in payload.get("sections") or [])
        ident = payload.get("id", article_id)
        return cls(id=ident, title=str(payload.get("title") or ""), sections=sections)


@dataclass(frozen=True)
class SearchResult:
    id: int
    title: str
    snippet: str = ""

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "SearchResult":
        return cls(
            id=int(payload["article_id"]),
            title=str(payload.get("title") or ""),
            snippet=str(payload.get("text") or ""),
        )


@dataclass(frozen=True, order=True)
class PlaybackPosition:
    section: int = 0
    text: int = 0


@dataclass(frozen=True)
class HighlightTarget:
    """One UI element marked as "current"; ids follow the article markup."""

    kind: SegmentKind
    position: PlaybackPosition

    @property
    def element_id(self) -> str:
        if self.kind is SegmentKind.TITLE:
            return "article-title"
        if self.kind is SegmentKind.SECTION_TITLE:
            return f"section-{self.position.section}"
        return f"text-{self.position.section}-{self.position.text}"
