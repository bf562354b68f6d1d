# voicenav/core/command_engine.py

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, auto

from .locale_table import LocaleCommandTable
from .models import Mode


class CommandType(Enum):
    PLAY = auto()
    STOP = auto()
    REPEAT = auto()
    NEXT = auto()
    PREVIOUS = auto()
    NEXT_SECTION = auto()
    PREVIOUS_SECTION = auto()
    HOME = auto()
    CONFIRM = auto()
    BACK = auto()
    HELP = auto()


_COMMAND_KEYS = {
    "play": CommandType.PLAY,
    "stop": CommandType.STOP,
    "repeat": CommandType.REPEAT,
    "next": CommandType.NEXT,
    "previous": CommandType.PREVIOUS,
    "next_section": CommandType.NEXT_SECTION,
    "previous_section": CommandType.PREVIOUS_SECTION,
    "home": CommandType.HOME,
    "confirm": CommandType.CONFIRM,
    "back": CommandType.BACK,
}

_HELP_SENTENCES = {
    Mode.SEARCH: "search_help",
    Mode.RESULT_LIST: "search_open",
    Mode.ARTICLE: "article_help",
}


@dataclass
class ParsedCommand:
    type: CommandType
    raw_text: str
    mode: Mode
    language: str
    message_to_user: str = ""


class CommandRouter:
    """
    Maps one recognized transcript to a semantic command.

    Matching is exact membership in the phrase sets of the active
    language and mode; the transcript is used as delivered (already
    lowercased by the recognizer). Anything else is HELP, with the
    mode's help sentence attached for the caller to speak.
    """

    def __init__(self, table: LocaleCommandTable):
        self.logger = logging.getLogger("voicenav.router")
        self.table = table

    def route(self, transcript: str, language: str, mode: Mode) -> ParsedCommand:
        for key, phrases in self.table.commands_for(language, mode):
            if transcript in phrases:
                command = _COMMAND_KEYS[key]
                self.logger.info(f"Voice command [{language}/{mode.name}] '{transcript}' -> {command.name}")
                return ParsedCommand(
                    type=command,
                    raw_text=transcript,
                    mode=mode,
                    language=language,
                )

        self.logger.info(f"No command for '{transcript}' [{language}/{mode.name}]")
        return ParsedCommand(
            type=CommandType.HELP,
            raw_text=transcript,
            mode=mode,
            language=language,
            message_to_user=self.help_sentence(language, mode),
        )

    def help_sentence(self, language: str, mode: Mode) -> str:
        return self.table.sentence(language, _HELP_SENTENCES[mode])
