# voicenav/core/locale_table.py

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, List, Mapping, Optional

from .models import Mode


class LocaleTableError(ValueError):
    """Raised at startup when the locale configuration is unusable."""


SENTENCE_KEYS = (
    "search_prompt",
    "searching",
    "search_no_results",
    "search_open",
    "search_help",
    "article_help",
    "article_prompt",
    "article_not_found",
)

COMMAND_KEYS = (
    "confirm",
    "back",
    "play",
    "stop",
    "repeat",
    "next",
    "previous",
    "next_section",
    "previous_section",
    "home",
)

GLOBAL_COMMANDS = ("home",)

# Commands consulted per mode, in match order. Search mode only knows the
# global commands; anything else spoken there is a query.
MODE_COMMANDS: Dict[Mode, tuple] = {
    Mode.SEARCH: GLOBAL_COMMANDS,
    Mode.RESULT_LIST: ("confirm", "back") + GLOBAL_COMMANDS,
    Mode.ARTICLE: (
        "play",
        "stop",
        "repeat",
        "next",
        "previous",
        "next_section",
        "previous_section",
    ) + GLOBAL_COMMANDS,
}


BUILTIN_LOCALES: Dict[str, dict] = {
    "en": {
        "sentences": {
            "search_prompt": "What do you want to search?",
            "searching": "Searching...",
            "search_no_results": "I am sorry, I didn't find anything.",
            "search_open": "Do you want to open this?",
            "search_help": "Say what you want to search, or say home.",
            "article_help": "You can say: play, stop, repeat, next, previous, "
                            "next section, previous section, or home.",
            "article_prompt": "How can I help you?",
            "article_not_found": "I am sorry, I could not open this article.",
        },
        "commands": {
            "confirm": ["yes", "open"],
            "back": ["back"],
            "play": ["play", "continue"],
            "stop": ["stop"],
            "repeat": ["repeat"],
            "next": ["next"],
            "previous": ["previous"],
            "next_section": ["next section"],
            "previous_section": ["previous section"],
            "home": ["home"],
        },
    },
    "it": {
        "sentences": {
            "search_prompt": "Cosa vorresti cercare?",
            "searching": "sto cercando...",
            "search_no_results": "Mi dispiace ma non ho trovato niente.",
            "search_open": "Vuoi lèggere quest'articolo?",
            "search_help": "Dimmi cosa vuoi cercare, oppure di' ricarica.",
            "article_help": "Puoi dire: leggi, pausa, ripeti, indietro, avanti, "
                            "sezione successiva, sezione precedente o ricarica.",
            "article_prompt": "Dimmi?",
            "article_not_found": "Mi dispiace, non riesco ad aprire quest'articolo.",
        },
        "commands": {
            "confirm": ["sì", "si", "leggi", "leggilo", "sì leggilo", "sì leggi"],
            "back": ["indietro"],
            "play": ["leggi", "continua"],
            "stop": ["stop", "pausa"],
            "repeat": ["ripeti"],
            "next": ["avanti"],
            "previous": ["indietro"],
            "next_section": ["sezione successiva"],
            "previous_section": ["sezione precedente"],
            "home": ["ricarica"],
        },
    },
    "es": {
        "sentences": {
            "search_prompt": "¿Qué quieres buscar?",
            "searching": "Buscando...",
            "search_no_results": "Lo siento, no he encontrado nada.",
            "search_open": "¿Quieres abrir esto?",
            "search_help": "Dime qué quieres buscar, o di inicio.",
            "article_help": "Puedes decir: reproducir, parar, repetir, siguiente, anterior, "
                            "sección siguiente, sección anterior o inicio.",
            "article_prompt": "¿Cómo puedo ayudarte?",
            "article_not_found": "Lo siento, no he podido abrir este artículo.",
        },
        "commands": {
            "confirm": ["sí", "si", "abrir"],
            "back": ["atrás"],
            "play": ["reproducir", "continuar"],
            "stop": ["parar", "detener"],
            "repeat": ["repetir"],
            "next": ["siguiente"],
            "previous": ["anterior"],
            "next_section": ["sección siguiente"],
            "previous_section": ["sección anterior"],
            "home": ["inicio"],
        },
    },
    "de": {
        "sentences": {
            "search_prompt": "Was möchten Sie suchen?",
            "searching": "Suche läuft...",
            "search_no_results": "Es tut mir leid, ich habe nichts gefunden.",
            "search_open": "Möchten Sie das öffnen?",
            "search_help": "Sagen Sie, wonach Sie suchen möchten, oder sagen Sie Startseite.",
            "article_help": "Sie können sagen: abspielen, stoppen, wiederholen, nächster, vorheriger, "
                            "nächster Abschnitt, vorheriger Abschnitt oder Startseite.",
            "article_prompt": "Wie kann ich Ihnen helfen?",
            "article_not_found": "Es tut mir leid, ich konnte diesen Artikel nicht öffnen.",
        },
        "commands": {
            "confirm": ["ja", "öffnen"],
            "back": ["zurück"],
            "play": ["abspielen", "weiter"],
            "stop": ["stopp", "anhalten"],
            "repeat": ["wiederholen"],
            "next": ["nächster"],
            "previous": ["vorheriger"],
            "next_section": ["nächster abschnitt"],
            "previous_section": ["vorheriger abschnitt"],
            "home": ["startseite"],
        },
    },
}


@dataclass(frozen=True)
class LocaleEntry:
    language: str
    sentences: Mapping[str, str]
    commands: Mapping[str, FrozenSet[str]]

    def sentence(self, key: str) -> str:
        return self.sentences[key]

    def phrases(self, command: str) -> FrozenSet[str]:
        return self.commands[command]


class LocaleCommandTable:
    """
    Per-language command phrases and prompt sentences.

    Every table is validated when the LocaleCommandTable is built:
      - all sentences and all commands must be present and non-empty
      - phrases must already be lowercase (transcripts arrive lowercased
        and are matched verbatim)
      - inside one mode no phrase may belong to two commands
      - the fallback language must itself be a known table

    Lookups for an unknown language fall back to the primary subtag
    ("it-IT" -> "it") and then to the fallback language.
    """

    def __init__(
        self,
        locales: Optional[Mapping[str, dict]] = None,
        fallback_language: str = "en",
    ):
        self.logger = logging.getLogger("voicenav.locale")
        raw = BUILTIN_LOCALES if locales is None else locales
        self._entries: Dict[str, LocaleEntry] = {}
        for language, table in raw.items():
            self.add(language, table)

        if fallback_language not in self._entries:
            raise LocaleTableError(
                f"Fallback language '{fallback_language}' has no command table"
            )
        self.fallback_language = fallback_language
        self._warned: set = set()

    # ---------- loading ----------

    @classmethod
    def from_directory(
        cls,
        directory: Optional[Path],
        fallback_language: str = "en",
    ) -> "LocaleCommandTable":
        """
        Built-in tables plus every *.json file in `directory`.

        A file looks like {"language": "fr", "sentences": {...}, "commands": {...}}
        and replaces a built-in table of the same language.
        """
        tables: Dict[str, dict] = {k: v for k, v in BUILTIN_LOCALES.items()}
        if directory is not None:
            path = Path(directory)
            if path.is_dir():
                for file in sorted(path.glob("*.json")):
                    try:
                        raw = json.loads(file.read_text(encoding="utf-8"))
                    except (OSError, ValueError) as e:
                        raise LocaleTableError(f"Cannot read locale file {file}: {e}") from e
                    if not isinstance(raw, dict):
                        raise LocaleTableError(f"Locale file {file} must contain a JSON object")
                    language = raw.get("language") or file.stem
                    tables[language] = raw
        return cls(tables, fallback_language=fallback_language)

    def add(self, language: str, table: Mapping) -> None:
        entry = self._validate(language, table)
        self._entries[language] = entry
        self.logger.debug(f"Locale table registered: {language}")

    # ---------- lookup ----------

    @property
    def languages(self) -> List[str]:
        return sorted(self._entries)

    def __contains__(self, language: str) -> bool:
        return language in self._entries

    def resolve(self, language: str) -> LocaleEntry:
        entry = self._entries.get(language)
        if entry is not None:
            return entry

        primary = (language or "").replace("_", "-").split("-")[0].lower()
        entry = self._entries.get(primary)
        if entry is not None:
            return entry

        if language not in self._warned:
            self._warned.add(language)
            self.logger.warning(
                f"No command table for '{language}', using '{self.fallback_language}'"
            )
        return self._entries[self.fallback_language]

    def sentence(self, language: str, key: str) -> str:
        return self.resolve(language).sentence(key)

    def commands_for(self, language: str, mode: Mode) -> List[tuple]:
        """(command key, phrases) pairs for `mode`, in match order."""
        entry = self.resolve(language)
        return [(key, entry.phrases(key)) for key in MODE_COMMANDS[mode]]

    # ---------- validation ----------

    def _validate(self, language: str, table: Mapping) -> LocaleEntry:
        if not language:
            raise LocaleTableError("Locale table without a language")

        sentences = table.get("sentences") or {}
        commands = table.get("commands") or {}

        missing = [k for k in SENTENCE_KEYS if not str(sentences.get(k) or "").strip()]
        if missing:
            raise LocaleTableError(f"[{language}] missing sentences: {', '.join(missing)}")

        phrase_sets: Dict[str, FrozenSet[str]] = {}
        for key in COMMAND_KEYS:
            phrases = commands.get(key)
            if isinstance(phrases, str):
                phrases = [phrases]
            phrases = list(phrases or [])
            if not phrases:
                raise LocaleTableError(f"[{language}] command '{key}' has no phrases")
            for phrase in phrases:
                if not isinstance(phrase, str) or not phrase.strip():
                    raise LocaleTableError(f"[{language}] command '{key}' has an empty phrase")
                if phrase != phrase.lower():
                    raise LocaleTableError(
                        f"[{language}] phrase '{phrase}' of '{key}' must be lowercase"
                    )
            phrase_sets[key] = frozenset(phrases)

        for mode, keys in MODE_COMMANDS.items():
            _check_disjoint(language, mode, ((k, phrase_sets[k]) for k in keys))

        return LocaleEntry(
            language=language,
            sentences={k: str(sentences[k]) for k in SENTENCE_KEYS},
            commands=phrase_sets,
        )


def _check_disjoint(language: str, mode: Mode, pairs: Iterable[tuple]) -> None:
    owner: Dict[str, str] = {}
    for key, phrases in pairs:
        for phrase in phrases:
            if phrase in owner:
                raise LocaleTableError(
                    f"[{language}] phrase '{phrase}' is used by both '{owner[phrase]}' "
                    f"and '{key}' in {mode.name} mode"
                )
            owner[phrase] = key
