import copy
import json

import pytest

from voicenav.core.locale_table import BUILTIN_LOCALES, LocaleCommandTable, LocaleTableError
from voicenav.core.models import Mode


def _english():
    return copy.deepcopy(BUILTIN_LOCALES["en"])


def test_builtin_tables_validate():
    table = LocaleCommandTable()
    assert table.languages == ["de", "en", "es", "it"]


def test_region_tag_maps_to_primary_language(table):
    assert table.resolve("it-IT").language == "it"
    assert table.sentence("it_IT", "article_prompt") == "Dimmi?"


def test_unknown_language_uses_fallback(table):
    assert table.resolve("xx").language == "en"
    assert table.sentence("xx", "search_prompt") == "What do you want to search?"


def test_missing_fallback_is_rejected():
    with pytest.raises(LocaleTableError):
        LocaleCommandTable({"en": _english()}, fallback_language="fr")


def test_missing_command_is_rejected():
    broken = _english()
    del broken["commands"]["repeat"]
    with pytest.raises(LocaleTableError, match="repeat"):
        LocaleCommandTable({"en": broken})


def test_missing_sentence_is_rejected():
    broken = _english()
    broken["sentences"]["search_open"] = ""
    with pytest.raises(LocaleTableError, match="search_open"):
        LocaleCommandTable({"en": broken})


def test_phrase_shared_inside_one_mode_is_rejected():
    broken = _english()
    broken["commands"]["next"] = ["next", "stop"]
    with pytest.raises(LocaleTableError, match="stop"):
        LocaleCommandTable({"en": broken})


def test_phrase_shared_across_modes_is_allowed():
    # "leggi" confirms in the result list and plays in an article
    table = LocaleCommandTable()
    confirm = dict(table.commands_for("it", Mode.RESULT_LIST))["confirm"]
    play = dict(table.commands_for("it", Mode.ARTICLE))["play"]
    assert "leggi" in confirm and "leggi" in play


def test_uppercase_phrase_is_rejected():
    broken = _english()
    broken["commands"]["home"] = ["Home"]
    with pytest.raises(LocaleTableError, match="lowercase"):
        LocaleCommandTable({"en": broken})


def test_search_mode_only_knows_global_commands(table):
    assert [key for key, _ in table.commands_for("en", Mode.SEARCH)] == ["home"]


def test_directory_tables_override_builtins(tmp_path):
    custom = _english()
    custom["language"] = "en"
    custom["commands"]["home"] = ["home", "start over"]
    (tmp_path / "en.json").write_text(json.dumps(custom), encoding="utf-8")

    fr = _english()
    fr["commands"]["home"] = ["accueil"]
    (tmp_path / "fr.json").write_text(json.dumps(fr), encoding="utf-8")

    table = LocaleCommandTable.from_directory(tmp_path)
    assert "start over" in table.resolve("en").phrases("home")
    assert "fr" in table
    assert table.resolve("fr-CA").phrases("home") == frozenset({"accueil"})


def test_unreadable_locale_file_is_rejected(tmp_path):
    (tmp_path / "bad.json").write_text("{not json", encoding="utf-8")
    with pytest.raises(LocaleTableError):
        LocaleCommandTable.from_directory(tmp_path)


def test_missing_directory_keeps_builtins(tmp_path):
    table = LocaleCommandTable.from_directory(tmp_path / "nope")
    assert table.languages == ["de", "en", "es", "it"]
