import json

from voicenav.core.config import Config


def test_missing_file_writes_defaults(tmp_path):
    path = tmp_path / "conf" / "config.json"
    config = Config(str(path))

    assert path.exists()
    assert config.language == "en"
    assert config.api_base_url == "http://127.0.0.1:35248"
    assert config.search_types == ["lexical"]
    assert config.listen_timeout == 8.0


def test_partial_file_is_merged_with_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"language": "it", "api": {"timeout": 3}}), encoding="utf-8")
    config = Config(str(path))

    assert config.language == "it"
    assert config.api_timeout == 3.0
    assert config.api_base_url == "http://127.0.0.1:35248"
    assert config.get("stt.model_size") == "base"


def test_corrupt_file_falls_back_to_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{broken", encoding="utf-8")
    config = Config(str(path))
    assert config.language == "en"
    assert config.search_limit == 5


def test_ai_adds_semantic_search(tmp_path):
    config = Config(str(tmp_path / "config.json"))
    config.set("ai", True)
    assert config.search_types == ["lexical", "semantic"]


def test_dot_notation_get_and_set(tmp_path):
    config = Config(str(tmp_path / "config.json"))
    assert config.set("speech.listen_timeout", None)
    assert config.listen_timeout is None
    assert config.set("new.nested.key", 1)
    assert config.get("new.nested.key") == 1
    assert config.get("api.missing", "x") == "x"


def test_save_round_trips(tmp_path):
    path = tmp_path / "config.json"
    config = Config(str(path))
    config.set("language", "de")
    assert config.save()
    assert Config(str(path)).language == "de"
