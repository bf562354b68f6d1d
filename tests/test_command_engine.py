from voicenav.core.command_engine import CommandType
from voicenav.core.models import Mode


def test_article_command_in_italian(router):
    command = router.route("leggi", "it", Mode.ARTICLE)
    assert command.type is CommandType.PLAY
    assert command.raw_text == "leggi"
    assert command.message_to_user == ""


def test_unknown_article_phrase_returns_help(router, table):
    command = router.route("boh", "it", Mode.ARTICLE)
    assert command.type is CommandType.HELP
    assert command.message_to_user == table.sentence("it", "article_help")


def test_result_list_confirm_and_back(router):
    assert router.route("yes", "en", Mode.RESULT_LIST).type is CommandType.CONFIRM
    assert router.route("back", "en", Mode.RESULT_LIST).type is CommandType.BACK
    assert router.route("sì leggilo", "it", Mode.RESULT_LIST).type is CommandType.CONFIRM


def test_result_list_help_is_the_open_prompt(router, table):
    command = router.route("maybe", "en", Mode.RESULT_LIST)
    assert command.type is CommandType.HELP
    assert command.message_to_user == table.sentence("en", "search_open")


def test_home_is_recognized_in_every_mode(router):
    for mode in Mode:
        assert router.route("home", "en", mode).type is CommandType.HOME
        assert router.route("ricarica", "it", mode).type is CommandType.HOME


def test_article_commands_are_not_active_in_result_list(router):
    assert router.route("next", "en", Mode.RESULT_LIST).type is CommandType.HELP


def test_matching_is_exact(router):
    assert router.route("next section", "en", Mode.ARTICLE).type is CommandType.NEXT_SECTION
    assert router.route("next please", "en", Mode.ARTICLE).type is CommandType.HELP
    assert router.route("", "en", Mode.ARTICLE).type is CommandType.HELP


def test_unknown_language_routes_with_fallback(router):
    assert router.route("stop", "fr-FR", Mode.ARTICLE).type is CommandType.STOP
