import pytest

from voicenav.core.result_narrator import ResultNarrator


@pytest.fixture
def events():
    return {"selected": [], "highlighted": [], "home": 0}


@pytest.fixture
def reader(speech, router, table, events):
    def go_home():
        events["home"] += 1

    return ResultNarrator(
        speech,
        router,
        table,
        language="en",
        on_select=events["selected"].append,
        on_highlight=events["highlighted"].append,
        on_home=go_home,
    )


def _reach_question(output):
    """Finish the title and the prompt so the reader is listening."""
    output.finish()
    output.finish()


def test_each_result_is_read_then_asked(reader, output, recognizer, results, events):
    reader.start_reading(results)
    assert output.texts == ["First"]
    _reach_question(output)

    assert output.texts == ["First", "Do you want to open this?"]
    assert recognizer.pending is not None
    assert events["highlighted"] == [0]


def test_silence_moves_to_next_and_wraps(reader, output, recognizer, results, events):
    reader.start_reading(results)
    for _ in range(3):
        _reach_question(output)
        recognizer.respond("")
    assert events["highlighted"] == [0, 1, 2, 0]
    assert reader.current == results[0]


def test_back_wraps_to_the_last_result(reader, output, recognizer, results, events):
    reader.start_reading(results)
    _reach_question(output)
    recognizer.respond("what")
    assert reader.cursor.result_index == 1

    _reach_question(output)
    recognizer.respond("back")
    assert reader.cursor.result_index == 0

    _reach_question(output)
    recognizer.respond("back")
    assert reader.cursor.result_index == 2
    assert output.texts[-1] == "Third"


def test_confirm_selects_and_ends_reading(reader, output, recognizer, results, events):
    reader.start_reading(results)
    _reach_question(output)
    recognizer.respond("skip")
    _reach_question(output)
    recognizer.respond("yes")

    assert events["selected"] == [results[1]]
    assert not reader.active
    assert output.pending is None


def test_home_hands_control_back(reader, output, recognizer, results, events):
    reader.start_reading(results)
    _reach_question(output)
    recognizer.respond("home")
    assert events["home"] == 1
    assert not reader.active


def test_stop_voids_pending_steps(reader, output, results):
    reader.start_reading(results)
    reader.stop()
    assert not reader.active
    assert output.pending is None
    assert output.cancelled == 1


def test_empty_results_do_not_start(reader, output):
    reader.start_reading([])
    assert not reader.active
    assert output.spoken == []
