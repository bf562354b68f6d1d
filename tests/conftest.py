import pytest

from voicenav.core.command_engine import CommandRouter
from voicenav.core.interfaces import AudioCues, SpeechInput, SpeechOutput
from voicenav.core.locale_table import LocaleCommandTable
from voicenav.core.models import Article, Section, SearchResult
from voicenav.core.speech import SpeechCoordinator


class FakeSpeechOutput(SpeechOutput):
    """Records utterances; an utterance ends only when the test calls finish()."""

    def __init__(self):
        self.spoken = []
        self.pending = None
        self.cancelled = 0

    def speak(self, text, language, on_done):
        self.spoken.append((text, language))
        self.pending = on_done

    def finish(self):
        on_done, self.pending = self.pending, None
        assert on_done is not None, "nothing is being spoken"
        on_done()

    def cancel(self):
        self.cancelled += 1
        self.pending = None

    @property
    def texts(self):
        return [text for text, _ in self.spoken]


class FakeSpeechInput(SpeechInput):
    def __init__(self):
        self.sessions = []
        self.pending = None
        self.cancelled = 0

    def listen(self, language, on_result):
        self.sessions.append(language)
        self.pending = on_result

    def respond(self, transcript):
        on_result, self.pending = self.pending, None
        assert on_result is not None, "no recognition session is open"
        on_result(transcript)

    def cancel(self):
        self.cancelled += 1
        self.pending = None


class FakeCues(AudioCues):
    def __init__(self):
        self.played = []
        self.loading_stopped = 0

    def play(self, name):
        self.played.append(name)

    def start_loading(self):
        self.played.append("loading")

        def stop():
            self.loading_stopped += 1

        return stop


@pytest.fixture
def output():
    return FakeSpeechOutput()


@pytest.fixture
def recognizer():
    return FakeSpeechInput()


@pytest.fixture
def cues():
    return FakeCues()


@pytest.fixture
def speech(output, recognizer):
    return SpeechCoordinator(output, recognizer)


@pytest.fixture
def table():
    return LocaleCommandTable()


@pytest.fixture
def router(table):
    return CommandRouter(table)


@pytest.fixture
def article():
    return Article(
        id=7,
        title="Title",
        sections=(
            Section("S0", ("a", "b")),
            Section("S1", ("c",)),
        ),
    )


@pytest.fixture
def results():
    return [
        SearchResult(1, "First"),
        SearchResult(2, "Second"),
        SearchResult(3, "Third"),
    ]
