from types import SimpleNamespace

import numpy as np
import pytest

try:
    from voicenav.core import audio_manager, stt_service
except OSError as e:  # sounddevice needs the PortAudio shared library
    pytest.skip(f"PortAudio not available: {e}", allow_module_level=True)


@pytest.fixture
def played(monkeypatch):
    calls = []

    def fake_play(data, samplerate, blocking=False):
        calls.append((len(data), samplerate, blocking))

    monkeypatch.setattr(audio_manager.sd, "play", fake_play)
    return calls


def test_listen_start_cue_finishes_before_recording(played):
    cues = audio_manager.AudioCuePlayer(sample_rate=8000)
    cues.play("listen_start")
    cues.play("listen_stop")

    assert played[0] == (800, 8000, True)
    assert played[1][2] is False


def test_disabled_and_unknown_cues_are_silent(played):
    audio_manager.AudioCuePlayer(enabled=False).play("alert")
    audio_manager.AudioCuePlayer().play("fanfare")
    assert played == []


def test_rendered_tone_fades_out():
    player = audio_manager.AudioCuePlayer(sample_rate=8000)
    wave = player._render(audio_manager.CUES["alert"])
    assert wave.dtype == np.float32
    assert len(wave) == 4000
    assert abs(wave[-1]) < abs(wave[1])


class StubModel:
    def __init__(self, text):
        self.text = text
        self.calls = []

    def transcribe(self, audio, language=None, **kwargs):
        self.calls.append(language)
        return [SimpleNamespace(text=self.text)], None


class StubMicrophone:
    def __init__(self, error=None):
        self.error = error
        self.stopped = 0

    def record_phrase(self, duration_sec=4.0):
        if self.error is not None:
            raise self.error
        return np.zeros(1600, dtype=np.float32), 16000

    def stop(self):
        self.stopped += 1


def _recognizer(text="", microphone=None):
    recognizer = stt_service.WhisperSpeechInput(audio_manager=microphone or StubMicrophone())
    recognizer._model = StubModel(text)
    return recognizer


def test_transcript_is_lowercased_without_closing_punctuation():
    recognizer = _recognizer(" Next section.")
    audio = np.zeros((1600, 1), dtype=np.float32)

    assert recognizer.transcribe(audio, 16000, language="it-IT") == "next section"
    assert recognizer.model.calls == ["it"]


def test_question_marks_are_stripped():
    assert _recognizer("¿Sí?").transcribe(np.zeros(10, dtype=np.float32), 16000) == "¿sí"


def test_recording_error_delivers_empty_transcript():
    recognizer = _recognizer("play", StubMicrophone(error=RuntimeError("no device")))
    heard = []
    recognizer._record_and_transcribe("en", heard.append)
    assert heard == [""]


def test_cancelled_session_discards_audio():
    microphone = StubMicrophone()
    recognizer = _recognizer("play", microphone)
    recognizer.cancel()
    heard = []
    recognizer._record_and_transcribe("en", heard.append)

    assert heard == [""]
    assert microphone.stopped == 1
