import asyncio

import pytest
import requests

from screening_agent.health import check_speech_health
from screening_agent.config import LiveKitConfig
from screening_agent.livekit_speech import AudioClipQueue, LiveKitRecognizer, LiveKitSynthesizer
from screening_agent.speech import NullRecognizer, NullSynthesizer, SpeechIO
from screening_agent.stt_client import LiveKitSTTClient
from screening_agent.tts_client import LiveKitTTSClient

from conftest import read_logs


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code
        self.content = b"{}" if payload is not None else b""

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self.payload


class StubTTS:
    def __init__(self, audio_url="https://cdn.example/prompt.mp3", error=None):
        self.audio_url = audio_url
        self.error = error
        self.calls = []

    def synthesize(self, text):
        self.calls.append(text)
        if self.error:
            raise self.error
        return self.audio_url


class StubSTT:
    def __init__(self, text="", error=None):
        self.text = text
        self.error = error
        self.calls = []

    def transcribe_url(self, audio_url):
        self.calls.append(audio_url)
        if self.error:
            raise self.error
        return self.text


def set_livekit_env(monkeypatch):
    monkeypatch.setenv("LIVEKIT_API_KEY", "key")
    monkeypatch.setenv("LIVEKIT_API_SECRET", "secret")
    monkeypatch.setenv("LIVEKIT_URL", "wss://speech.example")


def test_tts_client_posts_text_and_returns_audio_url(monkeypatch):
    calls = []

    def fake_post(url, json=None, headers=None, timeout=None):
        calls.append((url, json, headers))
        return FakeResponse({"audio_url": " https://cdn.example/a.mp3 "})

    monkeypatch.setattr("screening_agent.tts_client.requests.post", fake_post)
    client = LiveKitTTSClient("https://speech.example/", "key")

    assert client.synthesize("Hello...there") == "https://cdn.example/a.mp3"
    url, payload, headers = calls[0]
    assert url == "https://speech.example/v1/tts/synthesize"
    assert payload["text"] == "Hello. there"
    assert headers["Authorization"] == "Bearer key"


def test_stt_client_requests_final_results_only(monkeypatch):
    calls = []

    def fake_post(url, json=None, headers=None, timeout=None):
        calls.append((url, json))
        return FakeResponse({"text": " 30 days "})

    monkeypatch.setattr("screening_agent.stt_client.requests.post", fake_post)
    client = LiveKitSTTClient("https://speech.example", "key")

    assert client.transcribe_url("https://cdn.example/answer.wav") == "30 days"
    url, payload = calls[0]
    assert url == "https://speech.example/v1/stt/transcribe"
    assert payload == {"audio_url": "https://cdn.example/answer.wav", "language": "en-US", "interim_results": False}


def test_stt_client_raises_on_http_error(monkeypatch):
    monkeypatch.setattr(
        "screening_agent.stt_client.requests.post",
        lambda *a, **kw: FakeResponse({}, status_code=503),
    )
    with pytest.raises(requests.HTTPError):
        LiveKitSTTClient("https://speech.example", "key").transcribe_url("x")


def test_synthesizer_paces_playback_and_fires_hooks():
    tts = StubTTS()
    synth = LiveKitSynthesizer(tts, words_per_minute=6000)
    events = []
    synth.on_start = lambda: events.append("start")
    synth.on_end = lambda: events.append("end")

    asyncio.run(synth.speak("one two three"))

    assert tts.calls == ["one two three"]
    assert events == ["start", "end"]
    assert synth.last_audio_url == "https://cdn.example/prompt.mp3"
    assert synth.playback_seconds("one two three") == pytest.approx(0.03)


def test_synthesizer_cancel_ends_playback_early():
    synth = LiveKitSynthesizer(StubTTS(), words_per_minute=1)
    ended = []
    synth.on_end = lambda: ended.append(True)

    async def scenario():
        task = asyncio.create_task(synth.speak("a long prompt that would take minutes"))
        await asyncio.sleep(0.05)
        synth.cancel()
        await asyncio.wait_for(task, timeout=1)

    asyncio.run(scenario())
    assert ended == [True]


def test_synthesizer_failure_counts_as_spoken(isolated_env):
    synth = LiveKitSynthesizer(StubTTS(error=requests.ConnectionError("down")))
    started = []
    synth.on_start = lambda: started.append(True)

    asyncio.run(synth.speak("hello"))

    assert started == []
    assert "TTS_FAIL" in read_logs(isolated_env)


def _recognize(stt, clip_urls=("https://cdn.example/answer.wav",)):
    clips = AudioClipQueue()
    recognizer = LiveKitRecognizer(stt, clips)
    results, errors = [], []
    recognizer.on_result = results.append
    recognizer.on_error = errors.append

    async def scenario():
        recognizer.start()
        for url in clip_urls:
            clips.submit(url)
        await asyncio.sleep(0.1)

    asyncio.run(scenario())
    return recognizer, results, errors


def test_recognizer_delivers_one_final_result():
    recognizer, results, errors = _recognize(StubSTT(text="yes please"))
    assert results == ["yes please"]
    assert errors == []
    assert not recognizer.listening


def test_recognizer_is_not_continuous():
    stt = StubSTT(text="yes")
    _, results, _ = _recognize(stt, clip_urls=("a.wav", "b.wav"))
    assert results == ["yes"]
    assert stt.calls == ["a.wav"]


def test_recognizer_reports_empty_transcript_as_no_speech():
    _, results, errors = _recognize(StubSTT(text=""))
    assert results == []
    assert errors == ["no-speech"]


def test_recognizer_reports_request_failure():
    _, results, errors = _recognize(StubSTT(error=requests.Timeout("timed out")))
    assert results == []
    assert errors == ["timed out"]


def test_recognizer_stop_cancels_pending_capture():
    stt = StubSTT(text="yes")
    clips = AudioClipQueue()
    recognizer = LiveKitRecognizer(stt, clips)
    results = []
    recognizer.on_result = results.append

    async def scenario():
        recognizer.start()
        await asyncio.sleep(0)
        recognizer.stop()
        clips.submit("late.wav")
        await asyncio.sleep(0.05)

    asyncio.run(scenario())
    assert results == []
    assert stt.calls == []
    assert clips.pending() == 1


def test_speech_io_degrades_without_configuration(isolated_env):
    speech = SpeechIO.from_env()
    assert isinstance(speech.recognizer, NullRecognizer)
    assert isinstance(speech.synthesizer, NullSynthesizer)
    assert speech.clips is None
    assert "SPEECH_PROVIDER_UNAVAILABLE" in read_logs(isolated_env)


def test_speech_io_binds_livekit_adapters(monkeypatch):
    set_livekit_env(monkeypatch)
    speech = SpeechIO.from_env()
    assert isinstance(speech.recognizer, LiveKitRecognizer)
    assert isinstance(speech.synthesizer, LiveKitSynthesizer)
    assert speech.recognizer.clips is speech.clips
    assert speech.recognizer.client.base_url == "https://speech.example"


def test_null_synthesizer_completes_immediately():
    synth = NullSynthesizer()
    events = []
    synth.on_start = lambda: events.append("start")
    synth.on_end = lambda: events.append("end")
    asyncio.run(synth.speak("hello"))
    assert events == ["start", "end"]


def test_health_reports_missing_env():
    health = check_speech_health()
    assert health["ok"] is False
    assert health["reason"] == "missing_env"
    assert "LIVEKIT_URL" in health["missing"]


def test_health_probes_configured_url(monkeypatch):
    set_livekit_env(monkeypatch)
    probed = []

    def fake_get(url, timeout=None):
        probed.append(url)
        return FakeResponse({}, status_code=200)

    monkeypatch.setattr("screening_agent.health.requests.get", fake_get)
    health = check_speech_health()

    assert health["ok"] is True
    assert health["reason"] == "ready"
    assert probed == ["https://speech.example"]


def test_health_reports_unreachable_provider(monkeypatch):
    def fake_get(url, timeout=None):
        raise requests.ConnectionError("refused")

    monkeypatch.setattr("screening_agent.health.requests.get", fake_get)
    cfg = LiveKitConfig(api_key="k", api_secret="s", url="https://speech.example", stt_api_key="k", tts_api_key="k")
    health = check_speech_health(cfg)

    assert health["ok"] is False
    assert health["reason"] == "unreachable"
