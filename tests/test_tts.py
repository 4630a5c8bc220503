import base64

import pytest
import requests

from voicevault.core.errors import (
    ProviderError,
    ProviderNotConfigured,
    UnsupportedModelUri,
    ValidationFailed,
)
from voicevault.services import tts


class _Resp:
    def __init__(self, status_code=200, content=b"", payload=None, text=""):
        self.status_code = status_code
        self.content = content
        self._payload = payload or {}
        self.text = text

    def json(self):
        return self._payload


@pytest.fixture
def keys(monkeypatch):
    monkeypatch.setattr("voicevault.services.tts.settings.ELEVENLABS_API_KEY", "xi-test")
    monkeypatch.setattr("voicevault.services.tts.settings.OPENAI_API_KEY", "sk-test")


def test_parse_model_uri():
    assert tts.parse_model_uri("eleven:abc123") == ("eleven", "abc123")
    assert tts.parse_model_uri("openai:alloy") == ("openai", "alloy")
    for bad in ["", "alloy", "azure:voice", "eleven:", "openai:  "]:
        with pytest.raises(UnsupportedModelUri):
            tts.parse_model_uri(bad)


def test_synthesize_routes_to_elevenlabs(monkeypatch, keys):
    calls = []

    def _fake_post(url, timeout=None, headers=None, json=None, **kwargs):
        calls.append({"url": url, "headers": headers, "json": json})
        return _Resp(200, content=b"ID3-eleven")

    monkeypatch.setattr("voicevault.services.tts.requests.post", _fake_post)

    out = tts.synthesize("eleven:voice42", "hello")

    assert out.audio == b"ID3-eleven"
    assert out.media_type == "audio/mpeg"
    assert calls[0]["url"].endswith("/text-to-speech/voice42")
    assert calls[0]["headers"]["xi-api-key"] == "xi-test"
    assert calls[0]["json"]["model_id"] == "eleven_multilingual_v2"
    assert calls[0]["json"]["voice_settings"] == {"stability": 0.5, "similarity_boost": 0.85}


def test_synthesize_routes_to_openai(monkeypatch, keys):
    calls = []

    def _fake_post(url, timeout=None, headers=None, json=None, **kwargs):
        calls.append({"url": url, "headers": headers, "json": json})
        return _Resp(200, content=b"ID3-openai")

    monkeypatch.setattr("voicevault.services.tts.requests.post", _fake_post)

    out = tts.synthesize("openai:nova", "hi there")

    assert out.audio == b"ID3-openai"
    assert calls[0]["url"].endswith("/audio/speech")
    assert calls[0]["headers"]["Authorization"] == "Bearer sk-test"
    assert calls[0]["json"] == {"model": "tts-1", "voice": "nova", "input": "hi there"}


def test_provider_error_keeps_status(monkeypatch, keys):
    def _fake_post(url, timeout=None, **kwargs):
        return _Resp(401, text='{"detail": "invalid api key"}')

    monkeypatch.setattr("voicevault.services.tts.requests.post", _fake_post)

    with pytest.raises(ProviderError) as exc:
        tts.openai_speak("alloy", "hello")
    assert exc.value.status_code == 401
    assert exc.value.details["provider"] == "openai"
    assert "invalid api key" in exc.value.details["body"]


def test_network_failure_maps_to_bad_gateway(monkeypatch, keys):
    def _fake_post(url, timeout=None, **kwargs):
        raise requests.exceptions.ConnectionError("boom")

    monkeypatch.setattr("voicevault.services.tts.requests.post", _fake_post)

    with pytest.raises(ProviderError) as exc:
        tts.elevenlabs_speak("v1", "hello")
    assert exc.value.status_code == 502


def test_missing_keys(monkeypatch):
    monkeypatch.setattr("voicevault.services.tts.settings.ELEVENLABS_API_KEY", None)
    monkeypatch.setattr("voicevault.services.tts.settings.OPENAI_API_KEY", None)
    with pytest.raises(ProviderNotConfigured):
        tts.synthesize("eleven:v1", "hello")
    with pytest.raises(ProviderNotConfigured):
        tts.synthesize("openai:alloy", "hello")


def test_missing_text_fails_before_any_call(keys):
    with pytest.raises(ValidationFailed):
        tts.synthesize("eleven:v1", "")
    with pytest.raises(ValidationFailed):
        tts.synthesize("", "hello")


def test_clone_voice_uploads_samples(monkeypatch, keys):
    seen = {}

    def _fake_post(url, timeout=None, headers=None, data=None, files=None, **kwargs):
        seen.update(url=url, data=data, files=files)
        return _Resp(200, payload={"voice_id": "cloned-1"})

    monkeypatch.setattr("voicevault.services.tts.requests.post", _fake_post)

    samples = [{"base64": base64.b64encode(b"RIFF0").decode()}, {"base64": base64.b64encode(b"RIFF1").decode()}]
    voice_id = tts.clone_voice("My Voice", samples)

    assert voice_id == "cloned-1"
    assert seen["url"].endswith("/voices/add")
    assert seen["data"] == {"name": "My Voice"}
    assert [f[1][0] for f in seen["files"]] == ["sample0.wav", "sample1.wav"]
    assert seen["files"][1][1][1] == b"RIFF1"


def test_clone_voice_validates_input(keys):
    with pytest.raises(ValidationFailed):
        tts.clone_voice("x", [])
    with pytest.raises(ValidationFailed):
        tts.clone_voice("x", [{"base64": "not base64!!"}])
