from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

import requests

from voicevault.core.config import settings
from voicevault.core.errors import (
    ProviderError,
    ProviderNotConfigured,
    UnsupportedModelUri,
    ValidationFailed,
)

ELEVENLABS = "eleven"
OPENAI = "openai"
SUPPORTED_PREFIXES = (ELEVENLABS, OPENAI)

ELEVENLABS_MODEL_ID = "eleven_multilingual_v2"
ELEVENLABS_VOICE_SETTINGS = {"stability": 0.5, "similarity_boost": 0.85}
OPENAI_DEFAULT_MODEL = "tts-1"


@dataclass
class SpeechResult:
    audio: bytes
    media_type: str = "audio/mpeg"


def parse_model_uri(model_uri: str) -> Tuple[str, str]:
    """Split 'provider:identifier' into its parts.

    Only the 'eleven:' and 'openai:' namespaces are routable.
    """
    provider, sep, identifier = (model_uri or "").partition(":")
    if not sep or provider not in SUPPORTED_PREFIXES or not identifier.strip():
        raise UnsupportedModelUri(
            "Unsupported model URI format. Use 'eleven:' or 'openai:' prefix",
            {"modelUri": model_uri},
        )
    return provider, identifier.strip()


def _elevenlabs_key() -> str:
    if not settings.ELEVENLABS_API_KEY:
        raise ProviderNotConfigured("ElevenLabs API key not configured")
    return settings.ELEVENLABS_API_KEY


def _openai_key() -> str:
    if not settings.OPENAI_API_KEY:
        raise ProviderNotConfigured("OpenAI API key not configured")
    return settings.OPENAI_API_KEY


def _check_response(provider: str, response: requests.Response, message: str) -> None:
    if 200 <= response.status_code < 300:
        return
    body = response.text
    logging.warning("%s request failed status=%s body=%s", provider, response.status_code, body[:500])
    raise ProviderError(provider, response.status_code, message, {"body": body})


def _post(provider: str, url: str, message: str, **kwargs: Any) -> requests.Response:
    try:
        response = requests.post(url, timeout=settings.PROVIDER_TIMEOUT_SECONDS, **kwargs)
    except requests.exceptions.RequestException as e:
        logging.error("%s request error: %s", provider, e)
        raise ProviderError(provider, 502, message, {"type": type(e).__name__, "reason": str(e)})
    _check_response(provider, response, message)
    return response


def list_elevenlabs_voices() -> Dict[str, Any]:
    """Return the ElevenLabs voice library for the configured account."""
    key = _elevenlabs_key()
    url = f"{settings.ELEVENLABS_API_BASE_URL.rstrip('/')}/voices"
    try:
        response = requests.get(url, headers={"xi-api-key": key}, timeout=settings.PROVIDER_TIMEOUT_SECONDS)
    except requests.exceptions.RequestException as e:
        logging.error("elevenlabs voices error: %s", e)
        raise ProviderError(ELEVENLABS, 502, "Failed to fetch voices", {"reason": str(e)})
    _check_response(ELEVENLABS, response, "Failed to fetch voices")
    return response.json() or {}


def elevenlabs_speak(voice_id: str, text: str) -> SpeechResult:
    if not voice_id:
        raise ValidationFailed("voiceId missing")
    if not text:
        raise ValidationFailed("text missing")
    key = _elevenlabs_key()
    url = f"{settings.ELEVENLABS_API_BASE_URL.rstrip('/')}/text-to-speech/{voice_id}"
    response = _post(
        ELEVENLABS,
        url,
        "ElevenLabs TTS failed",
        headers={"xi-api-key": key, "Content-Type": "application/json"},
        json={
            "text": text,
            "model_id": ELEVENLABS_MODEL_ID,
            "voice_settings": ELEVENLABS_VOICE_SETTINGS,
        },
    )
    return SpeechResult(audio=response.content)


def openai_speak(voice: str, text: str, model: str | None = None) -> SpeechResult:
    if not voice:
        raise ValidationFailed("voice parameter missing")
    if not text:
        raise ValidationFailed("text parameter missing")
    key = _openai_key()
    url = f"{settings.OPENAI_API_BASE_URL.rstrip('/')}/audio/speech"
    response = _post(
        OPENAI,
        url,
        "OpenAI TTS failed",
        headers={"Authorization": f"Bearer {key}", "Content-Type": "application/json"},
        json={"model": model or OPENAI_DEFAULT_MODEL, "voice": voice, "input": text},
    )
    return SpeechResult(audio=response.content)


def synthesize(model_uri: str, text: str) -> SpeechResult:
    """Generate speech for a registered voice, routed by its model URI."""
    if not model_uri:
        raise ValidationFailed("modelUri parameter missing")
    if not text:
        raise ValidationFailed("text parameter missing")
    provider, identifier = parse_model_uri(model_uri)
    if provider == ELEVENLABS:
        return elevenlabs_speak(identifier, text)
    return openai_speak(identifier, text)


def clone_voice(name: str, files: List[Dict[str, Any]]) -> str:
    """
    Create an ElevenLabs voice from base64-encoded audio samples.

    files: [{"base64": "..."}]; each sample is uploaded as sample{i}.wav.
    Returns the provider's new voice_id.
    """
    if not files:
        raise ValidationFailed("No audio provided")
    key = _elevenlabs_key()

    uploads = []
    for i, f in enumerate(files):
        raw = (f or {}).get("base64")
        if not raw:
            raise ValidationFailed("Audio sample missing base64 data", {"index": i})
        try:
            data = base64.b64decode(raw, validate=True)
        except ValueError:
            raise ValidationFailed("Audio sample is not valid base64", {"index": i})
        uploads.append(("files", (f"sample{i}.wav", data, "audio/wav")))

    url = f"{settings.ELEVENLABS_API_BASE_URL.rstrip('/')}/voices/add"
    response = _post(
        ELEVENLABS,
        url,
        "Clone failed",
        headers={"xi-api-key": key},
        data={"name": name or ""},
        files=uploads,
    )
    voice_id = (response.json() or {}).get("voice_id")
    if not voice_id:
        raise ProviderError(ELEVENLABS, 502, "Clone failed", {"reason": "response missing voice_id"})
    logging.info("elevenlabs voice cloned name=%s voice_id=%s", name, voice_id)
    return voice_id
