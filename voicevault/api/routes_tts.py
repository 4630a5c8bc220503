"""
Text-to-speech proxy endpoints for ElevenLabs and OpenAI.

Provider API keys stay on the server; clients send text and a voice
identifier and receive audio/mpeg bytes.
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter
from fastapi.responses import Response
from pydantic import BaseModel

from voicevault.services import tts

router = APIRouter(prefix="/api", tags=["tts"])


class ElevenSpeakRequest(BaseModel):
    voiceId: Optional[str] = None
    text: Optional[str] = None


class CloneRequest(BaseModel):
    name: Optional[str] = None
    files: Optional[List[Dict[str, Any]]] = None


class OpenAISpeakRequest(BaseModel):
    voice: Optional[str] = None
    text: Optional[str] = None
    model: Optional[str] = None


class GenerateRequest(BaseModel):
    modelUri: Optional[str] = None
    text: Optional[str] = None


def _audio(result: tts.SpeechResult) -> Response:
    return Response(content=result.audio, media_type=result.media_type)


@router.get("/elevenlabs/voices")
def elevenlabs_voices():
    return tts.list_elevenlabs_voices()


@router.post("/elevenlabs/speak")
def elevenlabs_speak(payload: ElevenSpeakRequest):
    return _audio(tts.elevenlabs_speak(payload.voiceId or "", payload.text or ""))


@router.post("/elevenlabs/clone")
def elevenlabs_clone(payload: CloneRequest):
    """Clone a voice from base64 audio samples: {"name": ..., "files": [{"base64": ...}]}."""
    voice_id = tts.clone_voice(payload.name or "", payload.files or [])
    return {"voice_id": voice_id, "modelUri": f"{tts.ELEVENLABS}:{voice_id}"}


@router.post("/openai/speak")
def openai_speak(payload: OpenAISpeakRequest):
    return _audio(tts.openai_speak(payload.voice or "", payload.text or "", model=payload.model))


@router.post("/tts/generate")
def generate(payload: GenerateRequest):
    """Generate speech for any supported model URI (eleven:<id> or openai:<voice>)."""
    return _audio(tts.synthesize(payload.modelUri or "", payload.text or ""))
