"""
Voice registry endpoints for marketplace discovery.

Registration here mirrors a successful on-chain register_voice call; the
contract remains the authority on one-voice-per-address.
"""

from typing import Any, Optional

from fastapi import APIRouter, Query
from pydantic import BaseModel

from voicevault.core.errors import ValidationFailed
from voicevault.models.store import VoiceRegistry
from voicevault.services import chain_writer

router = APIRouter(prefix="/api", tags=["registry"])


class RegisterVoice(BaseModel):
    address: Optional[str] = None
    name: Optional[str] = None
    walletAddress: Optional[str] = None


class RegisterPayloadRequest(BaseModel):
    name: Optional[str] = None
    modelUri: Optional[str] = None
    rights: Optional[str] = "commercial"
    pricePerUse: Any = None


@router.get("/registry/voices")
def list_registered_voices():
    return {"voices": VoiceRegistry.from_settings().list_voices()}


@router.post("/registry/voices")
def register_voice(payload: RegisterVoice):
    entry = VoiceRegistry.from_settings().register(
        payload.address or "",
        payload.name or "",
        wallet_address=payload.walletAddress,
    )
    return {"success": True, "voice": entry}


@router.get("/registry/addresses")
def registered_addresses():
    return {"addresses": VoiceRegistry.from_settings().addresses()}


@router.post("/registry/payload")
def register_payload(payload: RegisterPayloadRequest):
    """Unsigned register_voice payload for the creator's wallet to sign."""
    return chain_writer.build_register_payload(
        payload.name or "",
        payload.modelUri or "",
        payload.rights or "",
        payload.pricePerUse,
    )


@router.get("/voices/metadata")
def voices_metadata(addresses: Optional[str] = Query(default=None, description="Comma-separated creator addresses")):
    if not addresses:
        raise ValidationFailed("addresses query parameter required (comma-separated)")
    address_list = [a.strip() for a in addresses.split(",") if a.strip()]
    return {"voices": VoiceRegistry.from_settings().metadata_for(address_list)}
