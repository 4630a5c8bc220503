from __future__ import annotations

from typing import Any, Dict, Optional

from voicevault.core.config import settings
from voicevault.core.errors import ValidationFailed
from voicevault.services.chain_reader import PAYMENT_FUNCTION
from voicevault.services.payments import compute_breakdown, to_subunits
from voicevault.services.tts import parse_model_uri

REGISTER_FUNCTION = "voice_identity::register_voice"


def build_payment_payload(
    creator_address: str,
    amount: Any,
    royalty_recipient: Optional[str] = None,
) -> Dict[str, Any]:
    """Build the unsigned pay_for_inference entry-function payload.

    The wallet signs and submits it; the contract splits the amount using the
    same basis points as services.payments. Returns the payload together with
    the breakdown it was derived from.
    """
    if not creator_address:
        raise ValidationFailed("creatorAddress parameter missing")
    breakdown = compute_breakdown(amount)
    payload = {
        "type": "entry_function_payload",
        "function": f"{settings.PAYMENT_CONTRACT_ADDRESS}::{PAYMENT_FUNCTION}",
        "type_arguments": [],
        # u64 arguments travel as decimal strings
        "arguments": [
            creator_address,
            str(breakdown["total_amount_subunits"]),
            royalty_recipient or creator_address,
        ],
    }
    return {"dry_run": True, "payload": payload, "breakdown": breakdown}


def build_register_payload(name: str, model_uri: str, rights: str, price_per_use: Any) -> Dict[str, Any]:
    """Build the unsigned register_voice payload. One voice per address is enforced on-chain."""
    name = (name or "").strip()
    model_uri = (model_uri or "").strip()
    rights = (rights or "").strip()
    if not name:
        raise ValidationFailed("Voice name is required")
    if not model_uri:
        raise ValidationFailed("Model URI is required (e.g., eleven:voiceId or openai:voiceName)")
    if not rights:
        raise ValidationFailed("Usage rights are required")
    parse_model_uri(model_uri)
    price_subunits = to_subunits(price_per_use)

    return {
        "dry_run": True,
        "payload": {
            "type": "entry_function_payload",
            "function": f"{settings.VOICE_IDENTITY_CONTRACT_ADDRESS}::{REGISTER_FUNCTION}",
            "type_arguments": [],
            "arguments": [name, model_uri, rights, str(price_subunits)],
        },
    }
