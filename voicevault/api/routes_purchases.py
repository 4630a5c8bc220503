from typing import Optional, Union

from fastapi import APIRouter, Query
from pydantic import BaseModel

from voicevault.core.config import settings
from voicevault.core.errors import (
    ChainNotConfigured,
    PurchaseAlreadyRecorded,
    TransactionNotConfirmed,
    ValidationFailed,
)
from voicevault.models.store import PurchaseLedger
from voicevault.services.chain_reader import ChainReader

router = APIRouter(prefix="/api/purchased", tags=["purchases"])


class PurchaseCreate(BaseModel):
    voiceId: Optional[Union[str, int]] = None
    name: Optional[str] = None
    modelUri: Optional[str] = None
    owner: Optional[str] = None
    price: Optional[float] = None
    txHash: Optional[str] = None
    walletAddress: Optional[str] = None


def _confirm_on_chain(tx_hash: str, buyer: str) -> None:
    reader = ChainReader.from_settings()
    if reader is None:
        raise ChainNotConfigured("APTOS_NODE_URL not configured for purchase verification")
    result = reader.verify_payment(tx_hash, sender=buyer)
    if not result.get("confirmed"):
        raise TransactionNotConfirmed("Payment transaction not confirmed on-chain", result)


@router.get("/voices")
def purchased_voices(walletAddress: Optional[str] = None):
    return {"voices": PurchaseLedger.from_settings().list_purchases(walletAddress)}


@router.post("/voices")
def record_purchase(payload: PurchaseCreate):
    voice_id = "" if payload.voiceId is None else str(payload.voiceId)
    if not (voice_id and payload.owner and payload.txHash and payload.walletAddress):
        raise ValidationFailed("Missing required fields: voiceId, owner, txHash, walletAddress")

    ledger = PurchaseLedger.from_settings()
    # Skip the chain round-trip for a known duplicate; record() re-checks under the lock
    if ledger.is_purchased(voice_id, payload.owner, payload.walletAddress):
        raise PurchaseAlreadyRecorded("Voice already purchased by this wallet")
    if settings.VERIFY_PURCHASE_TX:
        _confirm_on_chain(payload.txHash, payload.walletAddress)

    purchase = ledger.record(
        voice_id,
        payload.owner,
        payload.txHash,
        payload.walletAddress,
        name=payload.name,
        model_uri=payload.modelUri,
        price=payload.price or 0,
    )
    return {"success": True, "purchase": purchase}


@router.get("/check")
def check_purchase(
    voiceId: Optional[str] = Query(default=None),
    owner: Optional[str] = Query(default=None),
    walletAddress: Optional[str] = Query(default=None),
):
    if not (voiceId and owner and walletAddress):
        raise ValidationFailed("Missing required query parameters: voiceId, owner, walletAddress")
    return {"isPurchased": PurchaseLedger.from_settings().is_purchased(voiceId, owner, walletAddress)}
