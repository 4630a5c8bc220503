"""
Payment endpoints.

The breakdown endpoint is the single source of the fee split for web clients;
the payload endpoint hands the wallet an unsigned transaction whose amount was
computed by the same module.
"""

from typing import Any, Optional

from fastapi import APIRouter
from pydantic import BaseModel

from voicevault.services import chain_writer
from voicevault.services.payments import breakdown_response, compute_breakdown

router = APIRouter(prefix="/api/payment", tags=["payment"])


class BreakdownRequest(BaseModel):
    # Validated by compute_breakdown so non-numeric input maps to InvalidAmount
    amount: Any = None


class PaymentPayloadRequest(BaseModel):
    creatorAddress: Optional[str] = None
    amount: Any = None
    royaltyRecipient: Optional[str] = None


@router.post("/breakdown")
def payment_breakdown(payload: BreakdownRequest):
    """Split an APT amount into platform fee, royalty and creator payout."""
    return breakdown_response(compute_breakdown(payload.amount))


@router.post("/payload")
def payment_payload(payload: PaymentPayloadRequest):
    """Unsigned pay_for_inference payload plus the breakdown it encodes."""
    out = chain_writer.build_payment_payload(
        payload.creatorAddress or "",
        payload.amount,
        royalty_recipient=payload.royaltyRecipient,
    )
    return {
        "dry_run": out["dry_run"],
        "payload": out["payload"],
        **breakdown_response(out["breakdown"]),
    }
