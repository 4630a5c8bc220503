"""
Payment breakdown for pay-per-use voice purchases.

Splits a gross amount into platform fee, royalty and creator payout using
integer math in Octas (1 APT = 100_000_000 Octas). The royalty is taken from
what remains after the platform fee, and the creator receives the remainder,
so the three parts always sum to the total.

PLATFORM_FEE_BPS and ROYALTY_BPS mirror the constants enforced by the on-chain
payment_contract and must be changed together with it.
"""

from __future__ import annotations

import math
from decimal import ROUND_FLOOR, Decimal
from typing import Any, Dict, TypedDict

from voicevault.core.errors import InvalidAmount

SUBUNITS_PER_UNIT = 100_000_000
BPS_DENOMINATOR = 10_000

# Coin amounts are u64 Octas on-chain
U64_MAX = 2**64 - 1
MAX_AMOUNT = Decimal(U64_MAX) / SUBUNITS_PER_UNIT

PLATFORM_FEE_BPS = 250  # 2.5%
ROYALTY_BPS = 1000  # 10%


class PaymentBreakdown(TypedDict):
    total_amount: float
    total_amount_subunits: int
    platform_fee_subunits: int
    royalty_subunits: int
    creator_subunits: int


def _invalid(amount: Any, message: str = "Invalid amount. Must be a positive number") -> InvalidAmount:
    return InvalidAmount(message, {"amount": repr(amount)[:100]})


def _validate_amount(amount: Any) -> None:
    # bool is an int subclass; reject it explicitly
    if isinstance(amount, bool) or not isinstance(amount, (int, float, Decimal)):
        raise _invalid(amount)
    if isinstance(amount, float) and not math.isfinite(amount):
        raise _invalid(amount, "Invalid amount. Must be a finite number")
    if isinstance(amount, Decimal) and not amount.is_finite():
        raise _invalid(amount, "Invalid amount. Must be a finite number")
    if amount <= 0:
        raise _invalid(amount)
    if amount > MAX_AMOUNT:
        raise _invalid(amount, f"Invalid amount. Must not exceed {MAX_AMOUNT} APT")


def to_subunits(amount: Any) -> int:
    """Convert a positive APT amount to Octas, truncating toward zero.

    Floats use floor(amount * 100_000_000) exactly as the web client does, so
    both sides agree to the Octa (0.29 -> 28_999_999). int and Decimal input
    is converted exactly.
    """
    _validate_amount(amount)
    if isinstance(amount, float):
        subunits = math.floor(amount * SUBUNITS_PER_UNIT)
    elif isinstance(amount, Decimal):
        subunits = int((amount * SUBUNITS_PER_UNIT).to_integral_value(rounding=ROUND_FLOOR))
    else:
        subunits = amount * SUBUNITS_PER_UNIT
    # the float product can round past the bound checked above
    if subunits > U64_MAX:
        raise _invalid(amount, f"Invalid amount. Must not exceed {MAX_AMOUNT} APT")
    return subunits


def from_subunits(subunits: int) -> float:
    """Display value of an Octa amount. Never feed this back into accounting."""
    return subunits / SUBUNITS_PER_UNIT


def split_subunits(total_subunits: int) -> Dict[str, int]:
    if total_subunits < 0:
        raise InvalidAmount("total_subunits must be >= 0", {"total_subunits": total_subunits})
    platform_fee = (total_subunits * PLATFORM_FEE_BPS) // BPS_DENOMINATOR
    remaining = total_subunits - platform_fee
    royalty = (remaining * ROYALTY_BPS) // BPS_DENOMINATOR
    creator = remaining - royalty
    return {
        "platform_fee_subunits": platform_fee,
        "royalty_subunits": royalty,
        "creator_subunits": creator,
    }


def compute_breakdown(amount: Any) -> PaymentBreakdown:
    """
    Compute the payment split for a gross amount in APT.

    Raises InvalidAmount for anything that is not a finite number > 0.
    """
    subunits = to_subunits(amount)
    parts = split_subunits(subunits)
    total = float(amount) if isinstance(amount, Decimal) else amount
    return PaymentBreakdown(
        total_amount=total,
        total_amount_subunits=subunits,
        **parts,
    )


def breakdown_response(breakdown: PaymentBreakdown) -> Dict[str, Any]:
    """Render a breakdown in the shape shared by the server and web client."""
    return {
        "totalAmount": breakdown["total_amount"],
        "totalAmountSubunits": breakdown["total_amount_subunits"],
        "breakdown": {
            "platformFee": {
                "amount": from_subunits(breakdown["platform_fee_subunits"]),
                "amountSubunits": breakdown["platform_fee_subunits"],
                "percentage": PLATFORM_FEE_BPS / 100,
                "basisPoints": PLATFORM_FEE_BPS,
            },
            "royalty": {
                "amount": from_subunits(breakdown["royalty_subunits"]),
                "amountSubunits": breakdown["royalty_subunits"],
                "percentage": ROYALTY_BPS / 100,
                "basisPoints": ROYALTY_BPS,
            },
            "creator": {
                "amount": from_subunits(breakdown["creator_subunits"]),
                "amountSubunits": breakdown["creator_subunits"],
            },
        },
    }
