from typing import Optional

from fastapi import APIRouter

from voicevault.core.errors import ChainNotConfigured
from voicevault.services.chain_reader import ChainReader

router = APIRouter(prefix="/api/chain", tags=["chain"])


def _reader() -> ChainReader:
    reader = ChainReader.from_settings()
    if reader is None:
        raise ChainNotConfigured("APTOS_NODE_URL not configured")
    return reader


@router.get("/transactions/{tx_hash}")
def payment_status(tx_hash: str, sender: Optional[str] = None):
    """Whether tx_hash is a committed, successful pay_for_inference call."""
    return _reader().verify_payment(tx_hash, sender=sender)


@router.get("/sanity")
def chain_sanity():
    return _reader().sanity()
