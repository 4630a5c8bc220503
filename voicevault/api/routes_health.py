"""
Health check endpoint for service monitoring.

Reports storage availability and which external integrations are configured.
"""

from fastapi import APIRouter

from voicevault.core.config import settings
from voicevault.models.store import PurchaseLedger, VoiceRegistry

router = APIRouter(tags=["health"])


@router.get("/health")
def health():
    """
    Check service health.

    Returns:
        ok: Always true if the service is running
        storage: True if both data files can be read
        providers: Which TTS providers have API keys configured
        chain: True if an Aptos node URL is configured
    """
    storage_ok = (
        VoiceRegistry.from_settings().store.is_readable()
        and PurchaseLedger.from_settings().store.is_readable()
    )
    return {
        "ok": True,
        "storage": storage_ok,
        "providers": {
            "elevenlabs": bool(settings.ELEVENLABS_API_KEY),
            "openai": bool(settings.OPENAI_API_KEY),
        },
        "chain": bool(settings.APTOS_NODE_URL),
    }
