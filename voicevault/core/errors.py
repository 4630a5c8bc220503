"""
Domain exceptions and their HTTP mapping.

Every exception carries a machine-readable code, an HTTP status and optional
details. The API layer renders them as {"error": {"code", "message", "details"}}.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class VoiceVaultError(Exception):
    code = "INTERNAL"
    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "details": self.details,
            }
        }


class InvalidAmount(VoiceVaultError):
    """Amount is missing, non-numeric, not finite, zero or negative."""

    code = "InvalidAmount"
    status_code = 400


class ValidationFailed(VoiceVaultError):
    code = "VALIDATION_FAILED"
    status_code = 400


class UnsupportedModelUri(VoiceVaultError):
    code = "UNSUPPORTED_MODEL_URI"
    status_code = 400


class ProviderNotConfigured(VoiceVaultError):
    code = "PROVIDER_NOT_CONFIGURED"
    status_code = 500


class ProviderError(VoiceVaultError):
    """A TTS provider returned a non-2xx response or could not be reached."""

    code = "PROVIDER_ERROR"

    def __init__(self, provider: str, status_code: int, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, {"provider": provider, **(details or {})})
        self.provider = provider
        self.status_code = status_code


class VoiceAlreadyRegistered(VoiceVaultError):
    code = "VOICE_ALREADY_REGISTERED"
    status_code = 409


class PurchaseAlreadyRecorded(VoiceVaultError):
    code = "PURCHASE_ALREADY_RECORDED"
    status_code = 409


class StoreError(VoiceVaultError):
    code = "STORE_ERROR"
    status_code = 500


class ChainNotConfigured(VoiceVaultError):
    code = "CHAIN_NOT_CONFIGURED"
    status_code = 503


class ChainError(VoiceVaultError):
    code = "CHAIN_ERROR"
    status_code = 502


class TransactionNotConfirmed(VoiceVaultError):
    code = "TRANSACTION_NOT_CONFIRMED"
    status_code = 402
