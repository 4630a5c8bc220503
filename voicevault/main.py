"""
VoiceVault Backend API

FastAPI application backing the VoiceVault voice marketplace. Proxies
text-to-speech requests to ElevenLabs and OpenAI, keeps the local voice
registry and purchase ledger, computes payment breakdowns and prepares
payment transactions for the Aptos payment contract.
"""

import logging
import traceback

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from voicevault.api.routes_chain import router as chain_router
from voicevault.api.routes_health import router as health_router
from voicevault.api.routes_payments import router as payments_router
from voicevault.api.routes_purchases import router as purchases_router
from voicevault.api.routes_registry import router as registry_router
from voicevault.api.routes_tts import router as tts_router
from voicevault.core.config import settings
from voicevault.core.errors import InvalidAmount, ValidationFailed, VoiceVaultError

# =============================================================================
# CORS Configuration
# =============================================================================

DEFAULT_ALLOWED_ORIGINS = [
    # Local development (Vite / CRA)
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
    "http://localhost:8080",
    "http://127.0.0.1:8080",
]


def allowed_origins() -> list[str]:
    if settings.CORS_ALLOW_ORIGINS:
        return [o.strip() for o in settings.CORS_ALLOW_ORIGINS.split(",") if o.strip()]
    return list(DEFAULT_ALLOWED_ORIGINS)


# =============================================================================
# Application Factory
# =============================================================================

def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO))

    app = FastAPI(
        title="VoiceVault API",
        description="Backend API for the VoiceVault AI voice marketplace on Aptos",
        version="1.0.0",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Register routers
    app.include_router(health_router)
    app.include_router(payments_router)
    app.include_router(tts_router)
    app.include_router(registry_router)
    app.include_router(purchases_router)
    app.include_router(chain_router)

    if not settings.ELEVENLABS_API_KEY:
        logging.warning("ELEVENLABS_API_KEY missing; ElevenLabs endpoints will return PROVIDER_NOT_CONFIGURED")
    if not settings.OPENAI_API_KEY:
        logging.warning("OPENAI_API_KEY missing; OpenAI endpoints will return PROVIDER_NOT_CONFIGURED")
    logging.info(
        "VoiceVault API configured data_dir=%s aptos_node=%s verify_purchase_tx=%s",
        settings.VOICEVAULT_DATA_DIR,
        settings.APTOS_NODE_URL or "-",
        settings.VERIFY_PURCHASE_TX,
    )

    # =========================================================================
    # Exception Handlers
    # =========================================================================

    @app.exception_handler(VoiceVaultError)
    async def voicevault_exception_handler(request, exc: VoiceVaultError):
        """Render domain errors as {"error": {"code", "message", "details"}}."""
        if exc.status_code >= 500:
            logging.error("%s on %s: %s", exc.code, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request, exc: RequestValidationError):
        """Malformed bodies get the same error shape as domain errors."""
        details = {
            "errors": [
                {"loc": list(e.get("loc", ())), "msg": str(e.get("msg")), "type": e.get("type")}
                for e in exc.errors()
            ]
        }
        if request.url.path.startswith("/api/payment/"):
            err = InvalidAmount("Invalid amount. Must be a positive number", details)
        else:
            err = ValidationFailed("Invalid request body", details)
        return JSONResponse(status_code=err.status_code, content=err.to_dict())

    @app.exception_handler(Exception)
    async def generic_exception_handler(request, exc: Exception):
        """Catch-all handler to prevent exposing internal errors to clients."""
        logging.error("Unhandled exception: %s", exc)
        logging.error("Traceback:\n%s", "".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        ))
        return JSONResponse(
            status_code=500,
            content={
                "error": {
                    "code": "INTERNAL",
                    "message": "Unexpected error",
                    "details": {"type": exc.__class__.__name__},
                }
            },
        )

    return app


# =============================================================================
# Application Instance
# =============================================================================

app = create_app()
