"""
Application configuration via environment variables.

Uses pydantic-settings to load and validate configuration from .env files.
API keys should be set via environment variables, never committed.
"""

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Settings are grouped by feature area. Providers and chain access degrade
    gracefully when their environment variables are not configured.
    """

    # =========================================================================
    # General
    # =========================================================================
    ENV: str = Field(default="development")
    LOG_LEVEL: str = Field(default="INFO")

    # Comma-separated list; empty means the built-in development origins
    CORS_ALLOW_ORIGINS: str | None = None

    # =========================================================================
    # TTS Providers
    # =========================================================================
    ELEVENLABS_API_KEY: str | None = None
    OPENAI_API_KEY: str | None = None
    ELEVENLABS_API_BASE_URL: str = "https://api.elevenlabs.io/v1"
    OPENAI_API_BASE_URL: str = "https://api.openai.com/v1"
    PROVIDER_TIMEOUT_SECONDS: float = 60.0

    # =========================================================================
    # Local Storage
    # =========================================================================
    # Holds voice-registry.json and purchased-voices.json
    VOICEVAULT_DATA_DIR: str = "./data"

    # =========================================================================
    # Blockchain (Aptos)
    # =========================================================================
    APTOS_NODE_URL: str | None = None
    APTOS_TIMEOUT_SECONDS: float = 15.0
    PAYMENT_CONTRACT_ADDRESS: str = (
        "0xb0fcc55b9a116fec51295eb73b03ac31083a841290405c955fc088c2eeb0bf27"
    )
    VOICE_IDENTITY_CONTRACT_ADDRESS: str = (
        "0x594d426ee5f8d800c7ede249d83a4cbfc4ee0c7dbcefece5ae6e727b7b0cf9db"
    )

    # Confirm purchase transactions on-chain before recording them
    VERIFY_PURCHASE_TX: bool = False

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("PROVIDER_TIMEOUT_SECONDS", "APTOS_TIMEOUT_SECONDS", mode="before")
    @classmethod
    def _blank_timeout_default(cls, v, info):
        """Use the default timeout for blank or non-positive values."""
        default = 60.0 if info.field_name == "PROVIDER_TIMEOUT_SECONDS" else 15.0
        if v is None or (isinstance(v, str) and not v.strip()):
            return default
        try:
            fv = float(v)
        except Exception:
            return default
        return fv if fv > 0 else default

    @field_validator("VOICEVAULT_DATA_DIR", mode="before")
    @classmethod
    def _blank_data_dir_default(cls, v):
        """Use default data directory for blank values."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return "./data"
        return v

    @field_validator("VERIFY_PURCHASE_TX", mode="before")
    @classmethod
    def _blank_to_false(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return False
        if isinstance(v, str):
            return v.strip().lower() in {"1", "true", "yes"}
        return v

    @field_validator(
        "ELEVENLABS_API_KEY",
        "OPENAI_API_KEY",
        "APTOS_NODE_URL",
        "CORS_ALLOW_ORIGINS",
        mode="before",
    )
    @classmethod
    def _blank_to_none_str(cls, v):
        """Convert blank strings to None for optional string fields."""
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        return v

    # =========================================================================
    # Model Configuration
    # =========================================================================
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")


settings = Settings()
