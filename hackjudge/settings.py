from __future__ import annotations

import logging
import sys

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

DEFAULT_SESSION_SECRET = "dev-session-secret"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Core
    ENV: str = Field(default="dev")  # dev|prod
    LOG_LEVEL: str = Field(default="INFO")  # INFO|DEBUG
    BASE_URL: str = Field(default="http://localhost:3000")  # used for submission links

    # Redis / Queue
    REDIS_URL: str = Field(default="redis://redis:6379/0")
    RQ_QUEUE_NAME: str = Field(default="summaries")

    # Meeting store
    MEETING_CAS_ATTEMPTS: int = Field(default=5)

    # Uploads (mock storage, blobs live in Redis until the summary job picks them up)
    MAX_UPLOAD_BYTES: int = Field(default=20 * 1024 * 1024)
    UPLOAD_TTL_SECONDS: int = Field(default=24 * 60 * 60)

    # LLM (Gemini)
    GEMINI_API_KEY: str = Field(default="")
    GEMINI_MODEL: str = Field(default="gemini-1.5-flash")
    GEMINI_SUMMARY_MODEL: str = Field(default="gemini-1.5-pro")
    LLM_TIMEOUT_SECONDS: float = Field(default=60.0)

    # OCR (Mistral)
    MISTRAL_API_KEY: str = Field(default="")
    MISTRAL_API_BASE: str = Field(default="https://api.mistral.ai/v1")
    MISTRAL_OCR_MODEL: str = Field(default="mistral-ocr-latest")

    # Evaluator
    EVALUATION_MAX_WORKERS: int = Field(default=8)

    # Sessions
    SESSION_SECRET: str = Field(default=DEFAULT_SESSION_SECRET)

    def validate_configuration(self) -> list[str]:
        """
        Validates settings and returns list of warnings/errors.
        Missing API keys are fatal only in prod; dev runs with whatever is configured.
        """
        errors = []
        warnings = []

        if not self.REDIS_URL:
            errors.append("REDIS_URL is required")

        prod = self.ENV.lower() == "prod"
        external = []
        if not self.GEMINI_API_KEY:
            external.append("GEMINI_API_KEY is not set - summaries, analysis and evaluation will fail")
        if not self.MISTRAL_API_KEY:
            external.append("MISTRAL_API_KEY is not set - document OCR will fail")
        if self.SESSION_SECRET == DEFAULT_SESSION_SECRET:
            external.append("SESSION_SECRET is the development default - session tokens are forgeable")
        (errors if prod else warnings).extend(external)

        if self.MEETING_CAS_ATTEMPTS < 1:
            errors.append(f"MEETING_CAS_ATTEMPTS must be >= 1 (got: {self.MEETING_CAS_ATTEMPTS})")
        if self.EVALUATION_MAX_WORKERS < 1:
            errors.append(f"EVALUATION_MAX_WORKERS must be >= 1 (got: {self.EVALUATION_MAX_WORKERS})")

        all_messages = []
        if errors:
            all_messages.extend([f"ERROR: {e}" for e in errors])
        if warnings:
            all_messages.extend([f"WARNING: {w}" for w in warnings])

        return all_messages

    def validate_and_fail_fast(self) -> None:
        """
        Validates configuration and exits if critical errors found.
        Logs warnings but continues.
        """
        messages = self.validate_configuration()

        errors = [msg for msg in messages if msg.startswith("ERROR:")]
        warnings = [msg for msg in messages if msg.startswith("WARNING:")]

        if warnings:
            logger.warning("Configuration warnings detected:")
            for warning in warnings:
                logger.warning("  %s", warning)

        if errors:
            logger.error("Critical configuration errors detected:")
            for error in errors:
                logger.error("  %s", error)
            logger.error("Application cannot start. Please fix configuration errors above.")
            sys.exit(1)

        logger.info("Configuration validation passed")


_settings: Settings | None = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
