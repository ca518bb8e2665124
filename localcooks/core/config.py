# localcooks/core/config.py
import logging
import os
from pathlib import Path
from typing import Optional, Set

from dotenv import load_dotenv
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def is_running_tests() -> bool:
    """
    Detect if code is running under pytest.

    PYTEST_CURRENT_TEST is set automatically by pytest during test runs, and is
    not expected to be present in production environments.
    """
    return os.getenv("PYTEST_CURRENT_TEST") is not None


logger = logging.getLogger(__name__)

# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = Path(__file__).resolve().parents[2] / ".env"
    logger.info(f"[CONFIG] Looking for .env at: {env_path} (exists={env_path.exists()})")
    load_dotenv(env_path)


PROD_SITE_MODES: Set[str] = {"prod", "production", "live"}


class Settings(BaseSettings):
    site_mode: str = Field(default="local", description="Deployment mode (local/stg/prod)")

    database_url: str = Field(
        default="sqlite:///./localcooks.db",
        description="SQLAlchemy database URL",
    )
    database_echo: bool = Field(default=False, description="Echo SQL statements")

    frontend_url: str = Field(
        default="http://localhost:5173",
        description="Base URL of the web app, used for Stripe return/refresh links",
    )
    cors_origins_csv: str = Field(
        default="http://localhost:5173",
        alias="cors_origins",
        description="Comma-separated list of allowed CORS origins",
    )

    # Firebase Authentication
    firebase_project_id: str = Field(default="", description="Firebase project id")
    firebase_credentials_json: SecretStr = Field(
        default=SecretStr(""),
        description="Service account JSON (inline) for firebase-admin",
    )
    firebase_clock_skew_seconds: int = Field(
        default=5, description="Tolerated clock skew when verifying ID tokens"
    )

    # Stripe Configuration
    stripe_publishable_key: str = Field(
        default="", description="Stripe publishable key for frontend"
    )
    stripe_secret_key: SecretStr = Field(
        default=SecretStr(""),
        description="Stripe secret key for backend API calls",
    )
    stripe_webhook_secret: SecretStr = Field(
        default=SecretStr(""),
        description="Stripe webhook secret for local dev (Stripe CLI)",
    )
    stripe_webhook_secret_connect: SecretStr = Field(
        default=SecretStr(""),
        description="Connect events webhook secret (deployed)",
    )

    # Email
    resend_api_key: SecretStr = Field(default=SecretStr(""), description="Resend API key")
    email_enabled: bool = Field(default=True, description="Flag to enable/disable email sending")
    email_from: str = Field(
        default="Local Cooks <noreply@localcook.shop>", description="Default sender"
    )
    admin_email: str = Field(default="admin@localcook.shop", description="Admin inbox")

    # Microlearning
    certificate_url_prefix: str = Field(
        default="/api/v1/microlearning/certificates",
        description="Path prefix for generated certificate links",
    )

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    @field_validator("frontend_url")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    @property
    def is_production(self) -> bool:
        return self.site_mode.strip().lower() in PROD_SITE_MODES

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins_csv.split(",") if origin.strip()]

    @property
    def stripe_configured(self) -> bool:
        return bool(self.stripe_secret_key.get_secret_value())

    @property
    def webhook_secrets(self) -> list[str]:
        """Build list of webhook secrets to try in order."""
        secrets = []
        for secret in (self.stripe_webhook_secret, self.stripe_webhook_secret_connect):
            value = secret.get_secret_value()
            if value:
                secrets.append(value)
        return secrets

    def get_database_url(self) -> str:
        return self.database_url

    def firebase_credentials(self) -> Optional[str]:
        raw = self.firebase_credentials_json.get_secret_value().strip()
        return raw or None


settings = Settings()
logger.info(
    "[CONFIG] site_mode=%s stripe_configured=%s email_enabled=%s",
    settings.site_mode,
    settings.stripe_configured,
    settings.email_enabled,
)
