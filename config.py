"""
Application configuration via pydantic-settings.

All settings are loaded from environment variables (and .env file).
Sub-configs share the same env/dotenv source and are composed onto
AppSettings by a model_validator, so callers only ever build AppSettings().
"""

from __future__ import annotations

from typing import Optional

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    mongodb_uri: str
    db_name: str = "agent-service"


class JWTSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    jwt_issuer: str = "agent-service"
    jwt_audience: str = "agent-service.api"
    access_token_ttl_seconds: int = 3600

    # RS256 keys (preferred)
    jwt_private_key: str = ""
    jwt_public_key: str = ""

    # HS256 fallback (used when RS256 keys are absent)
    jwt_secret: str = ""

    @property
    def use_rs256(self) -> bool:
        return bool(self.jwt_private_key and self.jwt_public_key)


class OAuthProviderSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    google_oauth_client_id: str = ""
    google_oauth_client_secret: str = ""
    google_oauth_redirect_uri: str = ""

    @property
    def google_enabled(self) -> bool:
        return bool(self.google_oauth_client_id and self.google_oauth_client_secret)


class EmailSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    zepto_api_token: str = ""
    zepto_from_email: str = "noreply@agent-service.local"
    zepto_from_name: str = "Agent Based Service System"


class StorageSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    upload_dir: str = "uploads"
    max_photo_bytes: int = 5 * 1024 * 1024
    allowed_photo_types: list[str] = [
        "image/jpeg",
        "image/png",
        "image/gif",
        "image/webp",
    ]


class SuperAdminSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    super_admin_email: str = "admin@example.com"
    super_admin_name: str = "Super Admin"
    super_admin_phone: str = "1234567890"
    super_admin_address: str = "Admin Address"
    # Optional; without it the bootstrap account has no password hash
    super_admin_password: str = ""


class VerificationSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # 0 disables the background sweep; reads already ignore expired codes
    otp_sweep_interval_seconds: int = 600


class LoggingSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    log_level: str = "INFO"
    log_format: str = "console"  # "json" in production


class SentrySettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    sentry_dsn: str = ""
    sentry_send_pii: bool = False
    sentry_traces_sample_rate: float = 0.1
    sentry_profile_sample_rate: float = 0.05


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    # Core
    secret_key: str = "change-me"
    env: str = "development"
    app_url: str = "http://localhost:8000"
    app_name: str = "Agent Based Service System"

    cors_origins: list[str] = ["*"]

    # OpenAPI docs URL (None disables the docs UI in production)
    docs_url: Optional[str] = "/docs"

    # Return the plaintext OTP when email delivery fails (never in production)
    expose_dev_otp: bool = True

    # Users without a stored password hash may log in by email alone
    allow_passwordless_user_login: bool = False

    # Sub-configs (composed via model_validator below)
    db: Optional[DatabaseSettings] = None
    jwt: Optional[JWTSettings] = None
    oauth: Optional[OAuthProviderSettings] = None
    email: Optional[EmailSettings] = None
    storage: Optional[StorageSettings] = None
    super_admin: Optional[SuperAdminSettings] = None
    verification: Optional[VerificationSettings] = None
    logging: Optional[LoggingSettings] = None
    sentry: Optional[SentrySettings] = None

    @model_validator(mode="after")
    def _populate_sub_configs(self) -> "AppSettings":
        if self.db is None:
            self.db = DatabaseSettings()
        if self.jwt is None:
            self.jwt = JWTSettings()
        if self.oauth is None:
            self.oauth = OAuthProviderSettings()
        if self.email is None:
            self.email = EmailSettings()
        if self.storage is None:
            self.storage = StorageSettings()
        if self.super_admin is None:
            self.super_admin = SuperAdminSettings()
        if self.verification is None:
            self.verification = VerificationSettings()
        if self.logging is None:
            self.logging = LoggingSettings()
        if self.sentry is None:
            self.sentry = SentrySettings()

        return self

    @property
    def is_production(self) -> bool:
        return self.env == "production"

    @property
    def dev_otp_enabled(self) -> bool:
        return self.expose_dev_otp and not self.is_production
