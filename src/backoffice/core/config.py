from functools import lru_cache

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App
    app_name: str = "Retail Back Office"
    app_env: str = "development"  # development, testing, production
    debug: bool = False
    enable_openapi: bool = True

    # Privacy
    log_user_phones: bool = False  # Full phone numbers in logs only when explicitly enabled

    # Database
    database_url: str
    database_pool_size: int = 5
    database_max_overflow: int = 10

    # Tokens
    jwt_algorithm: str = "HS256"
    access_token_secret: str
    refresh_token_secret: str
    access_token_expire_minutes: int = 60
    refresh_token_expire_days: int = 7
    refresh_cookie_name: str = "refresh_token"
    refresh_cookie_secure: bool = True

    # One-time codes
    otp_expire_seconds: int = 300
    otp_max_attempts: int = 5

    # Code delivery (WhatsApp gateway)
    whatsapp_service_url: str | None = None  # If not set, messages are logged but not sent
    whatsapp_service_token: str | None = None
    message_send_timeout_seconds: int = 10

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Metrics
    metrics_api_key: str | None = None  # If set, /metrics requires this key

    # Redis (optional - app works without it)
    redis_url: str | None = None
    redis_pool_size: int = 10

    @field_validator("access_token_secret", "refresh_token_secret")
    @classmethod
    def validate_token_secret(cls, v: str) -> str:
        if len(v) < 32:
            raise ValueError(
                "Token secrets must be at least 32 characters. "
                "Generate one with: openssl rand -hex 32"
            )
        return v

    @field_validator("cors_origins")
    @classmethod
    def validate_cors_origins(cls, v: list[str]) -> list[str]:
        """Reject wildcards: the refresh cookie requires allow_credentials=True."""
        if "*" in v:
            raise ValueError("CORS wildcard '*' is not allowed, list explicit origins instead.")
        return v

    @model_validator(mode="after")
    def validate_distinct_secrets(self) -> "Settings":
        """Access and refresh tokens must never verify under each other's key."""
        if self.access_token_secret == self.refresh_token_secret:
            raise ValueError("ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET must differ")
        return self

    @property
    def refresh_token_ttl_seconds(self) -> int:
        return self.refresh_token_expire_days * 86400


@lru_cache
def get_settings() -> Settings:
    return Settings()
