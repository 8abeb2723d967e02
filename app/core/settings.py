"""Typed configuration for the RT-SYR API, read from the environment or .env.

Only DATABASE_URL is required to import the app. JWT secrets are checked by
the token issuer when the app starts.
"""

from datetime import timedelta
from functools import lru_cache

from pydantic import Field, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = Field(default="RT-SYR", alias="APP_NAME")

    # Database
    database_url: str = Field(alias="DATABASE_URL")

    # SQLAdmin session cookie signing
    session_secret_key: str = Field(default="change-me", alias="SESSION_SECRET_KEY")

    # Comma separated, "*" for any origin
    cors_origins: str = Field(default="*", alias="CORS_ORIGINS")

    # JWT
    jwt_secret: str | None = Field(default=None, alias="JWT_SECRET")
    jwt_expires_in: str = Field(default="15m", alias="JWT_EXPIRES_IN")
    jwt_refresh_secret: str | None = Field(default=None, alias="JWT_REFRESH_SECRET")
    jwt_refresh_expires_in: str = Field(default="7d", alias="JWT_REFRESH_EXPIRES_IN")
    jwt_algorithm: str = Field(default="HS256", alias="JWT_ALGORITHM")

    # Email verification codes
    otp_expires_minutes: int = Field(
        default=15, alias="OTP_EXPIRES_MINUTES", ge=1, le=60
    )

    # Resend; without an API key codes are logged instead of sent
    resend_api_key: str | None = Field(default=None, alias="RESEND_API_KEY")
    email_from: str = Field(default="RT-SYR <info@rt-syr.com>", alias="EMAIL_FROM")

    @computed_field
    @property
    def cors_origins_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @computed_field
    @property
    def otp_expires_in(self) -> timedelta:
        return timedelta(minutes=self.otp_expires_minutes)


@lru_cache
def get_settings() -> Settings:
    return Settings()
