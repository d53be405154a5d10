"""Session configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Notification session values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE,
        env_file_encoding=ENV_FILE_ENCODING,
        extra="ignore",
    )

    api_base_url: str = Field(
        default="http://localhost:8080",
        description="Base URL of the marketplace API serving the notification endpoints",
        min_length=1,
    )
    notification_base_path: str = Field(
        default="/api/v1/notification",
        description="Path prefix shared by the subscribe, history and read endpoints",
    )
    jwt_secret_key: str | None = Field(
        default=None,
        description="Secret used to verify access tokens; claims are read unverified when unset",
    )
    jwt_algorithm: str = Field(
        default="HS256",
        description="Signing algorithm expected on access tokens",
    )
    stream_connect_timeout: float = Field(
        default=10.0,
        description="Seconds allowed to establish the server-push connection",
        gt=0,
    )
    stream_read_timeout: float | None = Field(
        default=None,
        description="Idle seconds tolerated between stream chunks; unset keeps the stream open",
    )
    request_timeout: float = Field(
        default=10.0,
        description="Timeout in seconds for the request/response notification endpoints",
        gt=0,
    )
    reconnect_enabled: bool = Field(
        default=False,
        description="Wrap the event stream with the retrying decorator",
    )
    reconnect_max_attempts: int = Field(
        default=5,
        description="Connection attempts made before a terminal failure is surfaced",
        ge=1,
    )
    reconnect_backoff_seconds: float = Field(
        default=1.0,
        description="Multiplier of the exponential backoff between reconnect attempts",
        ge=0,
    )
    reconnect_backoff_max_seconds: float = Field(
        default=30.0,
        description="Upper bound of a single reconnect wait",
        ge=0,
    )
    checkout_path: str = Field(default="/checkout", min_length=1)
    notifications_path: str = Field(default="/notifications", min_length=1)
    owner_reservation_path: str = Field(
        default="/my-page/owner/reservations/{reservation_id}",
        description="Owner reservation detail path, templated on ``reservation_id``",
        min_length=1,
    )
    app_timezone: str = Field(
        default="Asia/Seoul",
        description="Timezone applied to naive timestamps received from the API",
    )
    cors_origins: list[str] = Field(default_factory=lambda: ["http://localhost:5173"])

    @model_validator(mode="after")
    def _validate_owner_reservation_path(self) -> "Settings":
        if "{reservation_id}" not in self.owner_reservation_path:
            raise ValueError(
                "OWNER_RESERVATION_PATH must contain the {reservation_id} placeholder"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
