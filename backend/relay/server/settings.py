"""Relay server configuration via environment variables."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from shared.validators import StringListEnvSettingsSource, parse_string_list

if TYPE_CHECKING:
    from pydantic_settings.sources.base import PydanticBaseSettingsSource


class RelayServerSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="RELAY_", populate_by_name=True)

    # The listening port is also read from plain PORT, as hosting platforms set it.
    port: int = Field(default=9090, ge=1, le=65535, validation_alias=AliasChoices("RELAY_PORT", "PORT", "port"))
    host: str = Field(default="0.0.0.0", min_length=1)  # noqa: S104
    log_dir: str | None = Field(default=None, min_length=1)
    cors_origins: list[str] = ["*"]
    max_pending_messages: int = Field(default=256, ge=1)
    message_rate: float = Field(default=120.0, gt=0)
    message_burst: int = Field(default=240, ge=1)

    @field_validator("cors_origins", mode="before")
    @classmethod
    def validate_cors_origins(cls, v: str | list[str]) -> list[str]:
        return parse_string_list(v)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return init_settings, StringListEnvSettingsSource(settings_cls), dotenv_settings, file_secret_settings
