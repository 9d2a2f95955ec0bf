"""Runtime settings for the subtitle studio using pydantic-settings."""

from __future__ import annotations

import os
import tomllib
from enum import StrEnum
from pathlib import Path
from typing import Any

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from . import config


class AppEnv(StrEnum):
    DEV = "dev"
    PRODUCTION = "production"


class TomlSettingsSource(PydanticBaseSettingsSource):
    """Reads ``[render]``, ``[cues]`` and top-level keys from a TOML file."""

    def __init__(self, settings_cls: type[BaseSettings], toml_file: str | Path):
        super().__init__(settings_cls)
        self.toml_file = Path(toml_file)

    def get_field_value(self, field_name: str, field_data: Any) -> tuple[Any, str, bool]:
        # Not used in this source style
        return None, field_name, False

    def __call__(self) -> dict[str, Any]:
        if not self.toml_file.exists():
            return {}

        try:
            with open(self.toml_file, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError):
            return {}

        flattened: dict[str, Any] = {}
        for section in ("render", "cues"):
            values = data.get(section, {})
            if isinstance(values, dict):
                flattened.update(values)

        for k, v in data.items():
            if k not in {"render", "cues"}:
                flattened[k] = v

        return flattened


def _settings_file() -> Path:
    override = os.getenv("SUBSTUDIO_SETTINGS_FILE")
    if override:
        return Path(override)
    return config.PROJECT_ROOT / "config" / "studio.toml"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="SUBSTUDIO_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
        populate_by_name=True,
    )

    # --- Environment ---
    app_env: AppEnv = Field(
        default=AppEnv.DEV,
        validation_alias=AliasChoices("SUBSTUDIO_APP_ENV", "APP_ENV", "ENV"),
    )
    log_level: str = "INFO"

    @field_validator("app_env", mode="before")
    @classmethod
    def normalize_env(cls, v: Any) -> AppEnv:
        if v is None:
            return AppEnv.DEV
        if isinstance(v, str):
            lowered = v.strip().lower()
            if lowered in {"dev", "development", "local", "localhost"}:
                return AppEnv.DEV
            return AppEnv.PRODUCTION
        return v

    @property
    def is_dev(self) -> bool:
        return self.app_env == AppEnv.DEV

    # --- Project Paths ---
    project_root: Path = config.PROJECT_ROOT
    font_path: Path = config.DEFAULT_FONT_PATH

    # --- Transcoder ---
    ffmpeg_binary: str = "ffmpeg"
    ffprobe_binary: str = "ffprobe"
    encode_timeout_s: float | None = None

    # --- Metrics ---
    # None: on in dev, off under pytest
    metrics_enabled: bool | None = None
    metrics_path: Path | None = None

    # --- Cues ---
    cue_offset_s: float = Field(default=config.DEFAULT_CUE_OFFSET_S, ge=0)
    box_color: str = config.DEFAULT_BOX_COLOR
    box_border_width: int = Field(default=config.DEFAULT_BOX_BORDER_WIDTH, ge=0)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Order of precedence:
        # 1. Constructor arguments
        # 2. Environment variables
        # 3. .env file
        # 4. config/studio.toml (or SUBSTUDIO_SETTINGS_FILE)
        # 5. Secrets
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            TomlSettingsSource(settings_cls, toml_file=_settings_file()),
            file_secret_settings,
        )


settings = Settings()
