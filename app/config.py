from __future__ import annotations

import json
import os
from pathlib import Path
from typing import ClassVar

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources import PydanticBaseSettingsSource, YamlConfigSettingsSource

DEFAULT_CONFIG_PATH = Path("config/wiki/app.yaml")


def _normalize_string_map(value: object, field_name: str) -> dict[str, str]:
    if value is None or value == "":
        return {}
    if isinstance(value, dict):
        return {str(key): str(item) for key, item in value.items()}
    if isinstance(value, str):
        try:
            parsed = json.loads(value)
        except json.JSONDecodeError as exc:
            msg = f"wiki.{field_name} must be a JSON object"
            raise ValueError(msg) from exc
        if not isinstance(parsed, dict):
            msg = f"wiki.{field_name} must be a JSON object"
            raise ValueError(msg)
        return {str(key): str(item) for key, item in parsed.items()}
    msg = f"wiki.{field_name} must be a JSON object"
    raise ValueError(msg)


class S3Settings(BaseModel):
    bucket: str = ""
    prefix: str = ""
    region: str | None = None
    endpoint_url: str | None = None
    access_key_id: str | None = None
    secret_access_key: str | None = None
    session_token: str | None = None
    use_path_style: bool = False


class WikiSettings(BaseModel):
    title: str = "Sentence Wiki"
    backend: str | None = None
    provide_backend: bool = False
    instance_params: dict[str, str] = Field(default_factory=dict)
    context_params: dict[str, str] = Field(default_factory=dict)
    backend_wait_timeout_seconds: float = Field(default=60.0, gt=0)
    session_cookie_name: str = "sw_session"
    session_idle_timeout_seconds: float = Field(default=1800.0, gt=0)
    max_sessions: int = Field(default=10_000, gt=0)
    file_logging: bool = True
    ui_text_overrides: dict[str, str] = Field(default_factory=dict)
    s3: S3Settings = S3Settings()

    @field_validator("backend", mode="before")
    @classmethod
    def normalize_backend(cls, value: object) -> str | None:
        if value is None:
            return None
        normalized = str(value).strip()
        return normalized or None

    @field_validator("instance_params", mode="before")
    @classmethod
    def normalize_instance_params(cls, value: object) -> dict[str, str]:
        return _normalize_string_map(value, "instance_params")

    @field_validator("context_params", mode="before")
    @classmethod
    def normalize_context_params(cls, value: object) -> dict[str, str]:
        return _normalize_string_map(value, "context_params")

    @field_validator("ui_text_overrides", mode="before")
    @classmethod
    def normalize_ui_text_overrides(cls, value: object) -> dict[str, str]:
        return _normalize_string_map(value, "ui_text_overrides")


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="SW_", env_nested_delimiter="__")

    wiki: WikiSettings = WikiSettings()

    _yaml_path: ClassVar[Path | None] = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        sources: list[PydanticBaseSettingsSource] = [
            init_settings,
            env_settings,
            dotenv_settings,
            file_secret_settings,
        ]
        if cls._yaml_path:
            sources.append(YamlConfigSettingsSource(settings_cls, yaml_file=cls._yaml_path))
        return tuple(sources)


def resolve_config_path(config_path: Path | None = None) -> Path | None:
    if config_path is None:
        env_path = os.getenv("SW_CONFIG_PATH")
        if env_path:
            config_path = Path(env_path)
        elif DEFAULT_CONFIG_PATH.exists():
            return DEFAULT_CONFIG_PATH
        else:
            return None
    if not config_path.exists():
        msg = f"Config file not found: {config_path}"
        raise FileNotFoundError(msg)
    return config_path


def load_settings(config_path: Path | None = None) -> AppSettings:
    yaml_path = resolve_config_path(config_path)
    previous = AppSettings._yaml_path
    AppSettings._yaml_path = yaml_path
    try:
        return AppSettings()
    finally:
        AppSettings._yaml_path = previous
