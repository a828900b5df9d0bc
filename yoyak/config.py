from __future__ import annotations

import json
import logging
import os
import sys
from collections.abc import Iterable
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import NonNegativeInt, PositiveInt
from pydantic_settings import (
    BaseSettings,
    JsonConfigSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

log = logging.getLogger(__name__)

# Fields written by ``save_settings``; everything else stays env-only.
PERSISTED_FIELDS = frozenset(
    {
        "model",
        "api_key",
        "base_url",
        "provider",
        "language",
        "summary_paragraphs",
        "max_continuations",
    }
)


def settings_path() -> Path:
    """Return the path of the settings file."""
    if sys.platform == "win32":
        app_data = os.environ.get("AppData") or os.environ.get("LocalAppData")
        base = Path(app_data) if app_data else Path.home() / "AppData" / "Roaming"
        return base / "yoyak" / "yoyak.json"
    xdg_config_home = os.environ.get("XDG_CONFIG_HOME")
    base = Path(xdg_config_home) if xdg_config_home else Path.home() / ".config"
    return base / "yoyak" / "yoyak.json"


def read_settings_file(path: Path | None = None) -> dict[str, Any]:
    """Return the values stored in the settings file.

    A missing, unreadable or malformed file counts as empty, so a broken file
    never stops ``yoyak config set`` from writing a fresh one.
    """
    path = path or settings_path()
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        return {}
    except (OSError, ValueError) as exc:
        log.warning("Ignoring unreadable settings file %s: %s", path, exc)
        return {}
    if not isinstance(data, dict):
        log.warning("Ignoring settings file %s: not a JSON object", path)
        return {}
    return data


class SettingsFileSource(JsonConfigSettingsSource):
    """JSON settings file source that treats a broken file as empty."""

    def _read_file(self, file_path: Path) -> dict[str, Any]:
        return read_settings_file(file_path)


class Settings(BaseSettings):
    """Runtime configuration for yoyak.

    Values come from keyword arguments (CLI overrides), ``YOYAK_*``
    environment variables, a ``.env`` file and finally the settings file
    returned by :func:`settings_path`, in that order of precedence.
    """

    # Model selection
    model: str = "gpt-4o-mini"
    provider: Literal["openai", "azure"] = "openai"

    # OpenAI-compatible endpoint
    # Note: allow empty by default so the CLI can start without a key.
    # Model construction validates presence before contacting the API.
    api_key: str = ""
    base_url: str | None = None

    # Azure OpenAI configuration
    azure_endpoint: str | None = None
    azure_api_version: str = "2024-10-21"
    azure_deployment: str | None = None

    # Output
    language: str = "en"
    summary_paragraphs: PositiveInt = 1

    # None keeps the continuation loop unbounded.
    max_continuations: NonNegativeInt | None = None

    model_config = SettingsConfigDict(
        env_prefix="YOYAK_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            SettingsFileSource(settings_cls, json_file=settings_path()),
            file_secret_settings,
        )


def save_settings(settings: Settings, fields: Iterable[str] | None = None) -> Path:
    """Write the persisted fields of ``settings`` to the settings file.

    With ``fields`` only those persisted fields are written.
    """
    include = set(PERSISTED_FIELDS) if fields is None else set(PERSISTED_FIELDS & set(fields))
    path = settings_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        settings.model_dump_json(include=include, indent=2),
        encoding="utf-8",
    )
    return path


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
