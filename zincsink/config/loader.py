"""Configuration loading helpers for zincsink."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

import yaml

from .models import SinkSettings

CONFIG_EXTENSIONS = (".yaml", ".yml", ".json")
SETTINGS_FILENAME = "zincsink.yaml"
ENV_PREFIX = "ZINCSINK_"
ENV_FIELDS = (
    "host",
    "user",
    "password",
    "index",
    "flush_interval",
    "timeout",
    "max_pending",
    "log_file",
    "verbose",
)


def _read_file(path: Path) -> dict:
    text = path.read_text(encoding="utf-8")
    if path.suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file must contain a mapping: {path}")
    return data


def _write_file(path: Path, payload: dict) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as stream:
        if path.suffix in (".yaml", ".yml"):
            yaml.safe_dump(payload, stream, allow_unicode=True, sort_keys=False)
        else:
            json.dump(payload, stream, indent=2, ensure_ascii=False)


def env_overrides(environ: Mapping[str, str] | None = None) -> dict[str, str]:
    """Collect ``ZINCSINK_<FIELD>`` variables that are set and non-empty."""

    environ = os.environ if environ is None else environ
    overrides: dict[str, str] = {}
    for name in ENV_FIELDS:
        value = environ.get(f"{ENV_PREFIX}{name.upper()}")
        if value:
            overrides[name] = value
    return overrides


@dataclass(slots=True)
class ConfigLocator:
    """Resolve the settings file from the project root or ``ZINCSINK_HOME``."""

    project_root: Path | None = None

    def __post_init__(self) -> None:
        env_root = os.environ.get("ZINCSINK_HOME")
        if env_root:
            root = Path(env_root).expanduser().resolve()
        else:
            root = (self.project_root or Path.cwd()).resolve()
        self.project_root = root

    def settings_path(self) -> Path:
        return self.project_root / SETTINGS_FILENAME


class ConfigRepository:
    """Repository encapsulating settings IO and schema validation."""

    def __init__(self, locator: ConfigLocator | None = None) -> None:
        self.locator = locator or ConfigLocator()

    def load_settings(self, path: Path | None = None, *, use_env: bool = True) -> SinkSettings:
        path = path or self.locator.settings_path()
        payload: dict = {}
        if path.exists():
            if path.suffix not in CONFIG_EXTENSIONS:
                raise ValueError(f"Unsupported configuration format: {path.suffix}")
            payload = _read_file(path)
        elif not use_env:
            raise FileNotFoundError(f"Settings file not found: {path}")
        if use_env:
            payload.update(env_overrides())
        return SinkSettings.model_validate(payload)

    def save_settings(self, settings: SinkSettings, path: Path | None = None) -> Path:
        path = path or self.locator.settings_path()
        _write_file(path, settings.model_dump(mode="json"))
        return path


__all__ = ["ConfigLocator", "ConfigRepository", "CONFIG_EXTENSIONS", "env_overrides"]
