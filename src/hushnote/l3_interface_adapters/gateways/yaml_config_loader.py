"""Gateway: YAML configuration loader."""

from __future__ import annotations

from pathlib import Path

import yaml

from hushnote.l1_entities.config import AppConfig
from hushnote.l3_interface_adapters.gateways.paths import DEFAULT_CONFIG_PATHS


class YamlConfigLoader:
    """Loads AppConfig from YAML files with override support."""

    def load(
        self,
        config_path: str | None = None,
        overrides: dict | None = None,
    ) -> AppConfig:
        return AppConfig.model_validate(self.load_raw(config_path, overrides))

    def load_raw(
        self,
        config_path: str | None = None,
        overrides: dict | None = None,
    ) -> dict:
        """Return the merged YAML data as a raw dict (before Pydantic validation)."""
        data = _read_yaml(Path(config_path)) if config_path is not None else _read_default()
        if overrides:
            deep_merge(data, overrides)
        return data

    def save_overrides(self, overrides: dict, config_path: str | None = None) -> Path:
        """Merge *overrides* into the config file and write it back. Returns the file written."""
        path = Path(config_path) if config_path is not None else _default_write_path()
        data = _read_yaml(path) if path.exists() else {}
        deep_merge(data, overrides)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(yaml.safe_dump(data, sort_keys=False, allow_unicode=True), encoding='utf-8')
        return path


def _read_yaml(path: Path) -> dict:
    if not path.exists():
        raise FileNotFoundError(f'Config file not found: {path}')
    data = yaml.safe_load(path.read_text(encoding='utf-8')) or {}
    if not isinstance(data, dict):
        raise ValueError(f'Config file must contain a mapping: {path}')
    return data


def _read_default() -> dict:
    for default_path in DEFAULT_CONFIG_PATHS:
        if default_path.exists():
            return _read_yaml(default_path)
    return {}


def _default_write_path() -> Path:
    for default_path in DEFAULT_CONFIG_PATHS:
        if default_path.exists():
            return default_path
    return DEFAULT_CONFIG_PATHS[0]


def deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge *override* into *base* (mutates base)."""
    for key, value in override.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            deep_merge(base[key], value)
        else:
            base[key] = value
    return base
