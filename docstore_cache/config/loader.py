"""YAML configuration loader with environment variable overrides.

Configuration is resolved in layers, later layers winning:

  1. ``Settings`` field defaults
  2. ``config/config.yaml`` (optional, checked into the deploying project)
  3. Environment variables / ``.env`` values that were explicitly set

The resolved dictionary has three sections::

    store:    {backend, url, timeout, max_size}
    cache:    {index, schema, serializer}     # adapter options
    logging:  {level}

YAML may carry extra keys in any section; they are passed through untouched.
"""

from pathlib import Path
from typing import Any

import yaml

from docstore_cache.config.settings import Settings
from docstore_cache.utils.errors import ConfigurationError

# Settings field -> (section, key) in the resolved configuration.
_FIELD_MAP: dict[str, tuple[str, str]] = {
    "store_backend": ("store", "backend"),
    "elasticsearch_url": ("store", "url"),
    "request_timeout": ("store", "timeout"),
    "memory_max_size": ("store", "max_size"),
    "index": ("cache", "index"),
    "schema_name": ("cache", "schema"),
    "serializer": ("cache", "serializer"),
    "log_level": ("logging", "level"),
}


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge it with environment-based Settings.

    Args:
        path: Path to the YAML configuration file.  A missing file is not an
              error.
        settings: Settings to merge; defaults to a fresh ``Settings()``.

    Returns:
        Fully resolved configuration dictionary.

    Raises:
        ConfigurationError: If the YAML file is malformed or not a mapping.
    """
    settings = settings or Settings()

    config: dict[str, Any] = {}
    _deep_merge(config, _settings_to_sections(settings, type(settings).model_fields.keys()))
    _deep_merge(config, _read_yaml(Path(path)))
    _deep_merge(config, _settings_to_sections(settings, settings.model_fields_set))
    return config


def _read_yaml(config_path: Path) -> dict:
    if not config_path.exists():
        return {}
    try:
        with open(config_path, encoding="utf-8") as f:
            loaded = yaml.safe_load(f) or {}
    except yaml.YAMLError as exc:
        raise ConfigurationError(message=f"Invalid YAML in {config_path}: {exc}") from exc
    if not isinstance(loaded, dict):
        raise ConfigurationError(
            message=f"{config_path} must contain a mapping, got {type(loaded).__name__}"
        )
    return loaded


def _settings_to_sections(settings: Settings, fields: Any) -> dict:
    sections: dict[str, dict[str, Any]] = {}
    for field_name in fields:
        if field_name not in _FIELD_MAP:
            continue
        section, key = _FIELD_MAP[field_name]
        sections.setdefault(section, {})[key] = getattr(settings, field_name)
    return sections


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
