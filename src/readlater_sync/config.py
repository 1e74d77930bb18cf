"""Configuration loader for readlater-sync.

The settings document is YAML or JSON with these keys (camelCase or
snake_case):

    outputFile: ReadLater/Clippings.md
    appendMode: true
    template: "## {{title}}..."
    vaultPath: ~/Documents/MyVault
    gitSync: true
    syncInterval: 60
    providers:
      wired:
        enabled: true
        credentials:
          username: op://Private/Wired/username
          password: env://WIRED_PASSWORD
        lastSync: 2024-01-01T00:00:00+00:00
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml
from dateutil.parser import parse as parse_date

from common.config import load_yaml, write_atomic
from common.utils import get_value
from readlater_sync.credentials.resolver import format_reference
from readlater_sync.errors import ConfigurationError
from readlater_sync.models import ProviderConfig
from readlater_sync.template import DEFAULT_TEMPLATE

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_FILE = "ReadLater/Clippings.md"
CONFIG_DIR = Path.home() / ".config" / "readlater-sync"

KNOWN_KEYS = {
    "outputFile", "output_file",
    "appendMode", "append_mode",
    "template",
    "providers",
    "vaultPath", "vault_path",
    "gitSync", "git_sync",
    "syncInterval", "sync_interval",
    "headless", "headlessMode",
    "backup",
}


@dataclass
class Config:
    output_file: str = DEFAULT_OUTPUT_FILE
    append_mode: bool = True
    template: str = DEFAULT_TEMPLATE
    providers: dict[str, ProviderConfig] = field(default_factory=dict)
    vault_path: Optional[str] = None
    git_sync: bool = False
    sync_interval: int = 0  # minutes, 0 = manual only
    headless: bool = True
    backup: bool = False
    extra: dict[str, Any] = field(default_factory=dict)  # unknown keys, written back untouched


def load_config(path: Path | str) -> Config:
    """Load configuration from a YAML or JSON file.

    Raises:
        ConfigurationError: if the file is unreadable or malformed
    """
    try:
        data = load_yaml(Path(path).expanduser())
    except FileNotFoundError as e:
        raise ConfigurationError(f"Config file not found: {path}") from e
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to load config from {path}: {e}") from e

    return parse_config(data if data is not None else {})


def _bool(data: dict, key: str, *aliases: str, default: bool) -> bool:
    value = get_value(data, key, *aliases, default=default)
    if not isinstance(value, bool):
        raise ConfigurationError(f"'{key}' must be true or false, got {value!r}")
    return value


def _str(data: dict, key: str, *aliases: str, default: Optional[str]) -> Optional[str]:
    value = get_value(data, key, *aliases, default=default)
    if value is not None and not isinstance(value, str):
        raise ConfigurationError(f"'{key}' must be a string, got {value!r}")
    return value


def _timestamp(value: Any, provider_id: str) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if not isinstance(value, datetime):
        try:
            value = parse_date(str(value))
        except (ValueError, OverflowError) as e:
            raise ConfigurationError(f"Invalid lastSync for {provider_id}: {value!r}") from e
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def _parse_provider(provider_id: str, data: Any) -> ProviderConfig:
    if not isinstance(data, dict):
        raise ConfigurationError(f"Settings for provider '{provider_id}' must be a mapping")

    credentials = data.get("credentials") or {}
    if not isinstance(credentials, dict):
        raise ConfigurationError(f"Credentials for provider '{provider_id}' must be a mapping")
    for key, value in credentials.items():
        if value is not None and not isinstance(value, str):
            raise ConfigurationError(
                f"Credential '{key}' for provider '{provider_id}' must be a string"
            )

    return ProviderConfig(
        enabled=_bool(data, "enabled", default=False),
        credentials={key: value for key, value in credentials.items() if value},
        last_sync=_timestamp(get_value(data, "lastSync", "last_sync"), provider_id),
    )


def parse_config(data: Any) -> Config:
    """Parse config dictionary into Config object."""
    if not isinstance(data, dict):
        raise ConfigurationError("Config document must be a mapping")

    providers = data.get("providers") or {}
    if not isinstance(providers, dict):
        raise ConfigurationError("'providers' must be a mapping of provider id to settings")

    sync_interval = get_value(data, "syncInterval", "sync_interval", default=0)
    if isinstance(sync_interval, bool) or not isinstance(sync_interval, int) or sync_interval < 0:
        raise ConfigurationError(f"'syncInterval' must be a non-negative integer, got {sync_interval!r}")

    return Config(
        output_file=_str(data, "outputFile", "output_file", default=DEFAULT_OUTPUT_FILE)
        or DEFAULT_OUTPUT_FILE,
        append_mode=_bool(data, "appendMode", "append_mode", default=True),
        template=_str(data, "template", default=DEFAULT_TEMPLATE) or DEFAULT_TEMPLATE,
        providers={
            str(provider_id): _parse_provider(str(provider_id), provider)
            for provider_id, provider in providers.items()
        },
        vault_path=_str(data, "vaultPath", "vault_path", default=None),
        git_sync=_bool(data, "gitSync", "git_sync", default=False),
        sync_interval=sync_interval,
        headless=_bool(data, "headless", "headlessMode", default=True),
        backup=_bool(data, "backup", default=False),
        extra={key: value for key, value in data.items() if key not in KNOWN_KEYS},
    )


def _provider_to_dict(config: ProviderConfig) -> dict:
    data: dict[str, Any] = {
        "enabled": config.enabled,
        "credentials": {key: format_reference(value) for key, value in config.credentials.items()},
    }
    if config.last_sync is not None:
        data["lastSync"] = config.last_sync.isoformat()
    return data


def config_to_dict(config: Config) -> dict:
    """Serialize to the documented camelCase layout."""
    data: dict[str, Any] = dict(config.extra)
    data.update({
        "outputFile": config.output_file,
        "appendMode": config.append_mode,
        "template": config.template,
        "syncInterval": config.sync_interval,
        "headless": config.headless,
        "gitSync": config.git_sync,
        "backup": config.backup,
    })
    if config.vault_path:
        data["vaultPath"] = config.vault_path
    data["providers"] = {
        provider_id: _provider_to_dict(provider)
        for provider_id, provider in config.providers.items()
    }
    return data


def masked_config(config: Config) -> dict:
    """Config as a dict with every credential value hidden, for logging."""
    data = config_to_dict(config)
    for provider in data["providers"].values():
        provider["credentials"] = {key: "***" for key in provider["credentials"]}
    return data


def record_last_sync(path: Path | str, providers: Mapping[str, ProviderConfig]) -> None:
    """Write the given providers' last sync times back to the settings file.

    The document is re-read and only each provider's lastSync value changes;
    every other key stays exactly as it is on disk. Providers without an entry
    in the file are skipped. The write is atomic, so a failed save keeps the
    old file.

    Raises:
        ConfigurationError: if the file can no longer be read as a mapping
    """
    path = Path(path).expanduser()
    try:
        data = load_yaml(path)
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Failed to reload config from {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError("Config document must be a mapping")

    stored = data.get("providers")
    if not isinstance(stored, dict):
        return

    updated = 0
    for provider_id, provider in providers.items():
        entry = stored.get(provider_id)
        if provider.last_sync is None or not isinstance(entry, dict):
            continue
        key = "last_sync" if "last_sync" in entry else "lastSync"
        entry[key] = provider.last_sync.isoformat()
        updated += 1

    if updated:
        write_atomic(path, data)
        logger.debug("Recorded last sync for %d providers in %s", updated, path)
