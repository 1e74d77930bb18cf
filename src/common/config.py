"""Shared configuration utilities."""

import json
import os
import tempfile
from pathlib import Path
from typing import Any

import yaml

CONFIG_SUFFIXES = (".yaml", ".yml", ".json")


def find_config_path(
    config_name: str | None,
    config_dir: Path,
    default_name: str = "config",
    env_var: str | None = None,
) -> Path:
    """Find config file path, checking env var and defaults.

    Args:
        config_name: Path to a config file, or the name of one (without
            suffix) inside config_dir. None falls back to env_var, then
            default_name.
        config_dir: Directory containing named config files
        default_name: Default config name if config_name is None
        env_var: Environment variable to check for config name

    Returns:
        Path to the config file

    Raises:
        FileNotFoundError: If config file doesn't exist
    """
    if config_name is None:
        config_name = os.environ.get(env_var, default_name) if env_var else default_name

    direct = Path(config_name).expanduser()
    if direct.is_file():
        return direct

    for suffix in CONFIG_SUFFIXES:
        config_path = config_dir / f"{config_name}{suffix}"
        if config_path.exists():
            return config_path

    raise FileNotFoundError(f"Config file not found: {config_name} (searched {config_dir})")


def load_yaml(path: Path) -> Any:
    """Load a YAML (or JSON) file."""
    with open(path) as f:
        return yaml.safe_load(f)


def write_atomic(path: Path, data: dict) -> None:
    """Write a settings document without ever leaving a half-written file.

    JSON files stay JSON; everything else is written as YAML.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w") as f:
            if path.suffix == ".json":
                json.dump(data, f, indent=2, ensure_ascii=False)
                f.write("\n")
            else:
                yaml.safe_dump(data, f, sort_keys=False, allow_unicode=True)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
