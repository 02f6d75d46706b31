"""
Configuration loader for YAML files.

Loads configuration from YAML, layers environment overrides on top
and validates the result into Pydantic models.
"""

from __future__ import annotations

import logging
import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .models import AppConfig, OutputFormat

logger = logging.getLogger(__name__)


DEFAULT_CONFIG_PATH = Path("configs/app.yaml")

TRUTHY_VALUES = frozenset({"1", "true", "yes", "y", "on"})

_ENV_REF_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")


class ConfigError(Exception):
    """Configuration loading or validation error."""

    def __init__(self, message: str, path: Path | None = None, details: str | None = None):
        self.path = path
        self.details = details
        super().__init__(message)


def env_flag(value: str | None) -> bool:
    """Interpret an environment variable as a boolean switch."""
    if value is None:
        return False
    return value.strip().lower() in TRUTHY_VALUES


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML file and return its contents as a dictionary.

    Args:
        path: Path to the YAML file

    Returns:
        Parsed YAML contents

    Raises:
        ConfigError: If file cannot be read or parsed
    """
    if not path.exists():
        raise ConfigError(f"Configuration file not found: {path}", path=path)

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Invalid YAML in {path}",
            path=path,
            details=str(e),
        ) from e
    except OSError as e:
        raise ConfigError(
            f"Cannot read {path}",
            path=path,
            details=str(e),
        ) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a mapping at the top of {path}", path=path)
    return data


def _expand_env_vars(data: dict[str, Any], env: Mapping[str, str]) -> dict[str, Any]:
    """Recursively expand environment variables in string values.

    Supports ${VAR} and ${VAR:-default} syntax.
    """
    def replacer(match: re.Match[str]) -> str:
        return env.get(match.group(1), match.group(2) or "")

    def expand_value(value: Any) -> Any:
        if isinstance(value, str):
            return _ENV_REF_PATTERN.sub(replacer, value)
        elif isinstance(value, dict):
            return {k: expand_value(v) for k, v in value.items()}
        elif isinstance(value, list):
            return [expand_value(item) for item in value]
        return value

    return expand_value(data)


def _deep_merge(base: dict[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _check_format(raw: str, source: str) -> None:
    if OutputFormat.parse(raw) is None:
        logger.warning(f"Unknown format {raw!r} from {source}; defaulting to yaml")


def env_overrides(env: Mapping[str, str] | None = None) -> dict[str, Any]:
    """Collect configuration overrides from environment variables.

    Recognized variables: FORMAT, OUTPUT_FILE, SHOW_HTML, PAUSE_ON_EXIT
    and SCRAPE_URL. Empty values are ignored.

    Args:
        env: Environment mapping (default: os.environ)

    Returns:
        Nested override dictionary shaped like AppConfig
    """
    env = os.environ if env is None else env
    overrides: dict[str, dict[str, Any]] = {}

    fmt = env.get("FORMAT", "").strip()
    if fmt:
        _check_format(fmt, "FORMAT")
        overrides.setdefault("output", {})["format"] = fmt

    output_file = env.get("OUTPUT_FILE", "").strip()
    if output_file:
        overrides.setdefault("output", {})["path"] = output_file

    if env_flag(env.get("SHOW_HTML")):
        overrides.setdefault("scrape", {})["show_html"] = True

    if env_flag(env.get("PAUSE_ON_EXIT")):
        overrides.setdefault("output", {})["pause_on_exit"] = True

    url = env.get("SCRAPE_URL", "").strip()
    if url:
        overrides.setdefault("scrape", {})["url"] = url

    return overrides


def load_app_config(
    path: Path | str | None = None,
    expand_env: bool = True,
    env: Mapping[str, str] | None = None,
) -> AppConfig:
    """Load application configuration from YAML and the environment.

    Environment overrides win over the file.

    Args:
        path: Path to app.yaml (default: configs/app.yaml)
        expand_env: Whether to expand ${VAR} references in the file
        env: Environment mapping (default: os.environ)

    Returns:
        Validated AppConfig instance

    Raises:
        ConfigError: If configuration is invalid
    """
    env = os.environ if env is None else env
    explicit = path is not None
    path = DEFAULT_CONFIG_PATH if path is None else Path(path)

    if path.exists():
        data = _load_yaml_file(path)
        if expand_env:
            data = _expand_env_vars(data, env)
    elif explicit:
        raise ConfigError(f"Configuration file not found: {path}", path=path)
    else:
        data = {}

    fmt = data.get("output", {}).get("format") if isinstance(data.get("output"), dict) else None
    if isinstance(fmt, str):
        _check_format(fmt, str(path))

    data = _deep_merge(data, env_overrides(env))

    try:
        return AppConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(
            f"Invalid app configuration in {path}",
            path=path,
            details=str(e),
        ) from e


def apply_overrides(config: AppConfig, overrides: Mapping[str, Any]) -> AppConfig:
    """Return a re-validated copy of config with nested overrides applied.

    None values are skipped so unset CLI options keep lower-priority
    settings.

    Raises:
        ConfigError: If the merged configuration is invalid
    """
    def prune(value: Mapping[str, Any]) -> dict[str, Any]:
        pruned: dict[str, Any] = {}
        for key, item in value.items():
            if isinstance(item, Mapping):
                nested = prune(item)
                if nested:
                    pruned[key] = nested
            elif item is not None:
                pruned[key] = item
        return pruned

    cleaned = prune(overrides)
    fmt = cleaned.get("output", {}).get("format")
    if isinstance(fmt, str):
        _check_format(fmt, "command line")

    data = _deep_merge(config.model_dump(mode="python"), cleaned)
    try:
        return AppConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError("Invalid configuration override", details=str(e)) from e
