"""Configuration file loading and merging.

Handles loading configuration from YAML files with:
- Global config ($JUSTINSTALL_HOME/config.yml)
- An explicit config file (--config), merged over the global one
- Environment variable expansion (${VAR})
- Config merging with proper precedence
"""

from __future__ import annotations

import os
import re
from dataclasses import fields
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from justinstall.config.models import InstallConfig, JustInstallConfig, NetworkConfig
from justinstall.config.validation import ValidationSeverity, validate_config
from justinstall.core.logging import get_logger
from justinstall.host.paths import JustInstallPaths
from justinstall.resolution.scoring import ScoringConfig
from justinstall.resolution.scripts import ScriptRules

LOGGER = get_logger(__name__)

# Environment variable pattern: ${VAR} or ${VAR:-default}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")


class ConfigError(Exception):
    """Configuration loading or parsing error."""

    pass


def load_config(
    cli_config_path: Optional[Path] = None,
    cli_overrides: Optional[Dict[str, Any]] = None,
    paths: Optional[JustInstallPaths] = None,
) -> JustInstallConfig:
    """Load configuration with proper precedence.

    Precedence (highest to lowest):
    1. CLI flags (cli_overrides)
    2. Custom config file (cli_config_path)
    3. Global config ($JUSTINSTALL_HOME/config.yml)
    4. Built-in defaults

    Args:
        cli_config_path: Optional path to custom config file (--config flag).
        cli_overrides: Dict of CLI flag overrides.
        paths: Home directory layout; defaults to the resolved justinstall home.

    Returns:
        Merged JustInstallConfig instance.

    Raises:
        ConfigError: If a config file is missing, malformed or has invalid values.
    """
    sources: List[str] = []
    merged: Dict[str, Any] = {}
    paths = paths or JustInstallPaths.default()

    global_path = paths.config_file
    if global_path.exists():
        merged = merge_configs(merged, _load_layer(global_path))
        sources.append(f"global:{global_path}")
        LOGGER.debug(f"Loaded global config from {global_path}")

    if cli_config_path:
        if not cli_config_path.exists():
            raise ConfigError(f"Config file not found: {cli_config_path}")
        merged = merge_configs(merged, _load_layer(cli_config_path))
        sources.append(f"custom:{cli_config_path}")
        LOGGER.debug(f"Loaded custom config from {cli_config_path}")

    if cli_overrides:
        merged = merge_configs(merged, cli_overrides)
        sources.append("cli")

    config = dict_to_config(merged)
    config._config_sources = sources

    LOGGER.debug(f"Config loaded from sources: {sources}")
    return config


def _load_layer(path: Path) -> Dict[str, Any]:
    try:
        data = load_yaml_file(path)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    issues = validate_config(data, source=str(path))
    errors = [issue for issue in issues if issue.severity == ValidationSeverity.ERROR]
    if errors:
        details = "; ".join(issue.message for issue in errors)
        raise ConfigError(f"Invalid configuration in {path}: {details}")
    return data


def load_yaml_file(path: Path) -> Dict[str, Any]:
    """Load and parse a YAML config file.

    Performs environment variable expansion on string values.

    Raises:
        yaml.YAMLError: If YAML parsing fails.
        ConfigError: If the document is not a mapping.
    """
    with open(path, "r", encoding="utf-8") as f:
        content = f.read()

    data = yaml.safe_load(content)

    if data is None:
        return {}

    if not isinstance(data, dict):
        raise ConfigError(f"Config file must be a YAML mapping, got {type(data).__name__}")

    return expand_env_vars(data)


def expand_env_vars(data: Any) -> Any:
    """Recursively expand environment variables in config values.

    Supports ${VAR} and ${VAR:-default} syntax.
    """
    if isinstance(data, dict):
        return {k: expand_env_vars(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [expand_env_vars(item) for item in data]
    elif isinstance(data, str):
        return ENV_VAR_PATTERN.sub(_env_var_replacer, data)
    else:
        return data


def _env_var_replacer(match: re.Match[str]) -> str:
    """Replace environment variable reference with its value."""
    var_name = match.group(1)
    default_value = match.group(2)

    value = os.environ.get(var_name)
    if value is not None:
        return value
    if default_value is not None:
        return default_value

    LOGGER.warning(f"Environment variable ${var_name} is not set and has no default")
    return ""


def merge_configs(base: Dict[str, Any], overlay: Dict[str, Any]) -> Dict[str, Any]:
    """Deep merge two config dicts, with overlay taking precedence.

    Rules:
    - Scalar values: overlay replaces base
    - Lists: overlay replaces base (no merging)
    - Dicts: recursive merge
    """
    result = base.copy()

    for key, overlay_value in overlay.items():
        if key in result and isinstance(result[key], dict) and isinstance(overlay_value, dict):
            result[key] = merge_configs(result[key], overlay_value)
        else:
            result[key] = overlay_value

    return result


def _build_section(cls: type, data: Optional[Dict[str, Any]]) -> Any:
    """Build a section dataclass from its mapping, ignoring unknown keys."""
    if not data:
        return cls()
    known = {f.name for f in fields(cls)}
    return cls(**{k: v for k, v in data.items() if k in known and v is not None})


def dict_to_config(data: Dict[str, Any]) -> JustInstallConfig:
    """Convert a validated dict to a typed JustInstallConfig."""
    return JustInstallConfig(
        assume_yes=bool(data.get("assume_yes", False)),
        network=_build_section(NetworkConfig, data.get("network")),
        install=_build_section(InstallConfig, data.get("install")),
        scoring=_build_section(ScoringConfig, data.get("scoring")),
        scripts=_build_section(ScriptRules, data.get("scripts")),
    )
