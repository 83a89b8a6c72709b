"""Configuration validation for justinstall.

Warns on unknown keys (with close-match suggestions) and reports values
whose type does not match the configuration models.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from difflib import get_close_matches
from enum import Enum
from typing import Any, Dict, List, Optional, Set

from justinstall.config.models import InstallConfig, NetworkConfig
from justinstall.core.logging import get_logger
from justinstall.resolution.scoring import ScoringConfig
from justinstall.resolution.scripts import ScriptRules

LOGGER = get_logger(__name__)


class ValidationSeverity(Enum):
    """Severity level for validation issues."""

    ERROR = "error"  # Config will fail at load
    WARNING = "warning"  # Likely mistake but config usable


@dataclass
class ConfigValidationIssue:
    """A validation issue for configuration with severity."""

    message: str
    source: str
    severity: ValidationSeverity
    key: Optional[str] = None
    suggestion: Optional[str] = None


# Section name -> dataclass whose fields are the valid keys
SECTION_MODELS: Dict[str, type] = {
    "network": NetworkConfig,
    "install": InstallConfig,
    "scoring": ScoringConfig,
    "scripts": ScriptRules,
}

VALID_TOP_LEVEL_KEYS: Set[str] = {"assume_yes"} | set(SECTION_MODELS)


def section_keys(section: str) -> Set[str]:
    """Return the valid keys of a config section."""
    return {f.name for f in fields(SECTION_MODELS[section])}


def validate_config(data: Dict[str, Any], source: str) -> List[ConfigValidationIssue]:
    """Validate a configuration dictionary.

    Does not raise; unknown keys are warnings, wrongly typed values are errors.
    The loader decides what to do with errors.

    Args:
        data: Config dictionary to validate.
        source: Source file path for messages.

    Returns:
        List of validation issues.
    """
    issues: List[ConfigValidationIssue] = []

    for key, value in data.items():
        if key not in VALID_TOP_LEVEL_KEYS:
            issues.append(_unknown_key(key, key, VALID_TOP_LEVEL_KEYS, source))
            continue

        if key == "assume_yes":
            if not isinstance(value, bool):
                issues.append(_wrong_type(key, "a boolean", value, source))
            continue

        if not isinstance(value, dict):
            issues.append(_wrong_type(key, "a mapping", value, source))
            continue

        defaults = SECTION_MODELS[key]()
        valid_keys = section_keys(key)
        for sub_key, sub_value in value.items():
            dotted = f"{key}.{sub_key}"
            if sub_key not in valid_keys:
                issues.append(_unknown_key(sub_key, dotted, valid_keys, source))
                continue
            issue = _check_type(dotted, getattr(defaults, sub_key), sub_value, source)
            if issue is not None:
                issues.append(issue)

    for issue in issues:
        _log_issue(issue)
    return issues


def _check_type(
    key: str, default: Any, value: Any, source: str
) -> Optional[ConfigValidationIssue]:
    """Compare a value against the type of the model default."""
    if value is None:
        return None
    if isinstance(default, bool):
        if not isinstance(value, bool):
            return _wrong_type(key, "a boolean", value, source)
    elif isinstance(default, int):
        if isinstance(value, bool) or not isinstance(value, int):
            return _wrong_type(key, "an integer", value, source)
    elif isinstance(default, float):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return _wrong_type(key, "a number", value, source)
    elif not isinstance(value, str):
        return _wrong_type(key, "a string", value, source)
    return None


def _unknown_key(key: str, dotted: str, valid: Set[str], source: str) -> ConfigValidationIssue:
    return ConfigValidationIssue(
        message=f"Unknown key '{dotted}'",
        source=source,
        severity=ValidationSeverity.WARNING,
        key=dotted,
        suggestion=_suggest_key(key, valid),
    )


def _wrong_type(key: str, expected: str, value: Any, source: str) -> ConfigValidationIssue:
    return ConfigValidationIssue(
        message=f"'{key}' must be {expected}, got {type(value).__name__}",
        source=source,
        severity=ValidationSeverity.ERROR,
        key=key,
    )


def _suggest_key(key: str, valid_keys: Set[str]) -> Optional[str]:
    """Suggest a similar valid key for typos."""
    matches = get_close_matches(key, sorted(valid_keys), n=1, cutoff=0.6)
    return matches[0] if matches else None


def _log_issue(issue: ConfigValidationIssue) -> None:
    message = f"{issue.source}: {issue.message}"
    if issue.suggestion:
        message += f" (did you mean '{issue.suggestion}'?)"
    if issue.severity == ValidationSeverity.ERROR:
        LOGGER.error(message)
    else:
        LOGGER.warning(message)
