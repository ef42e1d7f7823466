"""Analyzer configuration, read from ``.autoreview.yml``.

Example::

    method_name: value
    constant_kinds: [const, let, var]
    exercise: resistor-color-duo

All keys are optional. Unknown keys are ignored.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import yaml

from autoreview.exit_codes import ConfigError
from autoreview.languages.base import DEFAULT_CONSTANT_KINDS
from autoreview.rules.canonical import available_exercises

log = logging.getLogger(__name__)

CONFIG_FILENAMES = (".autoreview.yml", ".autoreview.yaml")
_VALID_KINDS = frozenset(DEFAULT_CONSTANT_KINDS)


@dataclass(frozen=True)
class AnalyzerConfig:
    method_name: str = "value"
    constant_kinds: tuple[str, ...] = DEFAULT_CONSTANT_KINDS
    exercise: str = "resistor-color-duo"


def _find_config_path(config_path: str | None) -> str | None:
    """Resolve a config path, searching the working directory if not given."""
    if config_path is not None:
        return config_path
    for name in CONFIG_FILENAMES:
        candidate = Path.cwd() / name
        if candidate.exists():
            return str(candidate)
    return None


def config_from_dict(data: dict, origin: str = "<config>") -> AnalyzerConfig:
    if not isinstance(data, dict):
        raise ConfigError(f"{origin}: expected a mapping at the top level")

    defaults = AnalyzerConfig()
    method_name = data.get("method_name", defaults.method_name)
    if not isinstance(method_name, str) or not method_name:
        raise ConfigError(f"{origin}: method_name must be a non-empty string")

    kinds = data.get("constant_kinds", list(defaults.constant_kinds))
    if not isinstance(kinds, list) or not all(isinstance(k, str) for k in kinds):
        raise ConfigError(f"{origin}: constant_kinds must be a list of strings")
    unknown = [k for k in kinds if k not in _VALID_KINDS]
    if unknown:
        raise ConfigError(f"{origin}: unknown declaration kind(s): {', '.join(unknown)}")

    exercise = data.get("exercise", defaults.exercise)
    if not isinstance(exercise, str) or not exercise:
        raise ConfigError(f"{origin}: exercise must be a non-empty string")
    if exercise not in available_exercises():
        raise ConfigError(f"{origin}: no rules for exercise {exercise!r}")

    return AnalyzerConfig(method_name=method_name, constant_kinds=tuple(kinds), exercise=exercise)


def load_config(config_path: str | None = None) -> AnalyzerConfig:
    """Load the analyzer config.

    Returns the defaults when no file is given or found. An explicitly
    given path that does not exist is an error.
    """
    resolved = _find_config_path(config_path)
    if resolved is None:
        return AnalyzerConfig()

    try:
        with open(resolved, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise ConfigError(f"Config file not found: {resolved}") from None
    except yaml.YAMLError as exc:
        raise ConfigError(f"{resolved}: invalid YAML ({exc})") from exc

    if data is None:
        log.debug("empty config file %s, using defaults", resolved)
        return AnalyzerConfig()
    config = config_from_dict(data, resolved)
    log.debug("loaded config from %s: %s", resolved, config)
    return config
