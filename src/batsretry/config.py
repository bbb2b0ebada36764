"""Runtime settings loaded from defaults, an optional YAML file and the environment."""
from __future__ import annotations

import os
import shlex
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Sequence, Union

import yaml
from jsonschema import Draft7Validator

from batsretry.errors import ConfigError

DUPLICATE_POLICIES = ("first", "error")

ENV_PREFIX = "BATS_RETRY_"


@dataclass(frozen=True)
class Settings:
    runner: Sequence[str] = ("bats",)
    filter_flag: str = "--filter"
    base_dir_property: str = "BATS_CWD"
    report_suffix: str = ".xml"
    shebang: str = "#!/usr/bin/env bash"
    strict_mode: str = "set -eo pipefail"
    duplicate_names: str = "first"

    @property
    def strict_lookup(self) -> bool:
        return self.duplicate_names == "error"

    def with_runner(self, runner: Union[str, Sequence[str], None]) -> "Settings":
        if not runner:
            return self
        return replace(self, runner=_normalize_runner(runner))


SETTINGS_SCHEMA = {
    "type": "object",
    "additionalProperties": False,
    "properties": {
        "runner": {
            "oneOf": [
                {"type": "string", "minLength": 1},
                {"type": "array", "minItems": 1, "items": {"type": "string", "minLength": 1}},
            ]
        },
        "filter_flag": {"type": "string", "minLength": 1},
        "base_dir_property": {"type": "string", "minLength": 1},
        "report_suffix": {"type": "string", "minLength": 1},
        "shebang": {"type": "string", "pattern": "^#!"},
        "strict_mode": {"type": "string"},
        "duplicate_names": {"enum": list(DUPLICATE_POLICIES)},
    },
}
_validator = Draft7Validator(SETTINGS_SCHEMA)

_ENV_FIELDS = {
    "RUNNER": "runner",
    "BASE_DIR_PROPERTY": "base_dir_property",
    "REPORT_SUFFIX": "report_suffix",
    "DUPLICATE_NAMES": "duplicate_names",
}


def load_settings(
    path: Optional[Union[str, Path]] = None,
    *,
    env: Optional[Mapping[str, str]] = None,
) -> Settings:
    """Build settings from defaults, then ``path`` (YAML), then ``env``."""

    raw: Dict[str, Any] = {}
    if path is not None:
        raw.update(_read_settings_file(Path(path).expanduser()))
    environ = os.environ if env is None else env
    for suffix, key in _ENV_FIELDS.items():
        value = environ.get(f"{ENV_PREFIX}{suffix}")
        if value:
            raw[key] = value
    _validate(raw)
    if "runner" in raw:
        raw["runner"] = _normalize_runner(raw["runner"])
    return Settings(**raw)


def _read_settings_file(path: Path) -> Mapping[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in settings file {path}: {exc}") from exc
    if not isinstance(data, Mapping):
        raise ConfigError(f"Settings file {path} must contain a mapping at the top level")
    return data


def _validate(raw: Mapping[str, Any]) -> None:
    errors = sorted(_validator.iter_errors(dict(raw)), key=lambda e: list(e.path))
    if errors:
        messages = "; ".join(f"{'/'.join(map(str, err.path)) or 'root'}: {err.message}" for err in errors)
        raise ConfigError(f"Settings validation failed: {messages}")


def _normalize_runner(raw: Union[str, Sequence[str]]) -> tuple[str, ...]:
    if isinstance(raw, str):
        argv = tuple(shlex.split(raw))
    else:
        argv = tuple(str(part) for part in raw)
    if not argv:
        raise ConfigError("runner cannot be empty")
    return argv
