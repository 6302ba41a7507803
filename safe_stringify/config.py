"""Configuration models and loaders for safe_stringify.

This module defines the traversal limits, redaction options and logging
settings, and how values are loaded from YAML plus environment variable
overrides.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from re import Pattern
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

DEFAULT_CONFIG_PATH = "safe_stringify.yaml"

DEFAULT_MAX_DEPTH = 20
DEFAULT_MAX_EDGES = 20000
DEFAULT_MIN_PRESERVED_DEPTH = 8


class SanitizerOptions(BaseModel):
    """Limits and redaction rules for one sanitizing traversal."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    max_depth: int = Field(default=DEFAULT_MAX_DEPTH, ge=1, le=100)
    max_edges: int = Field(default=DEFAULT_MAX_EDGES, ge=1)
    min_preserved_depth: int = Field(default=DEFAULT_MIN_PRESERVED_DEPTH, ge=0)
    redacted_keys: list[str | Pattern[str]] = Field(default_factory=list, alias="redactedKeys")
    redacted_key_patterns: list[Pattern[str]] = Field(default_factory=list, alias="redactedKeyPatterns")
    redacted_paths: list[str] = Field(default_factory=list, alias="redactedPaths")

    @field_validator("redacted_keys", "redacted_key_patterns", "redacted_paths", mode="before")
    @classmethod
    def _none_to_empty_list(cls, value: Any) -> Any:
        """Treat explicit `null` for list fields as an empty list."""
        if value is None:
            return []
        if isinstance(value, (str, Pattern)):
            return [value]
        return value

    @model_validator(mode="after")
    def _validate_preserved_depth(self) -> "SanitizerOptions":
        """Ensure the preserved depth does not exceed the maximum depth."""
        if self.min_preserved_depth > self.max_depth:
            raise ValueError("min_preserved_depth must be <= max_depth")
        return self

    @property
    def key_matchers(self) -> list[str | Pattern[str]]:
        """All key matchers, plain names first."""
        return [*self.redacted_keys, *self.redacted_key_patterns]

    @classmethod
    def coerce(cls, options: "SanitizerOptions | Mapping[str, Any] | None") -> "SanitizerOptions":
        """Accept an options instance, a plain mapping, or nothing."""
        if options is None:
            return cls()
        if isinstance(options, cls):
            return options
        if isinstance(options, Mapping):
            return cls.model_validate(dict(options))
        raise TypeError(f"options must be SanitizerOptions or a mapping, not {type(options).__name__}")


class LoggingConfig(BaseModel):
    """Logging-related configuration."""

    model_config = ConfigDict(populate_by_name=True)

    level: str = "INFO"
    json_logs: bool = Field(default=False, alias="json")
    max_extra_chars: int = Field(default=8000, ge=0)


class StringifyConfig(BaseModel):
    """Top-level configuration for the command-line front end."""

    model_config = ConfigDict(extra="forbid")

    indent: int | str | None = None
    sanitizer: SanitizerOptions = Field(default_factory=SanitizerOptions)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("sanitizer", "logging", mode="before")
    @classmethod
    def _none_to_defaults(cls, value: Any) -> Any:
        """Treat explicit YAML `null` sections as defaults."""
        if value is None:
            return {}
        return value


def _load_yaml(path: str | None) -> dict[str, Any]:
    """Load a YAML file into a dictionary.

    Missing files are treated as empty config for environment-only usage.
    """
    if not path:
        return {}
    cfg_path = Path(path)
    if not cfg_path.exists():
        return {}
    with cfg_path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config root must be object: {path}")
    return data


def _split_list(value: str) -> list[str]:
    return [item.strip() for item in value.split(",") if item.strip()]


def _override_from_env(data: dict[str, Any]) -> dict[str, Any]:
    """Apply environment variable overrides on top of file configuration."""
    env_map = {
        "sanitizer.max_depth": "SAFE_STRINGIFY_MAX_DEPTH",
        "sanitizer.max_edges": "SAFE_STRINGIFY_MAX_EDGES",
        "sanitizer.min_preserved_depth": "SAFE_STRINGIFY_MIN_PRESERVED_DEPTH",
        "sanitizer.redacted_keys": "SAFE_STRINGIFY_REDACTED_KEYS",
        "sanitizer.redacted_paths": "SAFE_STRINGIFY_REDACTED_PATHS",
        "indent": "SAFE_STRINGIFY_INDENT",
        "logging.level": "SAFE_STRINGIFY_LOG_LEVEL",
        "logging.json_logs": "SAFE_STRINGIFY_LOG_JSON",
    }

    out = dict(data)
    out["sanitizer"] = dict(out.get("sanitizer") or {})
    out["logging"] = dict(out.get("logging") or {})

    for key, env_name in env_map.items():
        value = os.getenv(env_name)
        if value is None:
            continue

        if key in {
            "sanitizer.max_depth",
            "sanitizer.max_edges",
            "sanitizer.min_preserved_depth",
        }:
            out["sanitizer"][key.split(".", 1)[1]] = int(value)
        elif key in {"sanitizer.redacted_keys", "sanitizer.redacted_paths"}:
            out["sanitizer"][key.split(".", 1)[1]] = _split_list(value)
        elif key == "indent":
            out[key] = int(value) if value.strip().isdigit() else value
        elif key == "logging.json_logs":
            out["logging"]["json"] = value.lower() in {"1", "true", "yes", "on"}
        elif key == "logging.level":
            out["logging"]["level"] = value

    return out


def load_config(path: str | None = None) -> StringifyConfig:
    """Load, merge, and validate configuration."""
    final_path = path or os.getenv("SAFE_STRINGIFY_CONFIG") or DEFAULT_CONFIG_PATH
    raw = _load_yaml(final_path)
    raw = _override_from_env(raw)
    return StringifyConfig.model_validate(raw)
