#!/usr/bin/env python3
"""Converter settings (v1.0.0)
Defaults, overridden by an optional TOML file ([converter] table), overridden by CLI flags.
"""
from __future__ import annotations

import codecs
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

import tomli

from tokenizer import MAX_FIELD_SIZE

LOG_LEVELS = ("debug", "info", "warning", "error", "critical")


class ConfigError(RuntimeError):
    pass


@dataclass(frozen=True)
class Settings:
    chunk_size: int = 1024
    encoding: str = "utf-8"
    encoding_errors: str = "replace"
    constant_memory: bool = True
    tmpdir: Optional[str] = None
    field_size_limit: int = MAX_FIELD_SIZE
    log_level: str = "warning"

    def override(self, **values: Any) -> "Settings":
        """Return a copy with every non-None value applied."""
        given = {k: v for k, v in values.items() if v is not None}
        return _validate(replace(self, **given))


def load_settings(config_file: Optional[Path] = None) -> Settings:
    if config_file is None:
        return Settings()
    try:
        with open(config_file, "rb") as f:
            cfg = tomli.load(f)
    except OSError as e:
        raise ConfigError(f"cannot read config {config_file}: {e.strerror}") from e
    except tomli.TOMLDecodeError as e:
        raise ConfigError(f"invalid TOML in {config_file}: {e}") from e

    section = cfg.get("converter", {})
    if not isinstance(section, dict):
        raise ConfigError(f"{config_file}: [converter] must be a table")
    return _from_mapping(section, source=str(config_file))


def _from_mapping(section: Dict[str, Any], *, source: str) -> Settings:
    known = {f.name: f for f in fields(Settings)}
    unknown = sorted(set(section) - set(known))
    if unknown:
        raise ConfigError(f"{source}: unknown [converter] keys: {', '.join(unknown)}")
    return _validate(Settings(**section))


def _validate(s: Settings) -> Settings:
    # bool is an int subclass; reject it explicitly
    if not isinstance(s.chunk_size, int) or isinstance(s.chunk_size, bool) or s.chunk_size <= 0:
        raise ConfigError(f"chunk_size must be a positive integer, got {s.chunk_size!r}")
    if not isinstance(s.field_size_limit, int) or isinstance(s.field_size_limit, bool) or not 0 < s.field_size_limit <= MAX_FIELD_SIZE:
        raise ConfigError(f"field_size_limit must be an integer between 1 and {MAX_FIELD_SIZE}, got {s.field_size_limit!r}")
    if not isinstance(s.constant_memory, bool):
        raise ConfigError(f"constant_memory must be true or false, got {s.constant_memory!r}")
    if s.tmpdir is not None and not isinstance(s.tmpdir, str):
        raise ConfigError(f"tmpdir must be a string, got {s.tmpdir!r}")
    if not isinstance(s.log_level, str) or s.log_level.lower() not in LOG_LEVELS:
        raise ConfigError(f"log_level must be one of {', '.join(LOG_LEVELS)}, got {s.log_level!r}")
    for name in ("encoding", "encoding_errors"):
        value = getattr(s, name)
        if not isinstance(value, str):
            raise ConfigError(f"{name} must be a string, got {value!r}")
    try:
        codecs.lookup(s.encoding)
    except LookupError as e:
        raise ConfigError(f"unknown encoding: {s.encoding}") from e
    try:
        codecs.lookup_error(s.encoding_errors)
    except LookupError as e:
        raise ConfigError(f"unknown encoding error handler: {s.encoding_errors}") from e
    return s
