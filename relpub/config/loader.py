# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Config loader: optional YAML file, then environment variables on top.

The pipeline is linear:
  1. Read the YAML file, if one was given, into section dicts
  2. Overlay every environment variable that is set
  3. Report every required value that is still missing, by name
  4. Hand the result to pydantic and return the frozen model

A YAML file looks like:

    storage:
      account_id: abc123
      access_key: ...
      access_secret: ...
      bucket: releases
    target:
      app_id: app1
      channel: stable
      platform: linux-x64
    release:
      version: 1.0.0
      executable_path: dist/app
    logging:
      log_level: INFO

Any failure raises a ConfigError subclass before the network is touched.
"""

import os
from pathlib import Path
from typing import Any, Mapping, Optional, TypeVar

import yaml
from pydantic import BaseModel, ValidationError

from relpub.config.exceptions import ConfigLoadError, ConfigMissingError, ConfigValidationError
from relpub.config.schema import PublishConfig, VerifyConfig

# (environment variable, section, field), in the order they are reported.
_STORAGE_REQUIRED = (
    ("ACCOUNT_ID", "storage", "account_id"),
    ("ACCESS_KEY", "storage", "access_key"),
    ("ACCESS_SECRET", "storage", "access_secret"),
    ("BUCKET", "storage", "bucket"),
)
_PUBLISH_REQUIRED = _STORAGE_REQUIRED + (
    ("CHANNEL", "target", "channel"),
    ("APP_ID", "target", "app_id"),
    ("VERSION", "release", "version"),
    ("PLATFORM", "target", "platform"),
    ("EXECUTABLE_PATH", "release", "executable_path"),
)
_VERIFY_REQUIRED = _STORAGE_REQUIRED + (
    ("CHANNEL", "target", "channel"),
    ("APP_ID", "target", "app_id"),
    ("PLATFORM", "target", "platform"),
)
_OPTIONAL = (
    ("ENDPOINT_URL", "storage", "endpoint_url"),
    ("REGION", "storage", "region"),
)

_SECTIONS: frozenset[str] = frozenset({"storage", "target", "release", "logging"})

_ModelT = TypeVar("_ModelT", bound=BaseModel)


def _read_yaml_file(config_path: Path) -> dict[str, dict[str, Any]]:
    """
    Parse the YAML file into ``{section: {field: value}}``.

    Raises:
        ConfigLoadError: Missing file, unreadable file, bad YAML, or a
            top level that is not a mapping.
        ConfigValidationError: Unknown section or a section that is not
            a mapping.
    """
    if not config_path.is_file():
        raise ConfigLoadError(f"Config file not found: {config_path}")

    try:
        raw_text = config_path.read_text(encoding="utf-8")
    except OSError as err:
        raise ConfigLoadError(f"Cannot read config file {config_path}: {err}") from err

    try:
        parsed = yaml.safe_load(raw_text)
    except yaml.YAMLError as err:
        raise ConfigLoadError(f"Invalid YAML in {config_path}: {err}") from err

    if parsed is None:
        return {}
    if not isinstance(parsed, dict):
        raise ConfigLoadError(
            f"Config file must contain a YAML mapping, got {type(parsed).__name__}"
        )

    unknown = sorted(str(key) for key in parsed if key not in _SECTIONS)
    if unknown:
        raise ConfigValidationError(
            f"Unknown config sections in {config_path}: {', '.join(unknown)}"
        )

    sections: dict[str, dict[str, Any]] = {}
    for name, body in parsed.items():
        if body is None:
            continue
        if not isinstance(body, dict):
            raise ConfigValidationError(
                f"Config section '{name}' must be a mapping, got {type(body).__name__}"
            )
        sections[name] = dict(body)
    return sections


def _collect(
    required: tuple[tuple[str, str, str], ...],
    config_path: Optional[Path],
    environ: Optional[Mapping[str, str]],
) -> dict[str, dict[str, Any]]:
    env = os.environ if environ is None else environ
    sections = _read_yaml_file(config_path) if config_path is not None else {}

    for var, section, field in required + _OPTIONAL:
        value = env.get(var)
        if value is not None:
            sections.setdefault(section, {})[field] = value

    missing = [
        var
        for var, section, field in required
        if sections.get(section, {}).get(field) in (None, "")
    ]
    if missing:
        raise ConfigMissingError(missing)

    return sections


def _validate(model: type[_ModelT], data: dict[str, Any], source: str) -> _ModelT:
    try:
        return model.model_validate(data)
    except ValidationError as err:
        raise ConfigValidationError(f"Config validation failed for {source}:\n{err}") from err


def load_publish_config(
    config_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> PublishConfig:
    """
    Build the publish settings from an optional file and the environment.

    Environment variables win over file values. ``environ`` defaults to
    ``os.environ``.

    Raises:
        ConfigLoadError: The file could not be read or parsed.
        ConfigMissingError: Required values absent; lists each one.
        ConfigValidationError: Values present but invalid.
    """
    sections = _collect(_PUBLISH_REQUIRED, config_path, environ)
    return _validate(PublishConfig, sections, str(config_path or "environment"))


def load_verify_config(
    config_path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> VerifyConfig:
    """Like load_publish_config, without the release section."""
    sections = _collect(_VERIFY_REQUIRED, config_path, environ)
    sections.pop("release", None)
    return _validate(VerifyConfig, sections, str(config_path or "environment"))
