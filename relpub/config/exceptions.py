# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Configuration failures.

All of them are raised before any network activity, so the CLI can map the
whole family to one exit code.
"""


class ConfigError(Exception):
    """Base for all configuration errors."""


class ConfigLoadError(ConfigError):
    """The config file cannot be read or is not a YAML mapping."""


class ConfigValidationError(ConfigError):
    """Values are present but have the wrong type, shape or an unknown key."""


class ConfigMissingError(ConfigError):
    """
    One or more required values were not provided.

    ``missing`` holds the environment variable names in the order they are
    checked; the message has one "<NAME> is not set" line per name.
    """

    def __init__(self, missing: list[str]) -> None:
        self.missing = list(missing)
        super().__init__("\n".join(f"{name} is not set" for name in self.missing))
