# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Typed settings for the publish and verify commands.

The loader builds one of these once at startup and passes it down; nothing
below the CLI reads the environment. Models are frozen and reject unknown
keys, so a typo in a config file fails loudly instead of being ignored.
"""

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

R2_ENDPOINT_TEMPLATE = "https://{account_id}.r2.cloudflarestorage.com"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class StorageConfig(BaseModel):
    """Where objects go and the credentials to put them there."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    account_id: str = Field(min_length=1, description="Storage account identifier")
    access_key: str = Field(min_length=1, description="Access key id")
    access_secret: SecretStr = Field(description="Secret access key, never logged")
    bucket: str = Field(min_length=1, description="Bucket holding manifests and artifacts")
    endpoint_url: Optional[str] = Field(
        default=None,
        description="S3 endpoint; defaults to the account's R2 endpoint",
    )
    region: str = Field(default="auto", min_length=1)

    @property
    def resolved_endpoint(self) -> str:
        if self.endpoint_url:
            return self.endpoint_url
        return R2_ENDPOINT_TEMPLATE.format(account_id=self.account_id)


class TargetConfig(BaseModel):
    """Which manifest entry an operation addresses."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    app_id: str = Field(min_length=1, description="Namespace for every key of this app")
    channel: str = Field(min_length=1, description="Release track, e.g. stable or beta")
    platform: str = Field(min_length=1, description="Target identifier, e.g. linux-x64")


class ReleaseConfig(BaseModel):
    """What is being published."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    version: str = Field(min_length=1)
    executable_path: Path = Field(description="Local artifact file to upload")


class LoggingConfig(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    log_level: str = Field(
        default="INFO",
        description="One of DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )
    log_file: Optional[str] = Field(default=None, description="Optional JSON log file")

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        upper = value.upper()
        if upper not in LOG_LEVELS:
            raise ValueError(f"must be one of {', '.join(LOG_LEVELS)}")
        return upper


class PublishConfig(BaseModel):
    """Everything `relpub publish` needs."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    storage: StorageConfig
    target: TargetConfig
    release: ReleaseConfig
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


class VerifyConfig(BaseModel):
    """Everything `relpub verify` needs."""

    model_config = ConfigDict(frozen=True, extra="forbid", validate_default=True)

    storage: StorageConfig
    target: TargetConfig
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
