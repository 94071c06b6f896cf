# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
The release manifest document and its JSON encoding.

One manifest per app lives at ``{app_id}/manifest.json``:

    {"channel": {"stable": {"version": "1.2.0",
                            "build": "2026-10-01T08:00:00Z",
                            "artifact": {"linux-x64": {"binary": "app/artifact/<hex>",
                                                       "checksum": "<hex>",
                                                       "patch": ""}}}}}

Update clients read it to find the newest binary for their channel and
platform, so decoding is strict: anything that does not fit the schema is an
error rather than a best guess. Keys this version does not know about are
kept and written back as they were.
"""

import re
from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic_core import PydanticSerializationError

from relpub.release.exceptions import ManifestDecodeError, ManifestEncodeError

# Build time of an entry that has been created but not yet merged into.
ZERO_BUILD = "0001-01-01T00:00:00Z"

_RFC3339 = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})T(\d{2}):(\d{2}):(\d{2})(?:\.\d{1,9})?"
    r"(?:Z|[+-](\d{2}):(\d{2}))"
)


def format_build_time(timestamp_ns: int) -> str:
    """
    RFC 3339 UTC text for a nanosecond Unix timestamp.

    Trailing zeros of the fraction are dropped and a whole second has no
    fraction at all, so ``1_700_000_000_500_000_000`` gives
    ``2023-11-14T22:13:20.5Z``.
    """
    seconds, nanos = divmod(timestamp_ns, 1_000_000_000)
    text = datetime.fromtimestamp(seconds, tz=timezone.utc).strftime("%Y-%m-%dT%H:%M:%S")
    if nanos:
        text += "." + f"{nanos:09d}".rstrip("0")
    return text + "Z"


def _check_build_time(value: str) -> str:
    match = _RFC3339.fullmatch(value)
    if match is None:
        raise ValueError(f"build must be an RFC 3339 timestamp with an offset, got {value!r}")

    year, month, day, hour, minute, second, off_hour, off_minute = match.groups()
    try:
        datetime(int(year), int(month), int(day), int(hour), int(minute), int(second))
    except ValueError as err:
        raise ValueError(f"build is not a valid timestamp: {value!r}") from err
    if off_hour is not None and (int(off_hour) > 23 or int(off_minute) > 59):
        raise ValueError(f"build has an invalid offset: {value!r}")
    return value


class ArtifactEntry(BaseModel):
    """Where one platform's binary lives and what it hashes to."""

    model_config = ConfigDict(extra="allow", validate_assignment=True)

    binary: str = Field(default="", description="Storage key of the artifact bytes")
    checksum: str = Field(default="", description="Lowercase hex digest of the artifact")
    patch: str = Field(
        default="",
        description="Storage key of a differential update package, if one exists",
    )


class ChannelEntry(BaseModel):
    """
    Release state of one channel.

    ``version`` and ``build`` are shared by every platform in the channel;
    publishing any platform moves them forward for all of them.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True, validate_assignment=True)

    version: str = ""
    build: str = ZERO_BUILD
    artifacts: dict[str, ArtifactEntry] = Field(default_factory=dict, alias="artifact")

    @field_validator("build")
    @classmethod
    def _rfc3339_build(cls, value: str) -> str:
        return _check_build_time(value)

    @field_validator("artifacts", mode="before")
    @classmethod
    def _null_artifacts_are_empty(cls, value: Any) -> Any:
        return {} if value is None else value


class Manifest(BaseModel):
    """Root document: channel name → ChannelEntry."""

    model_config = ConfigDict(extra="allow", populate_by_name=True, validate_assignment=True)

    channels: dict[str, ChannelEntry] = Field(default_factory=dict, alias="channel")

    @field_validator("channels", mode="before")
    @classmethod
    def _null_channels_are_empty(cls, value: Any) -> Any:
        return {} if value is None else value


def parse_manifest(raw: Optional[bytes]) -> Manifest:
    """
    Decode a fetched manifest.

    Args:
        raw: The stored document, or None when no manifest exists yet.

    Returns:
        The decoded manifest. A missing document gives an empty one.

    Raises:
        ManifestDecodeError: Not JSON, not an object, or wrong field types.
    """
    if raw is None:
        return Manifest()

    try:
        return Manifest.model_validate_json(raw)
    except ValidationError as err:
        raise ManifestDecodeError(f"Failed to decode manifest: {err}") from err


def serialize_manifest(manifest: Manifest) -> bytes:
    """
    Encode a manifest as compact UTF-8 JSON using the persisted key names.

    Raises:
        ManifestEncodeError: If any value cannot be represented.
    """
    try:
        return manifest.model_dump_json(by_alias=True).encode("utf-8")
    except (PydanticSerializationError, ValueError) as err:
        raise ManifestEncodeError(f"Failed to marshal manifest: {err}") from err
