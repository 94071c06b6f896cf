# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Applying one release to a manifest.

The merge touches exactly one (channel, platform) path. Sibling channels and
sibling platforms come out exactly as they went in, and no channel or platform
is ever removed. Nothing here does I/O; the publisher fetches and stores.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from relpub.logging.logger import get_logger
from relpub.release.manifests.manifest import ArtifactEntry, ChannelEntry, Manifest
from relpub.utils.hashing import artifact_key

_logger: logging.Logger = get_logger(__name__)


@dataclass(frozen=True)
class ReleaseRecord:
    """The values one publish writes into the manifest."""

    channel: str
    platform: str
    version: str
    build: str  # RFC 3339
    checksum: str


def ensure_channel(manifest: Manifest, channel: str) -> ChannelEntry:
    """Return the channel's entry, creating an empty one if it is missing."""
    if not channel:
        raise ValueError("Channel name must be a non-empty string")

    entry = manifest.channels.get(channel)
    if entry is None:
        entry = ChannelEntry()
        manifest.channels[channel] = entry
        _logger.debug("Channel created", extra={"channel": channel})
    return entry


def ensure_path(manifest: Manifest, channel: str, platform: str) -> ArtifactEntry:
    """
    Make sure ``channels[channel].artifacts[platform]`` exists.

    Missing pieces are created empty; existing ones are returned as they are.
    Running it twice leaves the manifest exactly as running it once did.

    Returns:
        The platform's entry, which the caller may modify in place.

    Raises:
        ValueError: If ``channel`` or ``platform`` is empty.
    """
    if not platform:
        raise ValueError("Platform name must be a non-empty string")

    channel_entry = ensure_channel(manifest, channel)
    artifact = channel_entry.artifacts.get(platform)
    if artifact is None:
        artifact = ArtifactEntry()
        channel_entry.artifacts[platform] = artifact
        _logger.debug(
            "Platform created",
            extra={"channel": channel, "platform": platform},
        )
    return artifact


def find_entry(manifest: Manifest, channel: str, platform: str) -> Optional[ArtifactEntry]:
    """Read-only lookup; None when either the channel or the platform is absent."""
    channel_entry = manifest.channels.get(channel)
    if channel_entry is None:
        return None
    return channel_entry.artifacts.get(platform)


def merge_release(manifest: Manifest, record: ReleaseRecord, app_id: str) -> Manifest:
    """
    Return a copy of ``manifest`` with ``record`` applied.

    The channel's version and build are replaced. The platform's checksum is
    set and its binary key is derived from the checksum, so identical bytes
    always resolve to the same object. An existing patch key is kept.

    The input manifest is left unmodified.
    """
    updated = manifest.model_copy(deep=True)

    artifact = ensure_path(updated, record.channel, record.platform)
    channel_entry = updated.channels[record.channel]

    previous = artifact.checksum
    channel_entry.version = record.version
    channel_entry.build = record.build
    artifact.checksum = record.checksum
    artifact.binary = artifact_key(app_id, record.checksum)

    _logger.info(
        "Release merged",
        extra={
            "channel": record.channel,
            "platform": record.platform,
            "version": record.version,
            "checksum": record.checksum[:16] + "...",
            "changed": previous != record.checksum,
        },
    )
    return updated
