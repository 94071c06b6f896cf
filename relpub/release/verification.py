# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Checking a published entry against what storage actually holds.

For the configured (channel, platform) the manifest entry must exist, its
binary key must be the content address of its checksum, and the object under
that key must hash to that checksum.
"""

import logging
from dataclasses import dataclass

from relpub.config.schema import VerifyConfig
from relpub.logging.logger import get_logger
from relpub.release.exceptions import ArtifactFetchError, VerificationError
from relpub.release.manifests.merger import find_entry
from relpub.release.publisher import fetch_manifest
from relpub.release.storage.backend import ObjectNotFoundError, ObjectStore, StorageError
from relpub.utils.hashing import artifact_key, compute_digest_bytes

_logger: logging.Logger = get_logger(__name__)


@dataclass(frozen=True)
class VerificationReport:
    """A verified manifest entry."""

    channel: str
    platform: str
    version: str
    binary: str
    checksum: str
    size: int


def verify_release(config: VerifyConfig, store: ObjectStore) -> VerificationReport:
    """
    Verify the configured target's published artifact.

    Raises:
        VerificationError: Entry missing, key not content-addressed, object
            missing, or digest mismatch.
        ArtifactFetchError: The artifact download failed.
        ManifestFetchError, ManifestDecodeError: As for publishing.
    """
    target = config.target
    manifest = fetch_manifest(store, target.app_id)

    entry = find_entry(manifest, target.channel, target.platform)
    if entry is None:
        raise VerificationError(
            f"No artifact published for channel '{target.channel}' "
            f"platform '{target.platform}'"
        )

    expected_key = artifact_key(target.app_id, entry.checksum)
    if entry.binary != expected_key:
        raise VerificationError(
            f"Binary key {entry.binary!r} does not match checksum key {expected_key!r}"
        )

    try:
        data = store.fetch(entry.binary)
    except ObjectNotFoundError as err:
        raise VerificationError(f"Manifest points at a missing object: {entry.binary}") from err
    except StorageError as err:
        raise ArtifactFetchError(f"Failed to download artifact {entry.binary}: {err}") from err

    actual = compute_digest_bytes(data)
    if actual != entry.checksum:
        _logger.error(
            "Checksum mismatch",
            extra={
                "key": entry.binary,
                "expected": entry.checksum[:16] + "...",
                "actual": actual[:16] + "...",
            },
        )
        raise VerificationError(
            f"Checksum mismatch for {entry.binary}: expected {entry.checksum}, got {actual}"
        )

    version = manifest.channels[target.channel].version
    _logger.info(
        "Artifact verified",
        extra={"key": entry.binary, "version": version, "size": len(data)},
    )
    return VerificationReport(
        channel=target.channel,
        platform=target.platform,
        version=version,
        binary=entry.binary,
        checksum=entry.checksum,
        size=len(data),
    )
