# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
The publish operation.

One linear pass, no retries:

  open artifact → fetch manifest → digest → merge → encode
                → store artifact → store manifest

The artifact is always stored before the manifest that points at it, so a
reader of the manifest never sees a key whose object is missing. If the
artifact upload fails the manifest upload is never attempted. Encoding
happens before either upload, so a manifest that cannot be written leaves
nothing behind.

Two publishes racing on the same manifest key are last-writer-wins; this
module does not lock.
"""

import logging
import os
from dataclasses import dataclass

from relpub.config.schema import PublishConfig
from relpub.logging.logger import get_logger
from relpub.release.exceptions import (
    ArtifactReadError,
    ArtifactStoreError,
    ManifestFetchError,
    ManifestStoreError,
)
from relpub.release.manifests.manifest import (
    Manifest,
    format_build_time,
    parse_manifest,
    serialize_manifest,
)
from relpub.release.manifests.merger import ReleaseRecord, merge_release
from relpub.release.storage.backend import (
    ARTIFACT_CONTENT_TYPE,
    MANIFEST_CONTENT_TYPE,
    ObjectNotFoundError,
    ObjectStore,
    StorageError,
)
from relpub.utils.hashing import artifact_key, compute_stream_digest, manifest_key

_logger: logging.Logger = get_logger(__name__)


@dataclass(frozen=True)
class PublishResult:
    """What a publish wrote, or would have written on a dry run."""

    checksum: str
    artifact_key: str
    manifest_key: str
    manifest: Manifest
    dry_run: bool = False


def fetch_manifest(store: ObjectStore, app_id: str) -> Manifest:
    """
    Fetch and decode the app's manifest.

    A missing manifest is the normal first-publish state and yields an empty
    one.

    Raises:
        ManifestFetchError: The fetch failed for any reason but not-found.
        ManifestDecodeError: The stored document is not a valid manifest.
    """
    key = manifest_key(app_id)
    try:
        raw = store.fetch(key)
    except ObjectNotFoundError:
        _logger.info("No manifest found, starting from an empty one", extra={"key": key})
        return parse_manifest(None)
    except StorageError as err:
        raise ManifestFetchError(f"Failed to fetch manifest {key}: {err}") from err

    return parse_manifest(raw)


def publish_release(
    config: PublishConfig,
    store: ObjectStore,
    dry_run: bool = False,
) -> PublishResult:
    """
    Upload the configured artifact and record it in the manifest.

    Args:
        config: Validated publish settings.
        store: Object storage holding the manifest and artifacts.
        dry_run: Fetch, hash and merge, but store nothing.

    Returns:
        The checksum, both keys and the manifest as written.

    Raises:
        PublishError: A subclass naming the step that failed.
    """
    target = config.target
    path = config.release.executable_path
    m_key = manifest_key(target.app_id)

    try:
        handle = open(path, "rb")
    except OSError as err:
        raise ArtifactReadError(f"Failed to open executable {path}: {err}") from err

    with handle:
        try:
            stat = os.fstat(handle.fileno())
        except OSError as err:
            raise ArtifactReadError(f"Failed to stat executable {path}: {err}") from err

        manifest = fetch_manifest(store, target.app_id)
        checksum = compute_stream_digest(handle)
        a_key = artifact_key(target.app_id, checksum)

        record = ReleaseRecord(
            channel=target.channel,
            platform=target.platform,
            version=config.release.version,
            build=format_build_time(stat.st_mtime_ns),
            checksum=checksum,
        )
        updated = merge_release(manifest, record, target.app_id)
        payload = serialize_manifest(updated)

        if dry_run:
            _logger.info(
                "Dry run, nothing uploaded",
                extra={
                    "artifact_key": a_key,
                    "manifest_key": m_key,
                    "size": stat.st_size,
                    "manifest": payload.decode("utf-8"),
                },
            )
            return PublishResult(checksum, a_key, m_key, updated, dry_run=True)

        try:
            store.store(a_key, handle, ARTIFACT_CONTENT_TYPE)
        except StorageError as err:
            raise ArtifactStoreError(f"Failed to upload artifact {a_key}: {err}") from err

    _logger.info(
        "Artifact uploaded successfully",
        extra={"key": a_key, "size": stat.st_size},
    )

    try:
        store.store(m_key, payload, MANIFEST_CONTENT_TYPE)
    except StorageError as err:
        raise ManifestStoreError(f"Failed to upload manifest {m_key}: {err}") from err

    _logger.info(
        "Manifest uploaded successfully",
        extra={
            "key": m_key,
            "channel": target.channel,
            "platform": target.platform,
            "version": config.release.version,
        },
    )
    return PublishResult(checksum, a_key, m_key, updated)
