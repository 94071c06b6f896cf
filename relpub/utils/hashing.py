# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Content addressing for release artifacts.

An artifact is named by the digest of its bytes: BLAKE2b with a 32-byte
output, rendered as lowercase hex. Identical bytes always land on the same
storage key, so re-publishing an unchanged build rewrites the same object
instead of creating a new one.
"""

import hashlib
from pathlib import Path
from typing import BinaryIO

from relpub.release.exceptions import ArtifactReadError, DigestError

HASH_ALGORITHM = "blake2b"
DIGEST_SIZE = 32
HASH_BUFFER_SIZE = 65536  # 64 KiB

ARTIFACT_NAMESPACE = "artifact"
MANIFEST_NAME = "manifest.json"


def _new_hasher() -> "hashlib.blake2b":
    return hashlib.blake2b(digest_size=DIGEST_SIZE)


def compute_digest_bytes(data: bytes) -> str:
    """Hex digest of raw bytes."""
    hasher = _new_hasher()
    hasher.update(data)
    return hasher.hexdigest()


def compute_stream_digest(stream: BinaryIO, chunk_size: int = HASH_BUFFER_SIZE) -> str:
    """
    Hash everything from the stream's current position to EOF.

    The position is put back where it was once hashing finishes, because the
    caller uploads the very same stream right afterwards. The result does not
    depend on ``chunk_size``.

    Args:
        stream: Seekable binary stream.
        chunk_size: Bytes per read call.

    Returns:
        Lowercase hex digest.

    Raises:
        DigestError: If reading fails before EOF.
        ArtifactReadError: If the stream position cannot be saved or restored.
    """
    try:
        start = stream.tell()
    except OSError as err:
        raise ArtifactReadError(f"Cannot determine artifact stream position: {err}") from err

    hasher = _new_hasher()
    try:
        while True:
            chunk = stream.read(chunk_size)
            if not chunk:
                break
            hasher.update(chunk)
    except OSError as err:
        raise DigestError(f"Failed to create checksum: {err}") from err

    try:
        stream.seek(start)
    except OSError as err:
        raise ArtifactReadError(
            f"Failed to seek to beginning of artifact: {err}"
        ) from err

    return hasher.hexdigest()


def compute_file_digest(file_path: Path) -> str:
    """
    Hex digest of a file on disk.

    Raises:
        ArtifactReadError: If the file cannot be opened.
        DigestError: If reading fails part way.
    """
    try:
        handle = open(file_path, "rb")
    except OSError as err:
        raise ArtifactReadError(f"Failed to open artifact {file_path}: {err}") from err

    with handle:
        return compute_stream_digest(handle)


def artifact_key(app_id: str, checksum: str) -> str:
    """Storage key for the artifact with the given digest."""
    return f"{app_id}/{ARTIFACT_NAMESPACE}/{checksum}"


def manifest_key(app_id: str) -> str:
    """Storage key of the app's release manifest."""
    return f"{app_id}/{MANIFEST_NAME}"
