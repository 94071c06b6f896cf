# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Failures of the publish and verify operations.

Each class names exactly one step so the CLI can report which step failed
without parsing messages. None of these are retried; whoever catches one
aborts the whole operation.
"""


class PublishError(Exception):
    """Base for every fatal publish/verify failure."""

    step: str = "publish"


class ArtifactReadError(PublishError):
    """The local artifact could not be opened, stat'd or rewound."""

    step = "read-artifact"


class DigestError(PublishError):
    """The artifact stream could not be read to the end for hashing."""

    step = "digest"


class ManifestFetchError(PublishError):
    """The remote manifest fetch failed for a reason other than not-found."""

    step = "fetch-manifest"


class ManifestDecodeError(PublishError):
    """The fetched manifest is not valid JSON or does not match the schema."""

    step = "decode-manifest"


class ManifestEncodeError(PublishError):
    """The merged manifest could not be encoded back to JSON."""

    step = "encode-manifest"


class ArtifactStoreError(PublishError):
    """Uploading the artifact failed. The manifest was not touched."""

    step = "store-artifact"


class ManifestStoreError(PublishError):
    """Uploading the manifest failed after the artifact was stored."""

    step = "store-manifest"


class VerificationError(PublishError):
    """A published entry does not match the bytes stored under its key."""

    step = "verify"


class ArtifactFetchError(PublishError):
    """Downloading a published artifact for verification failed."""

    step = "fetch-artifact"
