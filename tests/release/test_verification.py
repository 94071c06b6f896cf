# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for verifying a published entry.
"""

import json

import pytest

from relpub.config.loader import load_verify_config
from relpub.config.schema import PublishConfig, VerifyConfig
from relpub.release.exceptions import ArtifactFetchError, VerificationError
from relpub.release.publisher import publish_release
from relpub.release.storage.backend import StorageError
from relpub.release.verification import verify_release
from tests.conftest import MemoryObjectStore

MANIFEST_KEY = "app1/manifest.json"


@pytest.fixture()
def verify_config(publish_env: dict[str, str]) -> VerifyConfig:
    return load_verify_config(environ=publish_env)


@pytest.fixture()
def published(publish_config: PublishConfig, memory_store: MemoryObjectStore) -> MemoryObjectStore:
    publish_release(publish_config, memory_store)
    return memory_store


def test_published_artifact_verifies(
    verify_config: VerifyConfig, published: MemoryObjectStore
) -> None:
    report = verify_release(verify_config, published)
    assert report.version == "1.0.0"
    assert report.size == len(b"hello")
    assert report.binary == f"app1/artifact/{report.checksum}"


def test_missing_entry_fails(verify_config: VerifyConfig, memory_store: MemoryObjectStore) -> None:
    with pytest.raises(VerificationError, match="No artifact published"):
        verify_release(verify_config, memory_store)


def test_tampered_object_fails(verify_config: VerifyConfig, published: MemoryObjectStore) -> None:
    manifest = json.loads(published.objects[MANIFEST_KEY])
    key = manifest["channel"]["stable"]["artifact"]["linux-x64"]["binary"]
    published.objects[key] = b"tampered"

    with pytest.raises(VerificationError, match="Checksum mismatch"):
        verify_release(verify_config, published)


def test_dangling_reference_fails(verify_config: VerifyConfig, published: MemoryObjectStore) -> None:
    manifest = json.loads(published.objects[MANIFEST_KEY])
    del published.objects[manifest["channel"]["stable"]["artifact"]["linux-x64"]["binary"]]

    with pytest.raises(VerificationError, match="missing object"):
        verify_release(verify_config, published)


def test_binary_key_must_match_checksum(
    verify_config: VerifyConfig, published: MemoryObjectStore
) -> None:
    manifest = json.loads(published.objects[MANIFEST_KEY])
    manifest["channel"]["stable"]["artifact"]["linux-x64"]["binary"] = "app1/artifact/other"
    published.objects[MANIFEST_KEY] = json.dumps(manifest).encode()

    with pytest.raises(VerificationError, match="does not match"):
        verify_release(verify_config, published)


def test_download_failure_is_fetch_error(
    verify_config: VerifyConfig, published: MemoryObjectStore
) -> None:
    manifest = json.loads(published.objects[MANIFEST_KEY])
    key = manifest["channel"]["stable"]["artifact"]["linux-x64"]["binary"]
    published.fetch_errors[key] = StorageError("reset by peer")

    with pytest.raises(ArtifactFetchError):
        verify_release(verify_config, published)
