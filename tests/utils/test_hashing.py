# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Tests for content addressing.

Identical bytes must always give the identical digest and key, however the
stream is chunked, and hashing must leave the stream ready to be uploaded.
"""

import hashlib
import io
from pathlib import Path

import pytest

from relpub.release.exceptions import ArtifactReadError, DigestError
from relpub.utils.hashing import (
    artifact_key,
    compute_digest_bytes,
    compute_file_digest,
    compute_stream_digest,
    manifest_key,
)


class _FailingStream(io.BytesIO):
    def read(self, size: int = -1) -> bytes:  # type: ignore[override]
        raise OSError("device went away")


class _UnseekableStream(io.BytesIO):
    def seek(self, offset: int, whence: int = 0) -> int:  # type: ignore[override]
        raise OSError("not seekable")


class TestDigestDeterminism:
    def test_same_bytes_produce_same_digest(self) -> None:
        assert compute_digest_bytes(b"build-42") == compute_digest_bytes(b"build-42")

    def test_different_bytes_produce_different_digest(self) -> None:
        assert compute_digest_bytes(b"build-42") != compute_digest_bytes(b"build-43")

    def test_empty_input_has_known_digest(self) -> None:
        expected = "0e5751c026e543b2e8ab2eb06099daa1d1e5df47778f7787faab45cdf12fe3a8"
        assert compute_digest_bytes(b"") == expected

    def test_digest_is_256_bit_lowercase_hex(self) -> None:
        digest = compute_digest_bytes(b"hello")
        assert len(digest) == 64
        assert digest == digest.lower()
        int(digest, 16)

    def test_matches_blake2b_256(self) -> None:
        assert compute_digest_bytes(b"hello") == hashlib.blake2b(b"hello", digest_size=32).hexdigest()


class TestStreamDigest:
    @pytest.mark.parametrize("chunk_size", [1, 3, 1024])
    def test_chunk_size_does_not_change_digest(self, chunk_size: int) -> None:
        data = bytes(range(256)) * 10
        stream = io.BytesIO(data)
        assert compute_stream_digest(stream, chunk_size=chunk_size) == compute_digest_bytes(data)

    def test_stream_position_is_restored(self) -> None:
        stream = io.BytesIO(b"payload bytes")
        compute_stream_digest(stream)
        assert stream.tell() == 0
        assert stream.read() == b"payload bytes"

    def test_read_failure_raises_digest_error(self) -> None:
        with pytest.raises(DigestError, match="checksum"):
            compute_stream_digest(_FailingStream(b"x"))

    def test_rewind_failure_raises_artifact_read_error(self) -> None:
        with pytest.raises(ArtifactReadError, match="seek"):
            compute_stream_digest(_UnseekableStream(b"x"))


class TestFileDigest:
    def test_file_digest_matches_bytes_digest(self, tmp_path: Path) -> None:
        path = tmp_path / "artifact.bin"
        path.write_bytes(b"some artifact content")
        assert compute_file_digest(path) == compute_digest_bytes(b"some artifact content")

    def test_missing_file_raises_artifact_read_error(self, tmp_path: Path) -> None:
        with pytest.raises(ArtifactReadError):
            compute_file_digest(tmp_path / "nope.bin")


class TestKeys:
    def test_artifact_key_is_namespaced_by_checksum(self) -> None:
        assert artifact_key("app1", "abc123") == "app1/artifact/abc123"

    def test_manifest_key(self) -> None:
        assert manifest_key("app1") == "app1/manifest.json"

    def test_identical_content_shares_a_key(self) -> None:
        first = artifact_key("app1", compute_digest_bytes(b"same"))
        second = artifact_key("app1", compute_digest_bytes(b"same"))
        assert first == second
