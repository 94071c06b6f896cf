# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
Shared pytest fixtures for relpub tests.

The in-memory store stands in for S3 everywhere except the storage tests,
which drive a real boto3 client through botocore's Stubber.
"""

import os
import textwrap
from pathlib import Path
from typing import Optional

import pytest

from relpub.config.loader import load_publish_config
from relpub.config.schema import PublishConfig
from relpub.logging.logger import configure_logging
from relpub.release.storage.backend import Body, ObjectNotFoundError

# 2023-11-14T22:13:20Z
ARTIFACT_MTIME = 1_700_000_000

ALL_ENV_VARS = (
    "ACCOUNT_ID",
    "ACCESS_KEY",
    "ACCESS_SECRET",
    "BUCKET",
    "CHANNEL",
    "APP_ID",
    "VERSION",
    "PLATFORM",
    "EXECUTABLE_PATH",
    "ENDPOINT_URL",
    "REGION",
)


class MemoryObjectStore:
    """Dict-backed ObjectStore that records every call."""

    def __init__(self, objects: Optional[dict[str, bytes]] = None) -> None:
        self.objects: dict[str, bytes] = dict(objects or {})
        self.content_types: dict[str, str] = {}
        self.calls: list[tuple[str, str]] = []
        self.fetch_errors: dict[str, Exception] = {}
        self.store_errors: dict[str, Exception] = {}

    def fetch(self, key: str) -> bytes:
        self.calls.append(("fetch", key))
        if key in self.fetch_errors:
            raise self.fetch_errors[key]
        if key not in self.objects:
            raise ObjectNotFoundError(key)
        return self.objects[key]

    def store(self, key: str, body: Body, content_type: str) -> None:
        self.calls.append(("store", key))
        if key in self.store_errors:
            raise self.store_errors[key]
        data = body if isinstance(body, bytes) else body.read()
        self.objects[key] = data
        self.content_types[key] = content_type

    @property
    def stored_keys(self) -> list[str]:
        return [key for op, key in self.calls if op == "store"]


@pytest.fixture(autouse=True)
def _default_logging() -> None:
    """Put every relpub logger back on INFO to stdout after each test."""
    yield  # type: ignore[misc]
    configure_logging()


@pytest.fixture()
def memory_store() -> MemoryObjectStore:
    return MemoryObjectStore()


@pytest.fixture()
def artifact_file(tmp_path: Path) -> Path:
    """A tiny artifact with a fixed modification time."""
    path = tmp_path / "app.bin"
    path.write_bytes(b"hello")
    os.utime(path, (ARTIFACT_MTIME, ARTIFACT_MTIME))
    return path


@pytest.fixture()
def publish_env(artifact_file: Path) -> dict[str, str]:
    return {
        "ACCOUNT_ID": "acct123",
        "ACCESS_KEY": "key-id",
        "ACCESS_SECRET": "key-secret",
        "BUCKET": "releases",
        "CHANNEL": "stable",
        "APP_ID": "app1",
        "VERSION": "1.0.0",
        "PLATFORM": "linux-x64",
        "EXECUTABLE_PATH": str(artifact_file),
    }


@pytest.fixture()
def publish_config(publish_env: dict[str, str]) -> PublishConfig:
    return load_publish_config(environ=publish_env)


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove every relpub variable from the process environment."""
    for name in ALL_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


@pytest.fixture()
def tmp_config_file(tmp_path: Path, artifact_file: Path) -> Path:
    """A complete YAML config for publishing."""
    content = textwrap.dedent(f"""\
        storage:
          account_id: "file-account"
          access_key: "file-key"
          access_secret: "file-secret"
          bucket: "file-bucket"
        target:
          app_id: "app1"
          channel: "beta"
          platform: "darwin-arm64"
        release:
          version: "2.0.0"
          executable_path: "{artifact_file}"
        logging:
          log_level: "DEBUG"
    """)
    config_file = tmp_path / "relpub.yaml"
    config_file.write_text(content, encoding="utf-8")
    return config_file


@pytest.fixture()
def broken_yaml_file(tmp_path: Path) -> Path:
    config_file = tmp_path / "broken.yaml"
    config_file.write_text("{{not: yaml: at: all:::", encoding="utf-8")
    return config_file
