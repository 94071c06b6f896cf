# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
S3-compatible object store backed by boto3.

Defaults target Cloudflare R2 (``https://<account>.r2.cloudflarestorage.com``,
region ``auto``), but any S3 endpoint works when ``endpoint_url`` is set.
"""

import logging
from typing import Any

import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError

from relpub.config.schema import StorageConfig
from relpub.logging.logger import get_logger
from relpub.release.storage.backend import Body, ObjectNotFoundError, StorageError

_logger: logging.Logger = get_logger(__name__)

_NOT_FOUND_CODES: frozenset[str] = frozenset({"NoSuchKey", "NotFound", "404"})

# R2 rejects the streaming CRC trailers newer botocore sends by default.
_CLIENT_CONFIG = BotoConfig(
    signature_version="s3v4",
    request_checksum_calculation="when_required",
    response_checksum_validation="when_required",
)


def _error_code(err: ClientError) -> str:
    return str(err.response.get("Error", {}).get("Code", ""))


class S3ObjectStore:
    """ObjectStore over a single bucket."""

    def __init__(self, client: Any, bucket: str) -> None:
        self._client = client
        self.bucket = bucket

    @classmethod
    def from_config(cls, config: StorageConfig) -> "S3ObjectStore":
        """Build a client with static credentials from the storage settings."""
        try:
            client = boto3.client(
                "s3",
                endpoint_url=config.resolved_endpoint,
                region_name=config.region,
                aws_access_key_id=config.access_key,
                aws_secret_access_key=config.access_secret.get_secret_value(),
                config=_CLIENT_CONFIG,
            )
        except (BotoCoreError, ValueError) as err:
            raise StorageError(f"Failed to connect to storage: {err}") from err
        _logger.debug(
            "Storage client created",
            extra={"endpoint": config.resolved_endpoint, "bucket": config.bucket},
        )
        return cls(client, config.bucket)

    def fetch(self, key: str) -> bytes:
        try:
            response = self._client.get_object(Bucket=self.bucket, Key=key)
            data: bytes = response["Body"].read()
        except ClientError as err:
            if _error_code(err) in _NOT_FOUND_CODES:
                raise ObjectNotFoundError(key) from err
            raise StorageError(f"Failed to fetch {key}: {err}") from err
        except BotoCoreError as err:
            raise StorageError(f"Failed to fetch {key}: {err}") from err

        _logger.debug("Object fetched", extra={"key": key, "bytes": len(data)})
        return data

    def store(self, key: str, body: Body, content_type: str) -> None:
        try:
            self._client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=body,
                ContentType=content_type,
            )
        except (ClientError, BotoCoreError) as err:
            raise StorageError(f"Failed to store {key}: {err}") from err

        _logger.debug("Object stored", extra={"key": key, "content_type": content_type})
