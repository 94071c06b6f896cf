# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

from relpub.release.storage.backend import ObjectNotFoundError, ObjectStore, StorageError
from relpub.release.storage.s3 import S3ObjectStore

__all__ = ["ObjectNotFoundError", "ObjectStore", "S3ObjectStore", "StorageError"]
