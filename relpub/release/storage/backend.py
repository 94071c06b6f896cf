# Author : Eshan Roy <eshanized@proton.me>
# SPDX-License-Identifier: MIT

"""
The object storage interface the publisher talks to.

Objects are read and written whole. A store that can do that and tell a
missing key apart from every other failure is all the publish flow needs.
"""

from typing import BinaryIO, Protocol, Union

ARTIFACT_CONTENT_TYPE = "application/octet-stream"
MANIFEST_CONTENT_TYPE = "application/json"

Body = Union[bytes, BinaryIO]


class StorageError(Exception):
    """A storage request failed."""


class ObjectNotFoundError(StorageError):
    """The requested key does not exist."""

    def __init__(self, key: str) -> None:
        super().__init__(f"Object not found: {key}")
        self.key = key


class ObjectStore(Protocol):
    """Whole-object fetch and replace."""

    def fetch(self, key: str) -> bytes:
        """
        Raises:
            ObjectNotFoundError: Nothing is stored under ``key``.
            StorageError: Any other failure.
        """
        ...

    def store(self, key: str, body: Body, content_type: str) -> None:
        """
        Replace the object under ``key`` with ``body``.

        Raises:
            StorageError: The write did not complete.
        """
        ...
