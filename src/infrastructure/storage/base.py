# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Blob store port and shared types.

A blob store accepts an uploaded document under a logical prefix and
returns a stable storage key; it can later produce a retrieval URL for
that key.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import PurePath
from uuid import uuid4


class StorageError(Exception):
    """Raised when a document cannot be stored or addressed.

    Attributes:
        message: Human-readable error description.
        key: Storage key involved, if known.
    """

    def __init__(self, message: str, key: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.key = key


@dataclass(frozen=True)
class UploadedFile:
    """Document received from a client.

    Attributes:
        filename: Original filename as sent by the client.
        content_type: MIME type declared by the client.
        content: Raw document bytes.
    """

    filename: str
    content_type: str | None
    content: bytes

    @property
    def size(self) -> int:
        """Size of the document in bytes."""
        return len(self.content)

    @property
    def extension(self) -> str:
        """Lowercase filename extension including the dot, or empty."""
        return PurePath(self.filename or "").suffix.lower()


def generate_key(prefix: str, filename: str) -> str:
    """Build a unique storage key that keeps the original extension.

    Args:
        prefix: Logical folder, e.g. "assignments".
        filename: Original filename.

    Returns:
        Key such as "assignments/6f1c...e2.pdf".
    """
    extension = PurePath(filename or "").suffix
    return f"{prefix.rstrip('/')}/{uuid4()}{extension}"


class BlobStore(ABC):
    """Abstract document store."""

    @abstractmethod
    async def upload(self, file: UploadedFile, prefix: str) -> str:
        """Store a document.

        Args:
            file: Document to store.
            prefix: Logical folder for the key.

        Returns:
            Storage key of the stored document.

        Raises:
            StorageError: If the document could not be stored.
        """
        ...

    @abstractmethod
    def url_for(self, key: str) -> str:
        """Return a URL from which the document can be downloaded.

        Raises:
            StorageError: If no URL can be produced for the key.
        """
        ...
