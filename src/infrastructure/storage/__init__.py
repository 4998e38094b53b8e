# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Document storage for assignment attachments."""

from src.infrastructure.storage.base import (
    BlobStore,
    StorageError,
    UploadedFile,
    generate_key,
)
from src.infrastructure.storage.s3 import S3BlobStore

__all__ = [
    "BlobStore",
    "S3BlobStore",
    "StorageError",
    "UploadedFile",
    "generate_key",
]
