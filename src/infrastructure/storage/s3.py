# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""S3 blob store.

Stores assignment documents in an S3 (or S3-compatible) bucket using
boto3. boto3 is blocking, so calls are moved off the event loop with
asyncio.to_thread.

Configuration (via environment variables):
- STORAGE_BUCKET_NAME: Target bucket
- STORAGE_REGION: Bucket region
- STORAGE_ENDPOINT_URL: Custom endpoint for R2/MinIO
- STORAGE_ACCESS_KEY_ID / STORAGE_SECRET_ACCESS_KEY: Optional credentials
- STORAGE_PRESIGN_URLS: Return presigned download URLs
"""

import asyncio
import logging
import threading
from typing import Any

import boto3
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from src.core.config.settings import StorageSettings
from src.infrastructure.storage.base import (
    BlobStore,
    StorageError,
    UploadedFile,
    generate_key,
)

logger = logging.getLogger(__name__)


class S3BlobStore(BlobStore):
    """BlobStore backed by an S3 bucket.

    The boto3 client is created lazily on first use so that building the
    store never touches the network or credential chain. Creation resolves
    credentials and reads botocore data files, so it happens on a worker
    thread together with the call that needs it.
    """

    def __init__(self, settings: StorageSettings, client: Any | None = None) -> None:
        """Initialize the store.

        Args:
            settings: Storage settings.
            client: Preconfigured boto3 S3 client (mainly for tests).
        """
        self._settings = settings
        self._client = client
        self._client_lock = threading.Lock()

    @property
    def bucket(self) -> str:
        """Name of the target bucket."""
        return self._settings.bucket_name

    def _get_client(self) -> Any:
        with self._client_lock:
            if self._client is None:
                access_key = self._settings.access_key_id
                secret_key = self._settings.secret_access_key
                self._client = boto3.client(
                    "s3",
                    region_name=self._settings.region,
                    endpoint_url=self._settings.endpoint_url,
                    aws_access_key_id=access_key.get_secret_value() if access_key else None,
                    aws_secret_access_key=secret_key.get_secret_value() if secret_key else None,
                    config=Config(signature_version="s3v4"),
                )
            return self._client

    def _put_object(self, key: str, file: UploadedFile) -> None:
        self._get_client().put_object(
            Bucket=self.bucket,
            Key=key,
            Body=file.content,
            ContentType=file.content_type or "application/octet-stream",
            ContentLength=file.size,
        )

    async def upload(self, file: UploadedFile, prefix: str) -> str:
        """Upload a document to the bucket.

        Args:
            file: Document to store.
            prefix: Key prefix.

        Returns:
            Generated storage key.

        Raises:
            StorageError: If the upload fails.
        """
        key = generate_key(prefix, file.filename)

        try:
            await asyncio.to_thread(self._put_object, key, file)
        except (BotoCoreError, ClientError) as e:
            logger.error("Upload of %s to bucket %s failed: %s", key, self.bucket, str(e))
            raise StorageError(f"File upload failed: {e}", key=key) from e

        logger.info("Uploaded %s (%d bytes) to bucket %s", key, file.size, self.bucket)
        return key

    def url_for(self, key: str) -> str:
        """Return the download URL for a stored document.

        Public bucket URLs are returned unless presigning is enabled.
        Presigning may build the client, so async callers should run this
        in a worker thread.

        Raises:
            StorageError: If a presigned URL cannot be generated.
        """
        if not self._settings.presign_urls:
            return f"https://{self.bucket}.s3.amazonaws.com/{key}"

        try:
            return self._get_client().generate_presigned_url(
                ClientMethod="get_object",
                Params={"Bucket": self.bucket, "Key": key},
                ExpiresIn=self._settings.presign_expiry_seconds,
            )
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"Could not generate download URL: {e}", key=key) from e
