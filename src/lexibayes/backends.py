"""Persistence backends for serialized classifiers.

Both backends store the opaque string produced by
:meth:`lexibayes.bayes.BayesClassifier.to_json` and do blocking I/O in a worker
thread so callers on the event loop are only suspended, never blocked.
"""

from __future__ import annotations

import asyncio
import logging
import os
from enum import Enum
from typing import Any, Optional, Union

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from bs4 import UnicodeDammit

from .config import get_settings
from .exceptions import BackendIOError, ClassifierNotFoundError, InvalidSourceError

logger = logging.getLogger(__name__)

_MISSING_KEY_CODES = {"NoSuchKey", "404", "NotFound"}


class BackendKind(str, Enum):
    """Where a classifier is loaded from or saved to."""
    BLOB = "blob"
    FS = "fs"

    @classmethod
    def parse(cls, value: Union["BackendKind", str, None]) -> "BackendKind":
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise InvalidSourceError(f"Unable to determine classifier source: {value!r}") from None


def decode_payload(raw_data: bytes) -> str:
    """Decode stored bytes as UTF-8, falling back to encoding detection."""
    try:
        return raw_data.decode("utf-8", "strict")
    except UnicodeError:
        return UnicodeDammit(raw_data).unicode_markup  # type: ignore[return-value]


class FileSystemBackend:
    """Stores each classifier as ``<directory>/<name>.json``."""

    kind = BackendKind.FS

    def __init__(self, directory: Optional[str] = None) -> None:
        self.directory = directory if directory is not None else get_settings().classifier_dir

    def path_for(self, name: str) -> str:
        return os.path.join(self.directory, f"{name}.json")

    def _read(self, name: str) -> str:
        filepath = self.path_for(name)
        try:
            with open(filepath, "rb") as f:
                raw_data = f.read()
        except FileNotFoundError as e:
            raise ClassifierNotFoundError(f"No classifier file at {filepath}") from e
        except OSError as e:
            raise BackendIOError(f"Error reading file {filepath}: {e}") from e
        return decode_payload(raw_data)

    def _write(self, name: str, payload: str) -> None:
        filepath = self.path_for(name)
        try:
            os.makedirs(os.path.dirname(filepath) or ".", exist_ok=True)
            with open(filepath, "w", encoding="utf-8", newline="") as f:
                f.write(payload)
        except OSError as e:
            raise BackendIOError(f"Error writing file {filepath}: {e}") from e

    async def load(self, name: str) -> str:
        payload = await asyncio.to_thread(self._read, name)
        logger.debug("Loaded classifier %s from %s", name, self.path_for(name))
        return payload

    async def save(self, name: str, payload: str) -> None:
        await asyncio.to_thread(self._write, name, payload)
        logger.info("Saved classifier %s to %s", name, self.path_for(name))


class BlobBackend:
    """Stores each classifier as an S3 object keyed ``<prefix><name>``."""

    kind = BackendKind.BLOB

    def __init__(
        self,
        bucket: Optional[str] = None,
        prefix: Optional[str] = None,
        client: Any = None,
        region_name: Optional[str] = None,
    ) -> None:
        settings = get_settings()
        self.bucket = bucket or settings.blob_bucket
        if not self.bucket:
            raise ValueError("BlobBackend requires a bucket (set LEXIBAYES_BLOB_BUCKET)")
        self.prefix = prefix if prefix is not None else settings.blob_prefix
        self.region_name = region_name or settings.aws_region
        self._client = client

    @property
    def client(self) -> Any:
        """Lazily created boto3 S3 client."""
        if self._client is None:
            self._client = boto3.client("s3", region_name=self.region_name)
        return self._client

    def key_for(self, name: str) -> str:
        return f"{self.prefix}{name}"

    def _download(self, name: str) -> str:
        key = self.key_for(name)
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=key)
            raw_data = response["Body"].read()
        except ClientError as e:
            code = str(e.response.get("Error", {}).get("Code", ""))
            if code in _MISSING_KEY_CODES:
                raise ClassifierNotFoundError(f"No classifier blob s3://{self.bucket}/{key}") from e
            raise BackendIOError(f"Error downloading s3://{self.bucket}/{key}: {e}") from e
        except BotoCoreError as e:
            raise BackendIOError(f"Error downloading s3://{self.bucket}/{key}: {e}") from e
        return decode_payload(raw_data)

    def _upload(self, name: str, payload: str) -> None:
        key = self.key_for(name)
        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=payload.encode("utf-8"),
                ContentType="application/json",
            )
        except (ClientError, BotoCoreError) as e:
            raise BackendIOError(f"Error uploading s3://{self.bucket}/{key}: {e}") from e

    async def load(self, name: str) -> str:
        payload = await asyncio.to_thread(self._download, name)
        logger.debug("Downloaded classifier %s from bucket %s", name, self.bucket)
        return payload

    async def save(self, name: str, payload: str) -> None:
        await asyncio.to_thread(self._upload, name, payload)
        logger.info("Uploaded classifier %s to bucket %s", name, self.bucket)
