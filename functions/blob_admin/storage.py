"""
Blob storage abstraction for S3-compatible buckets and in-memory testing.

Each store is a namespace inside one bucket; a snapshot lives at
``<store_name>/<key>.json``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol
import json

import boto3
from botocore.config import Config
from botocore.exceptions import ClientError

from blob_admin.stores import blob_path


class BlobNotFoundError(KeyError):
    """Raised when no snapshot is stored under the requested key."""


class BlobStore(Protocol):
    """Defines the operations the API needs from the blob store."""

    def put_json(self, store_name: str, key: str, payload: Any) -> None:
        ...

    def get_json(self, store_name: str, key: str) -> Any:
        ...


@dataclass
class InMemoryBlobStore:
    """Test double for blob storage interactions."""

    stored_objects: dict = None

    def __post_init__(self):
        if self.stored_objects is None:
            self.stored_objects = {}

    def put_json(self, store_name: str, key: str, payload: Any) -> None:
        # Keep the serialized form to mimic real upload behavior
        self.stored_objects[blob_path(store_name, key)] = json.dumps(payload)

    def get_json(self, store_name: str, key: str) -> Any:
        path = blob_path(store_name, key)
        stored = self.stored_objects.get(path)
        if stored is None:
            raise BlobNotFoundError(path)
        return json.loads(stored)

    def reset(self) -> None:
        self.stored_objects.clear()


@dataclass
class S3BlobStore:
    """
    Blob store backed by an S3-compatible bucket.
    """

    bucket: str
    region: str
    endpoint: str
    access_key_id: str
    secret_access_key: str

    def __post_init__(self):
        config = Config(signature_version="s3v4")
        self._client = boto3.client(
            "s3",
            endpoint_url=self.endpoint or None,
            region_name=self.region or None,
            aws_access_key_id=self.access_key_id or None,
            aws_secret_access_key=self.secret_access_key or None,
            config=config,
        )

    def put_json(self, store_name: str, key: str, payload: Any) -> None:
        body = json.dumps(payload).encode("utf-8")
        self._client.put_object(
            Bucket=self.bucket,
            Key=blob_path(store_name, key),
            Body=body,
            ContentType="application/json",
        )

    def get_json(self, store_name: str, key: str) -> Any:
        path = blob_path(store_name, key)
        try:
            response = self._client.get_object(Bucket=self.bucket, Key=path)
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") in ("NoSuchKey", "404"):
                raise BlobNotFoundError(path) from exc
            raise
        return json.loads(response["Body"].read())
