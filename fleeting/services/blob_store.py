"""Payload storage for uploads.

Two backends share the ``BlobStore`` contract: a local directory for single
host deployments and tests, and a Google Cloud Storage bucket.
"""
import logging
import os
from abc import ABC, abstractmethod
from functools import lru_cache
from pathlib import Path

from google.api_core import exceptions as gcs_errors
from google.cloud import storage

from fleeting.errors import NotFound, UpstreamError

logger = logging.getLogger(__name__)

BLOB_BACKEND = os.getenv("BLOB_BACKEND", "local")
BLOB_ROOT = os.getenv("BLOB_ROOT", "/tmp/fleeting-blobs")
GCS_BUCKET_NAME = os.getenv("GCS_BUCKET_NAME", "")


class BlobStore(ABC):
    @abstractmethod
    def put(self, name: str, data: bytes, content_type: str = "application/octet-stream") -> str:
        """Store ``data`` under ``name`` and return the handle to reach it."""

    @abstractmethod
    def get(self, name: str) -> bytes:
        """Return the stored bytes. Raises NotFound when absent."""

    @abstractmethod
    def delete(self, name: str) -> None:
        """Remove the blob. Raises NotFound when absent."""


class LocalBlobStore(BlobStore):
    def __init__(self, root: str = BLOB_ROOT):
        self.root = Path(root).resolve()
        self.root.mkdir(parents=True, exist_ok=True)

    def _path(self, name: str) -> Path:
        if not name or not name.strip():
            raise ValueError("blob name cannot be empty")
        path = (self.root / name).resolve()
        if self.root not in path.parents:
            raise ValueError(f"blob name escapes storage root: {name!r}")
        return path

    def put(self, name, data, content_type="application/octet-stream"):
        path = self._path(name)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(data)
        except OSError as e:
            raise UpstreamError(f"Failed to store blob {name}: {e}") from e
        return str(path)

    def get(self, name):
        path = self._path(name)
        try:
            return path.read_bytes()
        except FileNotFoundError:
            raise NotFound(f"No blob named {name}")
        except OSError as e:
            raise UpstreamError(f"Failed to read blob {name}: {e}") from e

    def delete(self, name):
        path = self._path(name)
        try:
            path.unlink()
        except FileNotFoundError:
            raise NotFound(f"No blob named {name}")
        except OSError as e:
            raise UpstreamError(f"Failed to delete blob {name}: {e}") from e
        # drop the per-token directory once it is empty
        if path.parent != self.root:
            try:
                path.parent.rmdir()
            except OSError:
                pass


class GCSBlobStore(BlobStore):
    def __init__(self, bucket_name: str = GCS_BUCKET_NAME, client=None):
        if not bucket_name:
            raise RuntimeError("GCS_BUCKET_NAME is not set")
        self.client = client or storage.Client()
        self.bucket = self.client.bucket(bucket_name)

    def put(self, name, data, content_type="application/octet-stream"):
        blob = self.bucket.blob(name)
        try:
            blob.upload_from_string(data, content_type=content_type)
        except gcs_errors.GoogleAPIError as e:
            raise UpstreamError(f"Failed to upload blob {name}: {e}") from e
        return f"gs://{self.bucket.name}/{name}"

    def get(self, name):
        try:
            return self.bucket.blob(name).download_as_bytes()
        except gcs_errors.NotFound:
            raise NotFound(f"No blob named {name}")
        except gcs_errors.GoogleAPIError as e:
            raise UpstreamError(f"Failed to download blob {name}: {e}") from e

    def delete(self, name):
        try:
            self.bucket.blob(name).delete()
        except gcs_errors.NotFound:
            raise NotFound(f"No blob named {name}")
        except gcs_errors.GoogleAPIError as e:
            raise UpstreamError(f"Failed to delete blob {name}: {e}") from e


@lru_cache(maxsize=1)
def get_blob_store() -> BlobStore:
    if BLOB_BACKEND == "gcs":
        logger.info("Using GCS bucket %s for uploads", GCS_BUCKET_NAME)
        return GCSBlobStore(GCS_BUCKET_NAME)
    logger.info("Using local directory %s for uploads", BLOB_ROOT)
    return LocalBlobStore(BLOB_ROOT)
