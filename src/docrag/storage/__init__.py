"""docrag storage layer."""

from docrag.storage.blob import BlobStore, LocalBlobStore
from docrag.storage.repository import DocumentRepository

__all__ = ["BlobStore", "DocumentRepository", "LocalBlobStore"]
