"""Repository for uploaded documents on top of a ``BlobStore``.

Layout, one folder per document:

  database/<namespace>/<documentId>/<original file name>
  database/<namespace>/<documentId>/<documentId>_embeddings.json
  database/<namespace>/<documentId>/<documentId>_content.txt
  database/<namespace>/<documentId>/<documentId>_metadata.json

Re-ingesting a document id replaces its folder wholesale (``reset_document``
followed by fresh writes), which makes every write an upsert keyed by the
document id.
"""

from __future__ import annotations

import json
import logging
from pathlib import PurePosixPath

from docrag.ingest.extractor import guess_mime_type
from docrag.models import DocumentEmbedding, UploadRecord
from docrag.storage.blob import BlobStore

logger = logging.getLogger(__name__)

_EMBEDDINGS_SUFFIX = "_embeddings.json"
_CONTENT_SUFFIX = "_content.txt"
_METADATA_SUFFIX = "_metadata.json"


class DocumentRepository:
    """Typed access to stored originals, embeddings, content and records.

    Args:
        store: Blob store holding all objects.
        namespace: Per-user (or per-tenant) folder under ``database/``.
    """

    def __init__(self, store: BlobStore, namespace: str = "local") -> None:
        if not namespace or "/" in namespace or namespace in (".", ".."):
            raise ValueError(f"Invalid namespace '{namespace}'")
        self._store = store
        self.namespace = namespace

    @property
    def prefix(self) -> str:
        return f"database/{self.namespace}"

    def folder(self, document_id: str) -> str:
        if not document_id or "/" in document_id or document_id in (".", ".."):
            raise ValueError(f"Invalid document id '{document_id}'")
        return f"{self.prefix}/{document_id}"

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def reset_document(self, document_id: str) -> None:
        """Remove everything stored for *document_id* (no-op if absent)."""
        await self._store.delete_prefix(self.folder(document_id))

    async def save_original(self, document_id: str, file_name: str, data: bytes) -> str:
        name = PurePosixPath(file_name).name
        return await self._store.upload_bytes(data, f"{self.folder(document_id)}/{name}")

    async def save_embedding(self, embedding: DocumentEmbedding) -> str:
        doc_id = embedding.document_id
        payload = json.dumps(embedding.to_dict(), ensure_ascii=False, indent=2)
        return await self._store.upload_text(payload, self._path(doc_id, _EMBEDDINGS_SUFFIX))

    async def save_content(self, document_id: str, content: str) -> str:
        return await self._store.upload_text(content, self._path(document_id, _CONTENT_SUFFIX))

    async def save_record(self, record: UploadRecord) -> str:
        payload = json.dumps(record.to_dict(), ensure_ascii=False)
        return await self._store.upload_text(
            payload, self._path(record.document_id, _METADATA_SUFFIX)
        )

    async def has_document(self, document_id: str) -> bool:
        return bool(await self._store.list_files(self.folder(document_id)))

    async def delete_document(self, document_id: str) -> bool:
        """Delete the document folder. Returns False if nothing was stored."""
        if not await self.has_document(document_id):
            return False
        await self._store.delete_prefix(self.folder(document_id))
        logger.info("Deleted document %s", document_id)
        return True

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_record(self, document_id: str) -> UploadRecord | None:
        raw = await self._store.get_text(self._path(document_id, _METADATA_SUFFIX))
        return UploadRecord.from_dict(json.loads(raw)) if raw is not None else None

    async def get_embedding(self, document_id: str) -> DocumentEmbedding | None:
        raw = await self._store.get_text(self._path(document_id, _EMBEDDINGS_SUFFIX))
        return DocumentEmbedding.from_dict(json.loads(raw)) if raw is not None else None

    async def get_content(self, document_id: str) -> str | None:
        return await self._store.get_text(self._path(document_id, _CONTENT_SUFFIX))

    async def list_documents(self) -> list[UploadRecord]:
        """Return one record per stored document, newest upload first.

        Folders written before records existed get a record inferred from
        their files (status ``ready``).
        """
        records: list[UploadRecord] = []
        for folder in await self._store.list_folders(self.prefix):
            doc_id = PurePosixPath(folder).name
            record = await self.get_record(doc_id)
            if record is None:
                record = await self._infer_record(doc_id)
            if record is not None:
                records.append(record)
        records.sort(key=lambda r: r.uploaded_at, reverse=True)
        return records

    async def load_embeddings(self) -> list[DocumentEmbedding]:
        """Load every stored ``DocumentEmbedding`` in this namespace."""
        embeddings: list[DocumentEmbedding] = []
        for folder in await self._store.list_folders(self.prefix):
            embedding = await self.get_embedding(PurePosixPath(folder).name)
            if embedding is not None:
                embeddings.append(embedding)
        return embeddings

    async def storage_usage(self) -> tuple[int, int]:
        """Return ``(file_count, total_bytes)`` for this namespace."""
        return await self._store.usage(self.prefix)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _path(self, document_id: str, suffix: str) -> str:
        return f"{self.folder(document_id)}/{document_id}{suffix}"

    async def _infer_record(self, document_id: str) -> UploadRecord | None:
        files = [PurePosixPath(p).name for p in await self._store.list_files(self.folder(document_id))]
        if not files:
            return None
        generated = {f"{document_id}{s}" for s in (_EMBEDDINGS_SUFFIX, _CONTENT_SUFFIX, _METADATA_SUFFIX)}
        originals = [f for f in files if f not in generated]
        name = originals[0] if originals else document_id
        return UploadRecord(
            original_file_name=name,
            document_id=document_id,
            file_size=0,
            mime_type=guess_mime_type(name),
            uploaded_at="",
            status="ready",
            has_embeddings=f"{document_id}{_EMBEDDINGS_SUFFIX}" in files,
        )
