"""Upload flow — validate, store the original, ingest, persist, record status.

Progress (``on_progress(percent, stage)``):
  10        original stored
  30        content extracted
  40        content cleaned
  40 → 90   embedding batches
  95        embeddings + content stored
  100       done

A failure after validation rewrites the metadata record with
``status="error"`` and re-raises; nothing is retried.
"""

from __future__ import annotations

import asyncio
import hashlib
import logging
from collections.abc import Callable
from datetime import datetime, timezone

from docrag.api.client import JsonPoster
from docrag.errors import UploadValidationError
from docrag.ingest.extractor import MIME_DOC, MIME_DOCX, MIME_PDF, SourceFile
from docrag.ingest.processor import DocumentProcessor
from docrag.models import UploadRecord
from docrag.storage.repository import DocumentRepository

logger = logging.getLogger(__name__)

SUPPORTED_MIME_TYPES: frozenset[str] = frozenset(
    [
        "text/plain",
        MIME_PDF,
        MIME_DOC,
        MIME_DOCX,
        "text/markdown",
        "text/csv",
        "application/json",
    ]
)
MAX_FILE_SIZE = 10 * 1024 * 1024  # 10 MB

UploadProgress = Callable[[float, str], None]


def content_key(data: bytes, length: int = 20) -> str:
    """Document id derived from the file bytes (SHA-256 prefix)."""
    return hashlib.sha256(data).hexdigest()[:length]


def validate_upload(file: SourceFile, max_file_size: int = MAX_FILE_SIZE) -> None:
    """Reject unsupported or oversized files before any processing.

    Raises:
        UploadValidationError: With a message naming the problem.
    """
    if file.size > max_file_size:
        limit_mb = max_file_size / (1024 * 1024)
        raise UploadValidationError(f"File too large. Maximum size is {limit_mb:g}MB")
    if file.mime_type not in SUPPORTED_MIME_TYPES:
        raise UploadValidationError(f"Unsupported file type: {file.mime_type}")


class DocumentUploader:
    """Take a file from disk to a stored, searchable document.

    Args:
        processor: Ingestion pipeline.
        repository: Where originals, embeddings, content and records go.
        api_client: Client for embedding requests.
        max_file_size: Upload size limit in bytes.
    """

    def __init__(
        self,
        processor: DocumentProcessor,
        repository: DocumentRepository,
        api_client: JsonPoster,
        max_file_size: int = MAX_FILE_SIZE,
    ) -> None:
        self._processor = processor
        self._repo = repository
        self._api_client = api_client
        self._max_file_size = max_file_size

    async def upload(
        self,
        file: SourceFile,
        document_id: str | None = None,
        on_progress: UploadProgress | None = None,
    ) -> UploadRecord:
        """Ingest *file* and return its final ``ready`` record.

        The document id defaults to a key derived from the file content, so
        uploading the same bytes twice replaces the earlier copy instead of
        creating a duplicate.
        """
        validate_upload(file, self._max_file_size)

        def report(percent: float, stage: str) -> None:
            if on_progress is not None:
                on_progress(percent, stage)

        data = await asyncio.to_thread(file.path.read_bytes)
        doc_id = document_id or content_key(data)

        record = UploadRecord(
            original_file_name=file.name,
            document_id=doc_id,
            file_size=file.size,
            mime_type=file.mime_type,
            uploaded_at=datetime.now(timezone.utc).isoformat(),
        )

        await self._repo.reset_document(doc_id)
        await self._repo.save_record(record)

        try:
            await self._repo.save_original(doc_id, file.name, data)
            report(10, "uploaded")

            raw = await self._processor.extract_content(file)
            report(30, "extracted")

            cleaned = self._processor.clean_content(raw)
            report(40, "cleaned")

            def on_embedding(completed: int, total: int) -> None:
                report(40 + completed / total * 50, "embedding")

            embedding = await self._processor.generate_embeddings(
                cleaned, doc_id, file.name, self._api_client, on_embedding
            )

            await self._repo.save_embedding(embedding)
            await self._repo.save_content(doc_id, cleaned)
            report(95, "stored")
        except Exception as exc:
            logger.info("Processing failed for %s: %s", file.name, exc)
            record.status = "error"
            record.error = str(exc)
            await self._repo.save_record(record)
            raise

        record.status = "ready"
        record.has_embeddings = True
        await self._repo.save_record(record)
        report(100, "done")
        logger.info("Document %s ready (%s)", doc_id, file.name)
        return record
