"""Content extraction — file on disk to plain text.

Dispatch by MIME type (falling back to the file extension):
  text/plain, text/markdown, text/csv, application/json → UTF-8 text
  text/html                                            → BeautifulSoup + html2text
  application/pdf                                      → pypdf, or backend /api/extract/pdf
  Word (.docx)                                         → python-docx, or backend /api/extract/docx
  Word (.doc, legacy)                                  → backend /api/extract/docx only

Blocking parsers run in a worker thread. Parse failures surface as
``ExtractionError``; backend transport errors propagate unchanged. No
placeholder text is ever returned.
"""

from __future__ import annotations

import asyncio
import base64
import logging
from dataclasses import dataclass
from pathlib import Path

import docx
import html2text
import httpx
import pypdf
from bs4 import BeautifulSoup

from docrag.api.client import JsonPoster
from docrag.api.responses import parse_extraction_response
from docrag.errors import ApiError, ExtractionError

logger = logging.getLogger(__name__)

MIME_PDF = "application/pdf"
MIME_DOC = "application/msword"
MIME_DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

_EXTENSION_MIME: dict[str, str] = {
    ".txt": "text/plain",
    ".text": "text/plain",
    ".md": "text/markdown",
    ".markdown": "text/markdown",
    ".csv": "text/csv",
    ".json": "application/json",
    ".html": "text/html",
    ".htm": "text/html",
    ".pdf": MIME_PDF,
    ".doc": MIME_DOC,
    ".docx": MIME_DOCX,
}

_FILE_TYPE_LABELS: dict[str, str] = {
    "pdf": "PDF Document",
    "docx": "Word Document",
    "doc": "Word Document",
    "txt": "Text Document",
    "md": "Markdown Document",
    "json": "JSON File",
    "csv": "CSV File",
}

# html2text converter
_h2t = html2text.HTML2Text()
_h2t.ignore_links = True
_h2t.ignore_images = True
_h2t.body_width = 0


@dataclass(frozen=True)
class SourceFile:
    """A file handed to the ingestion pipeline.

    Attributes:
        path: Location of the file on disk.
        name: Original file name (kept for display and metadata).
        mime_type: Declared MIME type.
        size: Size in bytes.
    """

    path: Path
    name: str
    mime_type: str
    size: int

    @classmethod
    def from_path(cls, path: Path, mime_type: str | None = None) -> SourceFile:
        path = Path(path)
        return cls(
            path=path,
            name=path.name,
            mime_type=mime_type or guess_mime_type(path.name),
            size=path.stat().st_size,
        )


def guess_mime_type(file_name: str) -> str:
    """MIME type for *file_name* from its extension; unknown → octet-stream."""
    return _EXTENSION_MIME.get(Path(file_name).suffix.lower(), "application/octet-stream")


def file_type_from_name(file_name: str) -> str:
    """Human-readable document type label for *file_name*."""
    ext = file_name.rsplit(".", 1)[-1].lower() if "." in file_name else ""
    return _FILE_TYPE_LABELS.get(ext, "Unknown Document")


class ContentExtractor:
    """Extract plain text from a ``SourceFile``.

    Args:
        api_client: When given, PDF and Word files are sent to the backend's
            extraction routes instead of being parsed locally.
    """

    def __init__(self, api_client: JsonPoster | None = None) -> None:
        self._api_client = api_client

    async def extract_content(self, file: SourceFile) -> str:
        try:
            return await self._dispatch(file)
        except (ExtractionError, ApiError, httpx.HTTPError):
            raise
        except Exception as exc:
            logger.info("Content extraction failed for %s: %s", file.name, exc)
            raise ExtractionError(f"Failed to extract content from {file.name}: {exc}") from exc

    async def _dispatch(self, file: SourceFile) -> str:
        mime = file.mime_type or guess_mime_type(file.name)
        lower_name = file.name.lower()

        if mime == "text/html":
            html = await self._read_text(file.path)
            return self._html_to_text(html)
        if mime.startswith("text/") or "json" in mime or "csv" in mime:
            return await self._read_text(file.path)
        if "pdf" in mime or lower_name.endswith(".pdf"):
            if self._api_client is not None:
                return await self._extract_remote(self._api_client, file, "pdf")
            return await asyncio.to_thread(self._extract_pdf, file.path)
        if "word" in mime or "msword" in mime or lower_name.endswith((".docx", ".doc")):
            if self._api_client is not None:
                return await self._extract_remote(self._api_client, file, "docx")
            if lower_name.endswith(".doc") or mime == MIME_DOC:
                raise ExtractionError(
                    f"Legacy Word document '{file.name}' needs the backend extractor. "
                    "Save it as .docx or configure api.base_url."
                )
            return await asyncio.to_thread(self._extract_docx, file.path)
        return await self._read_text(file.path)

    # ------------------------------------------------------------------
    # Local extraction
    # ------------------------------------------------------------------

    @staticmethod
    async def _read_text(path: Path) -> str:
        content = await asyncio.to_thread(path.read_text, encoding="utf-8", errors="replace")
        if not content.strip():
            raise ExtractionError("File appears to be empty")
        return content

    @staticmethod
    def _extract_pdf(path: Path) -> str:
        """Extract all page text; pages without text (scans) are skipped."""
        reader = pypdf.PdfReader(str(path))
        parts: list[str] = []
        for page in reader.pages:
            stripped = (page.extract_text() or "").strip()
            if stripped:
                parts.append(stripped)
        return "\n\n".join(parts)

    @staticmethod
    def _extract_docx(path: Path) -> str:
        document = docx.Document(str(path))
        paragraphs = [p.text.strip() for p in document.paragraphs if p.text.strip()]
        if not paragraphs:
            raise ExtractionError("No text content found in Word document")
        return "\n\n".join(paragraphs)

    @staticmethod
    def _html_to_text(html: str) -> str:
        soup = BeautifulSoup(html, "html.parser")
        for tag in soup.find_all(["script", "style", "nav", "footer", "head"]):
            tag.decompose()
        return _h2t.handle(str(soup)).strip()

    # ------------------------------------------------------------------
    # Backend extraction
    # ------------------------------------------------------------------

    async def _extract_remote(self, client: JsonPoster, file: SourceFile, kind: str) -> str:
        data = await asyncio.to_thread(file.path.read_bytes)
        logger.debug("Backend %s extraction: %s (%d bytes)", kind, file.name, len(data))
        response = await client.post(
            f"/api/extract/{kind}",
            {"fileName": file.name, "fileData": base64.b64encode(data).decode("ascii")},
        )
        content = parse_extraction_response(response)
        if not content.strip():
            raise ExtractionError(f"No text content found in {file.name}")
        return content
