"""Text normalisation applied between extraction and chunking."""

from __future__ import annotations

import logging
import re
import unicodedata

logger = logging.getLogger(__name__)

_TAG_RE = re.compile(r"<[^>]*>")
_HSPACE_RE = re.compile(r"[ \t]+")
_BLANK_RUN_RE = re.compile(r"\n\s*\n\s*\n")
_SENTENCE_END_RE = re.compile(r"[.!?:]$")
_HEADING_RE = re.compile(r"^#+\s")
_DOTS_RE = re.compile(r"\.{4,}")
_BANGS_RE = re.compile(r"!{2,}")
_QUESTIONS_RE = re.compile(r"\?{2,}")


class ContentCleaner:
    """Normalise raw extracted text into something worth chunking.

    Steps, in order:
    - Replace HTML-like tags with a space.
    - NFKC unicode normalisation.
    - ``\\r\\n`` / ``\\r`` line endings to ``\\n``.
    - Collapse runs of spaces and tabs.
    - Collapse three or more blank-line runs to one paragraph break.
    - Drop lines that carry no meaning (see ``_is_meaningful``).
    - ``....`` to ``...``; repeated ``!`` / ``?`` to a single one.
    - Strip the result.

    Never raises; empty input gives empty output.
    """

    def clean_content(self, raw: str) -> str:
        content = _TAG_RE.sub(" ", raw)
        content = unicodedata.normalize("NFKC", content)
        content = content.replace("\r\n", "\n").replace("\r", "\n")
        content = _HSPACE_RE.sub(" ", content)
        content = _BLANK_RUN_RE.sub("\n\n", content)

        lines = [line for line in content.split("\n") if self._is_meaningful(line)]
        content = "\n".join(lines)

        content = _DOTS_RE.sub("...", content)
        content = _BANGS_RE.sub("!", content)
        content = _QUESTIONS_RE.sub("?", content)
        content = content.strip()

        logger.debug("Content cleaned: %d -> %d characters", len(raw), len(content))
        return content

    @staticmethod
    def _is_meaningful(line: str) -> bool:
        trimmed = line.strip()
        return (
            len(trimmed) > 2
            or bool(_SENTENCE_END_RE.search(trimmed))
            or bool(_HEADING_RE.match(trimmed))
        )
