"""Contract text extraction.

Accepts PDF uploads (and plain text, for convenience) and returns the
extracted text with page and word counts. Image-only PDFs are rejected
before they reach the risk engine.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path

import pdfplumber

# Page estimate for sources without native pages
CHARS_PER_PAGE = 3000


class DocumentError(ValueError):
    """The upload is invalid or no text could be extracted from it."""


@dataclass
class ExtractedDocument:
    """Text pulled out of an uploaded contract."""

    filename: str
    pages: list[str] = field(default_factory=list)
    metadata: dict = field(default_factory=dict)

    @property
    def text(self) -> str:
        return "\n\n".join(self.pages)

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def word_count(self) -> int:
        return len(self.text.split())


class DocumentParser(ABC):
    """Base class for text extractors keyed by file extension."""

    supported_extensions: tuple[str, ...] = ()

    def can_handle(self, path: Path) -> bool:
        return path.suffix.lower() in self.supported_extensions

    @abstractmethod
    def parse(self, path: Path) -> ExtractedDocument: ...


class PDFParser(DocumentParser):
    """Extract text page by page with pdfplumber."""

    supported_extensions = (".pdf",)

    def parse(self, path: Path) -> ExtractedDocument:
        try:
            with pdfplumber.open(str(path)) as pdf:
                pages = [(page.extract_text() or "").strip() for page in pdf.pages]
                metadata = {"format": "pdf", "pdf_metadata": pdf.metadata or {}}
        except Exception as exc:
            raise DocumentError(f"Failed to extract text from PDF: {exc}") from exc

        if not any(pages):
            raise DocumentError(
                "No text content found in PDF. The file might be image-based or corrupted."
            )
        return ExtractedDocument(filename=path.name, pages=pages, metadata=metadata)


class TextParser(DocumentParser):
    """Plain text; pages are split on form feeds or estimated by length."""

    supported_extensions = (".txt",)

    def parse(self, path: Path) -> ExtractedDocument:
        text = path.read_text(encoding="utf-8", errors="replace")
        if not text.strip():
            raise DocumentError(f"No text content found in {path.name}.")

        if "\f" in text:
            pages = [p.strip() for p in text.split("\f") if p.strip()]
        else:
            count = max(1, math.ceil(len(text) / CHARS_PER_PAGE))
            pages = [
                text[i * CHARS_PER_PAGE : (i + 1) * CHARS_PER_PAGE].strip() for i in range(count)
            ]
        return ExtractedDocument(filename=path.name, pages=pages, metadata={"format": "text"})


_PARSERS: list[DocumentParser] = [PDFParser(), TextParser()]


def supported_extensions() -> list[str]:
    return sorted({ext for p in _PARSERS for ext in p.supported_extensions})


def get_parser(path: Path) -> DocumentParser:
    """Parser for ``path``'s extension.

    Raises:
        DocumentError: If no parser supports the extension.
    """
    for parser in _PARSERS:
        if parser.can_handle(path):
            return parser
    raise DocumentError(
        f"Invalid file extension '{path.suffix}'. "
        f"Supported formats: {', '.join(supported_extensions())}"
    )


def validate_upload(path: Path, max_bytes: int) -> None:
    """Check an uploaded file before extraction.

    Raises:
        DocumentError: Missing file, unsupported extension or oversized file.
    """
    if not path.is_file():
        raise DocumentError(f"File not found: {path}")
    get_parser(path)
    size = path.stat().st_size
    if size > max_bytes:
        raise DocumentError(
            f"File too large. Maximum size is {max_bytes // (1024 * 1024)}MB"
        )


def extract_text(path: str | Path, max_bytes: int = 10 * 1024 * 1024) -> ExtractedDocument:
    """Validate ``path`` and extract its text."""
    path = Path(path)
    validate_upload(path, max_bytes)
    return get_parser(path).parse(path)
