"""Document text extraction using Docling for PDF/DOCX, plus chat attachments."""

from __future__ import annotations

import logging
import mimetypes
from pathlib import Path

from core.errors import UnsupportedAttachmentError
from core.models import Attachment

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif"}
DOCUMENT_EXTENSIONS = {".pdf", ".doc", ".docx"}
TEXT_EXTENSIONS = {".txt"}


def load_file(file_path: str) -> str:
    """Load plain text from a document file.

    TXT files are read directly; PDF and Word files go through Docling's
    DocumentConverter and come back as markdown.
    """
    path = Path(file_path)

    if not path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    suffix = path.suffix.lower()
    if suffix in TEXT_EXTENSIONS:
        logger.info("Loading TXT file: %s", file_path)
        with open(file_path, "r", encoding="utf-8") as f:
            return f.read()

    if suffix not in DOCUMENT_EXTENSIONS:
        raise UnsupportedAttachmentError(f"Unsupported file type: {suffix or path.name}")

    # Docling is heavy, import only when a binary document shows up
    from docling.document_converter import DocumentConverter

    logger.info("Loading document via Docling: %s", file_path)
    converter = DocumentConverter()
    result = converter.convert(file_path)

    markdown_text = result.document.export_to_markdown()
    logger.info("Loaded %d characters from %s", len(markdown_text), file_path)

    return markdown_text


def load_attachment(file_path: str) -> Attachment:
    """Turn a chat attachment into an image or text Attachment."""
    path = Path(file_path)
    suffix = path.suffix.lower()

    if suffix in IMAGE_EXTENSIONS:
        if not path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")
        media_type = mimetypes.guess_type(path.name)[0] or f"image/{suffix.lstrip('.')}"
        return Attachment(
            kind="image",
            payload=path.read_bytes(),
            source_filename=path.name,
            media_type=media_type,
        )

    return Attachment(
        kind="text",
        payload=load_file(file_path),
        source_filename=path.name,
        media_type="text/plain",
    )
