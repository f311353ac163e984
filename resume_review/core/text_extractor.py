"""
Format dispatch for uploaded documents.

Normalizes plain text, Word, and PDF uploads into one ExtractedText blob. This
is the only stage that touches the input bytes; everything downstream works on
the normalized text.
"""

import logging
from typing import Literal, Optional

from resume_review.config import Settings, get_settings
from resume_review.core.docx_extractor import extract_docx_text
from resume_review.core.errors import DecodingFailure, DocumentTooLarge, EmptyExtraction, UnsupportedFormat
from resume_review.core.pdf_extractor import extract_pdf_text
from resume_review.core.schemas import ExtractedText, RawDocument
from resume_review.core.text_normalization import normalize_text, printable_length

logger = logging.getLogger(__name__)

DocumentFormat = Literal["text", "docx", "pdf"]

TEXT_MEDIA_TYPES = {"text/plain"}
WORD_MEDIA_TYPES = {
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/msword",
}
PDF_MEDIA_TYPES = {"application/pdf"}

EXTENSION_FORMATS = {
    ".txt": "text",
    ".docx": "docx",
    ".doc": "docx",
    ".pdf": "pdf",
}


def detect_format(filename: str, media_type: str) -> DocumentFormat:
    """Resolve the decoder from the file extension first, then the declared media type."""
    name = (filename or "").lower()
    for ext, fmt in EXTENSION_FORMATS.items():
        if name.endswith(ext):
            return fmt

    mt = (media_type or "").lower().split(";")[0].strip()
    if mt in TEXT_MEDIA_TYPES:
        return "text"
    if mt in WORD_MEDIA_TYPES:
        return "docx"
    if mt in PDF_MEDIA_TYPES:
        return "pdf"

    raise UnsupportedFormat(f"Unsupported file type: {media_type or filename or 'unknown'}")


def extract(raw: RawDocument, settings: Optional[Settings] = None) -> ExtractedText:
    """
    Decode a RawDocument into normalized text.

    Raises:
        DocumentTooLarge: content exceeds settings.max_upload_bytes
        UnsupportedFormat: not plain text, Word, or PDF
        DecodingFailure: the format decoder itself failed
        EmptyExtraction: decoding worked but produced too little text
    """
    settings = settings or get_settings()

    if len(raw.content) > settings.max_upload_bytes:
        raise DocumentTooLarge(
            f"File size {len(raw.content)} bytes exceeds the {settings.max_upload_bytes} byte limit"
        )

    fmt = detect_format(raw.filename, raw.media_type)
    page_starts = []

    try:
        if fmt == "pdf":
            text, page_starts = extract_pdf_text(raw.content)
        elif fmt == "docx":
            text = extract_docx_text(raw.content)
        else:
            text = raw.content.decode("utf-8", errors="replace")
    except Exception as exc:
        logger.warning(f"Decoder failed for {raw.filename!r} ({fmt}): {exc}", exc_info=True)
        raise DecodingFailure(f"Failed to decode {fmt} document: {exc}") from exc

    text = normalize_text(text)

    printable = printable_length(text)
    if printable < settings.min_text_chars:
        logger.info(f"Empty extraction for {raw.filename!r}: {printable} printable characters")
        raise EmptyExtraction(
            f"Extracted {printable} printable characters; at least {settings.min_text_chars} required"
        )

    logger.debug(f"Extracted {len(text)} characters from {raw.filename!r} ({fmt})")
    return ExtractedText(text=text, source=fmt, page_starts=page_starts)
