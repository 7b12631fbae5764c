# =============================================================================
# Document Text Extraction — Docling + Plain Text
# =============================================================================
#
# Turns an uploaded file into plain text that can be attached to a question.
# The extension picks the strategy:
#
#   .pdf, .docx  → Docling DocumentConverter (reading order, tables as markdown)
#   .txt, .md    → UTF-8 decode (undecodable bytes replaced)
#   anything else → UnsupportedDocumentError
#
# DESIGN DECISION: Bytes in, text out. Uploads are never written to disk;
# Docling reads them from an in-memory DocumentStream.
#
# Conversion is CPU-bound. extract_text_async() runs it in a worker thread
# so the event loop keeps serving orchestration sessions meanwhile.
# =============================================================================

from __future__ import annotations

import asyncio
import logging
from io import BytesIO
from pathlib import PurePath

from docling.datamodel.base_models import DocumentStream, InputFormat
from docling.datamodel.pipeline_options import PdfPipelineOptions
from docling.document_converter import DocumentConverter, PdfFormatOption
from docling_core.types.doc.labels import DocItemLabel

from conductor.config import settings
from conductor.exceptions import DocumentExtractionError, UnsupportedDocumentError

logger = logging.getLogger(__name__)

DOCLING_EXTENSIONS = frozenset({".pdf", ".docx"})
PLAIN_TEXT_EXTENSIONS = frozenset({".txt", ".md"})
SUPPORTED_EXTENSIONS = DOCLING_EXTENSIONS | PLAIN_TEXT_EXTENSIONS

_TEXT_LABELS = frozenset({
    DocItemLabel.TITLE,
    DocItemLabel.SECTION_HEADER,
    DocItemLabel.TEXT,
    DocItemLabel.PARAGRAPH,
    DocItemLabel.LIST_ITEM,
    DocItemLabel.CAPTION,
    DocItemLabel.FOOTNOTE,
})


# ---------------------------------------------------------------------------
# Docling Converter — Lazy Singleton
# ---------------------------------------------------------------------------
# Initialization loads layout models (~2-5 seconds on first use); one
# converter is reused for every upload.
# ---------------------------------------------------------------------------

_converter: DocumentConverter | None = None


def _get_converter() -> DocumentConverter:
    """Lazily initialize and cache the Docling DocumentConverter."""
    global _converter
    if _converter is None:
        logger.info("Initializing Docling DocumentConverter (first use)...")

        pipeline_options = PdfPipelineOptions()
        pipeline_options.do_table_structure = True
        pipeline_options.do_ocr = settings.document_ocr_enabled

        _converter = DocumentConverter(
            allowed_formats=[InputFormat.PDF, InputFormat.DOCX],
            format_options={
                InputFormat.PDF: PdfFormatOption(
                    pipeline_options=pipeline_options,
                ),
            },
        )
        logger.info("Docling DocumentConverter initialized")
    return _converter


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def extract_text(filename: str, data: bytes) -> str:
    """
    Extract plain text from an uploaded file.

    Args:
        filename: Original file name; only its extension is used.
        data: Raw file bytes.

    Returns:
        The document text (untruncated).

    Raises:
        UnsupportedDocumentError: The extension has no strategy.
        DocumentExtractionError: Docling could not convert the document.
    """
    extension = PurePath(filename).suffix.lower()

    if extension in PLAIN_TEXT_EXTENSIONS:
        return data.decode("utf-8", errors="replace")

    if extension in DOCLING_EXTENSIONS:
        return _extract_with_docling(filename, data)

    raise UnsupportedDocumentError(
        f"Unsupported file type '{extension or filename}'. "
        f"Supported: {', '.join(sorted(SUPPORTED_EXTENSIONS))}"
    )


async def extract_text_async(filename: str, data: bytes) -> str:
    """extract_text() in a worker thread."""
    return await asyncio.to_thread(extract_text, filename, data)


# ---------------------------------------------------------------------------
# Internal Helpers
# ---------------------------------------------------------------------------


def _extract_with_docling(filename: str, data: bytes) -> str:
    """Convert with Docling and join text items and tables in reading order."""
    source = DocumentStream(name=PurePath(filename).name, stream=BytesIO(data))

    try:
        result = _get_converter().convert(source)
    except Exception as exc:
        raise DocumentExtractionError(
            f"Failed to extract text from '{filename}': {exc}"
        ) from exc

    document = result.document
    blocks: list[str] = []
    for item, _level in document.iterate_items():
        label = getattr(item, "label", None)
        if label == DocItemLabel.TABLE:
            table_md = _table_to_markdown(item, document)
            if table_md:
                blocks.append(table_md)
        elif label in _TEXT_LABELS:
            text = getattr(item, "text", "").strip()
            if text:
                blocks.append(text)

    text = "\n\n".join(blocks)
    logger.info(
        "Extracted '%s': %d blocks, %d chars", filename, len(blocks), len(text),
    )
    return text


def _table_to_markdown(table_item: object, document: object) -> str:
    """Markdown for a Docling table, or its plain text if export fails."""
    try:
        if hasattr(table_item, "export_to_markdown"):
            return table_item.export_to_markdown(doc=document)
    except Exception as exc:
        logger.warning("Table export to markdown failed: %s", exc)

    text = getattr(table_item, "text", "")
    return text.strip() if text else ""
