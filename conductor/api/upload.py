# =============================================================================
# Upload API — Document Text Extraction
# =============================================================================
#
# POST /api/upload accepts one file (multipart field `file`) and returns its
# text so the client can attach it to a question as `fileContent`.
# Nothing is stored: the bytes are read, converted and discarded.
#
# Status codes:
#   400 — no file or empty file
#   413 — larger than max_upload_bytes
#   415 — unsupported extension
#   422 — the extractor could not read the document
# =============================================================================

import logging

from fastapi import APIRouter, File, HTTPException, UploadFile

from conductor.config import settings
from conductor.exceptions import DocumentExtractionError, UnsupportedDocumentError
from conductor.models.responses import UploadResponse
from conductor.services.extractor import extract_text_async

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Documents"])


@router.post(
    "/upload",
    response_model=UploadResponse,
    summary="Extract text from a document",
    description=(
        "Upload a PDF, DOCX, TXT or MD file. Returns the extracted text "
        "(truncated) and the full text length."
    ),
)
async def upload_endpoint(
    file: UploadFile | None = File(default=None, description="Document to extract"),
) -> UploadResponse:
    if file is None or not file.filename:
        raise HTTPException(status_code=400, detail="No file uploaded")

    # Read one byte past the limit to detect oversize uploads
    data = await file.read(settings.max_upload_bytes + 1)
    if len(data) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File exceeds {settings.max_upload_bytes} bytes",
        )
    if not data:
        raise HTTPException(status_code=400, detail="Uploaded file is empty.")

    try:
        text = await extract_text_async(file.filename, data)
    except UnsupportedDocumentError as e:
        raise HTTPException(status_code=415, detail=str(e)) from e
    except DocumentExtractionError as e:
        logger.warning("Extraction failed for %s: %s", file.filename, e)
        raise HTTPException(status_code=422, detail=str(e)) from e

    logger.info(
        "Upload extracted: %s (%d bytes → %d chars)",
        file.filename, len(data), len(text),
    )

    return UploadResponse(
        filename=file.filename,
        text=text[:settings.max_upload_chars],
        length=len(text),
    )
