import logging

from fastapi import APIRouter, UploadFile, File, HTTPException

from resume_review.config import get_settings
from resume_review.core.errors import DecodingFailure, DocumentTooLarge, EmptyExtraction, UnsupportedFormat
from resume_review.core.pipeline import parse_document
from resume_review.core.schemas import ParseReviewData, RawDocument

logger = logging.getLogger(__name__)

router = APIRouter(tags=["parse"])

UPLOAD_ERROR_RESPONSES = {
    400: {"description": "Empty file uploaded"},
    413: {"description": "File exceeds the upload size limit"},
    415: {"description": "Unsupported file format"},
    422: {"description": "File has no extractable text or could not be decoded"},
}


async def parse_upload(file: UploadFile) -> ParseReviewData:
    """Read an upload and run the parse pipeline, mapping extraction errors to HTTP errors."""
    # Reject on the declared size before reading the body into memory
    limit = get_settings().max_upload_bytes
    if file.size is not None and file.size > limit:
        raise HTTPException(
            status_code=413,
            detail=f"File size {file.size} bytes exceeds the {limit} byte limit",
        )

    content = await file.read()
    if not content:
        raise HTTPException(status_code=400, detail="Empty file uploaded.")

    raw = RawDocument(
        content=content,
        media_type=(file.content_type or "").lower(),
        filename=file.filename or "",
    )
    try:
        return parse_document(raw)
    except DocumentTooLarge as exc:
        raise HTTPException(status_code=413, detail=exc.detail)
    except UnsupportedFormat as exc:
        raise HTTPException(status_code=415, detail=exc.detail)
    except (EmptyExtraction, DecodingFailure) as exc:
        # Same message for both; DecodingFailure was already logged with its traceback
        logger.info(f"Rejected {raw.filename!r}: {exc.detail}")
        raise HTTPException(status_code=422, detail=exc.user_message)


@router.post(
    "/parse",
    response_model=ParseReviewData,
    summary="Parse Resume",
    description="Extract sections and fields from a resume file (DOCX, PDF, or TXT). Every field carries a confidence score and the source line it came from.",
    responses={
        200: {
            "description": "Successfully parsed resume",
            "content": {
                "application/json": {
                    "example": {
                        "id": "3f1c2d9e-8a34-4d0c-9a55-0f2b8e1c7a10",
                        "originalFileName": "resume.txt",
                        "originalFileType": "text/plain",
                        "sections": [
                            {
                                "id": "personal-info",
                                "sectionName": "Personal Information",
                                "sectionType": "personal",
                                "fields": {},
                                "fieldOrder": [],
                                "isVisible": True,
                                "confidence": 0.86,
                                "isEmpty": False
                            }
                        ],
                        "snapshots": [],
                        "parseVersion": "2.0",
                        "overallConfidence": 0.86
                    }
                }
            }
        },
        **UPLOAD_ERROR_RESPONSES,
    }
)
async def parse_resume(
    file: UploadFile = File(..., description="Resume file (DOCX, PDF, or TXT format)")
):
    """
    Parse a resume file without opening a review session.

    **Supported formats:**
    - DOCX (.docx, legacy .doc when python-docx can open it)
    - PDF (.pdf) - Text-layer extraction only, OCR not supported
    - TXT (.txt)

    **Returns:**
    - **sections**: Personal information (with summary), experience, education, skills
    - **overallConfidence**: Mean confidence across all fields
    - **snapshots**: The initial parse snapshot
    """
    return await parse_upload(file)
