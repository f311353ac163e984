from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile
from pydantic import Field

from resume_review.api.registry import ReviewRegistry, get_registry
from resume_review.api.routes.parse import UPLOAD_ERROR_RESPONSES, parse_upload
from resume_review.core.confidence_calculator import ReviewPolicy
from resume_review.core.review_session import ReviewSession, SessionState
from resume_review.core.schemas import CamelModel, FinalizeResult, ParseReviewData, ParseSnapshot

router = APIRouter(prefix="/reviews", tags=["review"])


class ReviewResponse(CamelModel):
    review: ParseReviewData
    state: SessionState
    policy: ReviewPolicy


class CorrectRequest(CamelModel):
    value: str


class SplitRequest(CamelModel):
    offset: int = Field(..., description="Character offset in the field's corrected value")


class SnapshotRequest(CamelModel):
    description: str = ""


def _session_or_404(review_id: str, registry: ReviewRegistry) -> ReviewSession:
    session = registry.get(review_id)
    if session is None:
        raise HTTPException(status_code=404, detail=f"Review not found: {review_id}")
    return session


def _field_or_404(session: ReviewSession, section_id: str, field_id: str) -> None:
    section = session.review.get_section(section_id)
    if section is None:
        raise HTTPException(status_code=404, detail=f"Section not found: {section_id}")
    if section.get_field(field_id) is None:
        raise HTTPException(status_code=404, detail=f"Field not found: {field_id}")


def _response(session: ReviewSession) -> ReviewResponse:
    return ReviewResponse(review=session.review, state=session.state, policy=session.policy())


@router.post(
    "",
    response_model=ReviewResponse,
    status_code=201,
    summary="Upload and Open Review",
    responses=UPLOAD_ERROR_RESPONSES,
)
async def create_review(
    file: UploadFile = File(..., description="Resume file (DOCX, PDF, or TXT format)"),
    registry: ReviewRegistry = Depends(get_registry),
):
    """Parse a resume and open a review session for it."""
    review = await parse_upload(file)
    return _response(registry.create(review))


@router.get("/{review_id}", response_model=ReviewResponse, summary="Get Review")
def get_review(review_id: str, registry: ReviewRegistry = Depends(get_registry)):
    return _response(_session_or_404(review_id, registry))


@router.post("/{review_id}/sections/{section_id}/fields/{field_id}/correct", response_model=ReviewResponse)
def correct_field(
    review_id: str,
    section_id: str,
    field_id: str,
    body: CorrectRequest,
    registry: ReviewRegistry = Depends(get_registry),
):
    """Set the corrected value. Status becomes 'validated' when it equals the original value."""
    session = _session_or_404(review_id, registry)
    _field_or_404(session, section_id, field_id)
    session.correct(section_id, field_id, body.value)
    return _response(session)


@router.post("/{review_id}/sections/{section_id}/fields/{field_id}/copy-from-source", response_model=ReviewResponse)
def copy_from_source(
    review_id: str,
    section_id: str,
    field_id: str,
    registry: ReviewRegistry = Depends(get_registry),
):
    """Replace the value with its full source line. No-op when the field has no provenance."""
    session = _session_or_404(review_id, registry)
    _field_or_404(session, section_id, field_id)
    session.copy_from_source(section_id, field_id)
    return _response(session)


@router.post("/{review_id}/sections/{section_id}/fields/{field_id}/mark-unknown", response_model=ReviewResponse)
def mark_unknown(
    review_id: str,
    section_id: str,
    field_id: str,
    registry: ReviewRegistry = Depends(get_registry),
):
    session = _session_or_404(review_id, registry)
    _field_or_404(session, section_id, field_id)
    session.mark_unknown(section_id, field_id)
    return _response(session)


@router.post("/{review_id}/sections/{section_id}/fields/{field_id}/split", response_model=ReviewResponse)
def split_field(
    review_id: str,
    section_id: str,
    field_id: str,
    body: SplitRequest,
    registry: ReviewRegistry = Depends(get_registry),
):
    """Split a merged bullet in two. Offsets that would leave an empty half are ignored."""
    session = _session_or_404(review_id, registry)
    _field_or_404(session, section_id, field_id)
    session.split_field(section_id, field_id, body.offset)
    return _response(session)


@router.post("/{review_id}/sections/{section_id}/toggle-visibility", response_model=ReviewResponse)
def toggle_visibility(review_id: str, section_id: str, registry: ReviewRegistry = Depends(get_registry)):
    session = _session_or_404(review_id, registry)
    if session.review.get_section(section_id) is None:
        raise HTTPException(status_code=404, detail=f"Section not found: {section_id}")
    session.toggle_section_visibility(section_id)
    return _response(session)


@router.post("/{review_id}/snapshots", response_model=ParseSnapshot, status_code=201)
def take_snapshot(review_id: str, body: SnapshotRequest, registry: ReviewRegistry = Depends(get_registry)):
    session = _session_or_404(review_id, registry)
    snapshot = session.take_snapshot(body.description)
    if snapshot is None:
        raise HTTPException(status_code=409, detail="Review is closed.")
    return snapshot


@router.post("/{review_id}/snapshots/{snapshot_id}/revert", response_model=ReviewResponse)
def revert_snapshot(review_id: str, snapshot_id: str, registry: ReviewRegistry = Depends(get_registry)):
    session = _session_or_404(review_id, registry)
    if session.review.get_snapshot(snapshot_id) is None:
        raise HTTPException(status_code=404, detail=f"Snapshot not found: {snapshot_id}")
    session.revert(snapshot_id)
    return _response(session)


@router.post("/{review_id}/finalize", response_model=FinalizeResult)
def finalize_review(review_id: str, registry: ReviewRegistry = Depends(get_registry)):
    """Close the review and return the resume record plus the list of corrections."""
    session = _session_or_404(review_id, registry)
    result = session.finalize()
    registry.remove(review_id)
    if result is None:
        raise HTTPException(status_code=409, detail="Review is closed.")
    return result


@router.post("/{review_id}/cancel", status_code=204)
def cancel_review(review_id: str, registry: ReviewRegistry = Depends(get_registry)):
    session = _session_or_404(review_id, registry)
    session.cancel()
    registry.remove(review_id)
    return Response(status_code=204)
