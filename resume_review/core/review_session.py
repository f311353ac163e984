"""
Review session: the mutable workspace a human uses to correct a parse.

States:

    idle -> editing <-> autosaving -> completed | cancelled

Every mutation returns True when it was applied and False when it was a no-op
(unknown section/field/snapshot id, unmet precondition, closed session). No
mutation raises. A successful mutation (re)starts a debounced auto-save timer;
when it fires, a ParseSnapshot tagged is_autosave=True is appended to the
capped history and handed to on_autosave.

Only durable state lives here (fields, statuses, snapshots). Which panel is
open or which field is selected belongs to the UI.
"""

import logging
import threading
from enum import Enum
from typing import Callable, List, Optional, Tuple

from resume_review.config import Settings, get_settings
from resume_review.core.confidence_calculator import ReviewPolicy, review_policy
from resume_review.core.resume_record import to_resume_record
from resume_review.core.schemas import (
    Correction,
    FieldStatus,
    FinalizeResult,
    ParsedField,
    ParsedSection,
    ParseReviewData,
    ParseSnapshot,
    new_id,
)

logger = logging.getLogger(__name__)

AUTOSAVE_DESCRIPTION = "Auto-save"
CORRECTION_STATUSES = {FieldStatus.VALIDATED, FieldStatus.CORRECTED}


class SessionState(str, Enum):
    IDLE = "idle"
    EDITING = "editing"
    AUTOSAVING = "autosaving"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ReviewSession:
    def __init__(
        self,
        review: ParseReviewData,
        settings: Optional[Settings] = None,
        on_autosave: Optional[Callable[[ParseSnapshot], None]] = None,
    ):
        self.review = review
        self.settings = settings or get_settings()
        self.on_autosave = on_autosave
        self.state = SessionState.IDLE
        self._lock = threading.RLock()
        self._timer: Optional[threading.Timer] = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def is_closed(self) -> bool:
        return self.state in (SessionState.COMPLETED, SessionState.CANCELLED)

    @property
    def has_pending_autosave(self) -> bool:
        with self._lock:
            return self._timer is not None

    def open(self) -> bool:
        """Present the review to a human: idle -> editing."""
        with self._lock:
            if self.state != SessionState.IDLE:
                return False
            self.state = SessionState.EDITING
            logger.info(f"Review {self.review.id} opened")
            return True

    def policy(self) -> ReviewPolicy:
        return review_policy(
            self.review.overall_confidence,
            review_required_below=self.settings.review_required_below,
            quick_accept_at=self.settings.quick_accept_at,
        )

    def finalize(self) -> Optional[FinalizeResult]:
        """
        Close the session and project it into a resume record.

        Returns None when the session is already completed or cancelled.
        """
        with self._lock:
            if self.is_closed:
                logger.debug(f"finalize ignored: review {self.review.id} is {self.state.value}")
                return None
            self._cancel_timer()

            corrections: List[Correction] = []
            total = 0
            for section in self.review.sections:
                for f in section.ordered_fields():
                    total += 1
                    if f.status in CORRECTION_STATUSES:
                        corrections.append(Correction(
                            section_id=section.id,
                            field_id=f.id,
                            field_name=f.field_name,
                            corrected_value=f.corrected_value,
                            status=f.status,
                        ))

            result = FinalizeResult(
                record=to_resume_record(self.review.sections),
                corrections=corrections,
                overall_confidence=self.review.overall_confidence,
                completeness_score=len(corrections) / total if total else 0.0,
            )
            self.state = SessionState.COMPLETED
            logger.info(
                f"Review {self.review.id} finalized: {len(corrections)} corrections, "
                f"overall confidence {result.overall_confidence:.2f}"
            )
            return result

    def cancel(self) -> bool:
        """Discard the session. Snapshots already handed to on_autosave stay with the caller."""
        with self._lock:
            if self.is_closed:
                return False
            self._cancel_timer()
            self.state = SessionState.CANCELLED
            logger.info(f"Review {self.review.id} cancelled")
            return True

    # ------------------------------------------------------------------
    # Field and section mutations
    # ------------------------------------------------------------------

    def correct(self, section_id: str, field_id: str, new_value: str) -> bool:
        with self._lock:
            _, field = self._locate("correct", section_id, field_id)
            if field is None:
                return False
            field.corrected_value = new_value
            field.status = FieldStatus.CORRECTED if new_value != field.original_value else FieldStatus.VALIDATED
            self._changed()
            return True

    def copy_from_source(self, section_id: str, field_id: str) -> bool:
        with self._lock:
            _, field = self._locate("copy_from_source", section_id, field_id)
            if field is None:
                return False
            if field.provenance is None or not field.provenance.source_text:
                logger.debug(f"copy_from_source ignored: field {field_id} has no source text")
                return False
            field.corrected_value = field.provenance.source_text
            field.status = FieldStatus.CORRECTED
            self._changed()
            return True

    def mark_unknown(self, section_id: str, field_id: str) -> bool:
        with self._lock:
            _, field = self._locate("mark_unknown", section_id, field_id)
            if field is None:
                return False
            field.corrected_value = ""
            field.status = FieldStatus.UNKNOWN
            self._changed()
            return True

    def split_field(self, section_id: str, field_id: str, offset: int) -> bool:
        """
        Split corrected_value at offset into two fields.

        The original field keeps the trimmed first half; a copy with a new id
        holding the trimmed second half is inserted right after it. Both end
        up 'corrected'. If either half is blank the split does not happen.
        """
        with self._lock:
            section, field = self._locate("split_field", section_id, field_id)
            if field is None:
                return False
            value = field.corrected_value
            if offset < 0 or offset > len(value):
                logger.debug(f"split_field ignored: offset {offset} outside 0..{len(value)}")
                return False
            first, second = value[:offset].strip(), value[offset:].strip()
            if not first or not second:
                logger.debug(f"split_field ignored: empty half at offset {offset}")
                return False

            new_field = field.model_copy(
                deep=True,
                update={"id": new_id(), "corrected_value": second, "status": FieldStatus.CORRECTED},
            )
            field.corrected_value = first
            field.status = FieldStatus.CORRECTED
            section.insert_after(field.id, new_field)
            self._changed()
            return True

    def toggle_section_visibility(self, section_id: str) -> bool:
        with self._lock:
            if not self._begin("toggle_section_visibility"):
                return False
            section = self.review.get_section(section_id)
            if section is None:
                logger.debug(f"toggle_section_visibility ignored: unknown section {section_id}")
                return False
            section.is_visible = not section.is_visible
            self._changed()
            return True

    # ------------------------------------------------------------------
    # Snapshots
    # ------------------------------------------------------------------

    def revert(self, snapshot_id: str) -> bool:
        """Replace the live sections with a copy of a snapshot. History is kept."""
        with self._lock:
            if not self._begin("revert"):
                return False
            snapshot = self.review.get_snapshot(snapshot_id)
            if snapshot is None:
                logger.debug(f"revert ignored: unknown snapshot {snapshot_id}")
                return False
            self.review.sections = [s.model_copy(deep=True) for s in snapshot.sections]
            self._changed()
            return True

    def take_snapshot(self, description: str = "") -> Optional[ParseSnapshot]:
        """Record a manual snapshot. None when the session is closed."""
        with self._lock:
            if self.is_closed:
                return None
            return self._record_snapshot(description, is_autosave=False)

    def flush_autosave(self) -> Optional[ParseSnapshot]:
        """Run a pending auto-save now instead of waiting for the debounce."""
        with self._lock:
            if self._timer is None:
                return None
            self._cancel_timer()
            return self._autosave()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _begin(self, op: str) -> bool:
        if self.is_closed:
            logger.debug(f"{op} ignored: review {self.review.id} is {self.state.value}")
            return False
        if self.state == SessionState.IDLE:
            self.open()
        return True

    def _locate(self, op: str, section_id: str, field_id: str) -> Tuple[Optional[ParsedSection], Optional[ParsedField]]:
        if not self._begin(op):
            return None, None
        section = self.review.get_section(section_id)
        if section is None:
            logger.debug(f"{op} ignored: unknown section {section_id}")
            return None, None
        field = section.get_field(field_id)
        if field is None:
            logger.debug(f"{op} ignored: unknown field {field_id} in section {section_id}")
            return section, None
        return section, field

    def _changed(self) -> None:
        self._cancel_timer()
        timer = threading.Timer(self.settings.autosave_debounce_seconds, self._on_timer)
        timer.daemon = True
        self._timer = timer
        timer.start()

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _on_timer(self) -> None:
        with self._lock:
            # The timer may fire after a newer edit replaced it, or after close
            if self._timer is None or threading.current_thread() is not self._timer:
                return
            self._timer = None
            self._autosave()

    def _autosave(self) -> Optional[ParseSnapshot]:
        if self.state != SessionState.EDITING:
            return None
        self.state = SessionState.AUTOSAVING
        try:
            snapshot = self._record_snapshot(AUTOSAVE_DESCRIPTION, is_autosave=True)
            logger.debug(f"Auto-saved review {self.review.id} as snapshot {snapshot.id}")
            if self.on_autosave is not None:
                try:
                    self.on_autosave(snapshot)
                except Exception:
                    logger.warning(f"Auto-save hook failed for review {self.review.id}", exc_info=True)
        finally:
            self.state = SessionState.EDITING
        return snapshot

    def _record_snapshot(self, description: str, is_autosave: bool) -> ParseSnapshot:
        snapshot = ParseSnapshot(
            sections=[s.model_copy(deep=True) for s in self.review.sections],
            description=description,
            is_autosave=is_autosave,
        )
        snapshots = self.review.snapshots
        snapshots.append(snapshot)
        overflow = len(snapshots) - self.settings.snapshot_history_limit
        if overflow > 0:
            del snapshots[:overflow]
        return snapshot
