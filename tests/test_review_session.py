"""Tests for the review session state machine."""

import threading
import time

import pytest

from resume_review.config import Settings
from resume_review.core.pipeline import build_review
from resume_review.core.review_session import ReviewSession, SessionState
from resume_review.core.schemas import ExtractedText, FieldStatus

SCENARIO_A = (
    "John Smith\njohn@x.com\n555-123-4567\n\nEXPERIENCE\nSenior Engineer\n"
    "Acme Corp - Remote\nJan 2020 - Present\nBuilt things\n\nSKILLS\nPython, Go, SQL"
)

# Long debounce: timers never fire on their own unless a test asks for it
QUIET = Settings(autosave_debounce_seconds=60)


def _session(settings=QUIET, on_autosave=None):
    review = build_review(ExtractedText(text=SCENARIO_A), file_name="resume.txt", file_type="text/plain")
    return ReviewSession(review, settings=settings, on_autosave=on_autosave)


def _field(session, section_id, field_name):
    section = session.review.get_section(section_id)
    return next(f for f in section.ordered_fields() if f.field_name == field_name)


@pytest.fixture
def session():
    s = _session()
    yield s
    s.cancel()


def test_open_moves_idle_to_editing(session):
    assert session.state == SessionState.IDLE
    assert session.open() is True
    assert session.state == SessionState.EDITING
    assert session.open() is False


def test_first_mutation_opens_implicitly(session):
    email = _field(session, "personal-info", "email")
    assert session.correct("personal-info", email.id, "john@x.com")
    assert session.state == SessionState.EDITING


def test_correct_sets_status(session):
    name = _field(session, "personal-info", "fullName")

    assert session.correct("personal-info", name.id, "Johnny Smith")
    assert name.corrected_value == "Johnny Smith"
    assert name.original_value == "John Smith"
    assert name.status == FieldStatus.CORRECTED

    assert session.correct("personal-info", name.id, "John Smith")
    assert name.status == FieldStatus.VALIDATED


def test_correct_is_idempotent(session):
    name = _field(session, "personal-info", "fullName")
    session.correct("personal-info", name.id, "Jon Smith")
    first = name.model_dump()
    session.correct("personal-info", name.id, "Jon Smith")
    assert name.model_dump() == first


def test_mark_unknown_then_correct_ends_corrected(session):
    phone = _field(session, "personal-info", "phone")

    assert session.mark_unknown("personal-info", phone.id)
    assert phone.corrected_value == ""
    assert phone.status == FieldStatus.UNKNOWN

    assert session.correct("personal-info", phone.id, "555-000-1111")
    assert phone.status == FieldStatus.CORRECTED
    assert phone.corrected_value == "555-000-1111"


def test_copy_from_source(session):
    company = _field(session, "experience", "company")

    assert session.copy_from_source("experience", company.id)
    assert company.corrected_value == "Acme Corp - Remote"
    assert company.status == FieldStatus.CORRECTED


def test_copy_from_source_without_provenance_is_noop(session):
    location = _field(session, "personal-info", "location")
    assert location.provenance is None

    assert session.copy_from_source("personal-info", location.id) is False
    assert location.corrected_value == ""
    assert location.status == FieldStatus.PENDING


def test_unknown_ids_are_noops(session):
    name = _field(session, "personal-info", "fullName")
    before = session.review.model_dump()

    assert session.correct("nope", name.id, "x") is False
    assert session.correct("personal-info", "nope", "x") is False
    assert session.mark_unknown("experience", name.id) is False
    assert session.split_field("personal-info", "nope", 2) is False
    assert session.toggle_section_visibility("nope") is False
    assert session.revert("nope") is False
    assert session.review.model_dump() == before


def test_split_inserts_second_half_after_original(session):
    section = session.review.get_section("experience")
    description = _field(session, "experience", "description")
    original = description.corrected_value  # "Built things"
    offset = original.index(" ")
    position = section.field_order.index(description.id)

    assert session.split_field("experience", description.id, offset)

    new_id = section.field_order[position + 1]
    new_field = section.fields[new_id]
    assert new_id != description.id
    assert description.corrected_value == "Built"
    assert new_field.corrected_value == "things"
    assert description.status == FieldStatus.CORRECTED
    assert new_field.status == FieldStatus.CORRECTED
    assert new_field.provenance == description.provenance
    assert new_field.entry_id == description.entry_id

    # Round trip: restoring the boundary reproduces the original value
    assert description.corrected_value + original[offset:offset + 1] + new_field.corrected_value == original


@pytest.mark.parametrize("offset", [0, len("Built things"), -1, 100])
def test_split_that_leaves_an_empty_half_is_noop(session, offset):
    section = session.review.get_section("experience")
    description = _field(session, "experience", "description")
    order = list(section.field_order)

    assert session.split_field("experience", description.id, offset) is False
    assert description.corrected_value == "Built things"
    assert section.field_order == order


def test_toggle_visibility(session):
    section = session.review.get_section("skills")
    assert session.toggle_section_visibility("skills")
    assert section.is_visible is False
    assert session.toggle_section_visibility("skills")
    assert section.is_visible is True


def test_revert_is_idempotent_and_keeps_history(session):
    snapshot = session.take_snapshot("Before edits")
    name = _field(session, "personal-info", "fullName")
    session.correct("personal-info", name.id, "Someone Else")
    history = [s.id for s in session.review.snapshots]

    assert session.revert(snapshot.id)
    first = [s.model_dump() for s in session.review.sections]
    assert session.revert(snapshot.id)
    second = [s.model_dump() for s in session.review.sections]

    assert first == second
    assert _field(session, "personal-info", "fullName").corrected_value == "John Smith"
    assert [s.id for s in session.review.snapshots] == history


def test_revert_does_not_alias_snapshot(session):
    snapshot = session.take_snapshot("Before edits")
    session.revert(snapshot.id)
    name = _field(session, "personal-info", "fullName")
    session.correct("personal-info", name.id, "Changed")

    snap_name = next(f for f in snapshot.sections[0].ordered_fields() if f.field_name == "fullName")
    assert snap_name.corrected_value == "John Smith"


def test_initial_parse_snapshot_present(session):
    [initial] = session.review.snapshots
    assert initial.description == "Initial parse"
    assert initial.is_autosave is False


def test_debounced_edits_produce_one_autosave(session):
    name = _field(session, "personal-info", "fullName")
    for value in ("A B", "A C", "A D"):
        session.correct("personal-info", name.id, value)
    assert session.has_pending_autosave

    snapshot = session.flush_autosave()

    assert snapshot is not None
    assert snapshot.is_autosave is True
    assert snapshot.description == "Auto-save"
    assert len(session.review.snapshots) == 2
    assert session.has_pending_autosave is False
    assert session.flush_autosave() is None
    assert session.state == SessionState.EDITING


def test_autosave_timer_fires_and_calls_hook():
    saved = []
    fired = threading.Event()

    def on_autosave(snapshot):
        saved.append(snapshot)
        fired.set()

    s = _session(Settings(autosave_debounce_seconds=0.01), on_autosave=on_autosave)
    name = _field(s, "personal-info", "fullName")
    s.correct("personal-info", name.id, "Jane Smith")

    assert fired.wait(timeout=5)
    assert saved[0].is_autosave is True
    saved_name = next(f for f in saved[0].sections[0].ordered_fields() if f.field_name == "fullName")
    assert saved_name.corrected_value == "Jane Smith"
    s.cancel()


def test_failing_autosave_hook_is_logged_and_snapshot_kept(session, caplog):
    def on_autosave(snapshot):
        raise RuntimeError("storage offline")

    session.on_autosave = on_autosave
    name = _field(session, "personal-info", "fullName")
    session.correct("personal-info", name.id, "Jane Smith")

    with caplog.at_level("WARNING", logger="resume_review.core.review_session"):
        snapshot = session.flush_autosave()

    assert snapshot is not None
    assert session.review.snapshots[-1] is snapshot
    assert session.state == SessionState.EDITING
    assert "Auto-save hook failed" in caplog.text


def test_snapshot_history_is_capped_fifo():
    s = _session(Settings(autosave_debounce_seconds=60, snapshot_history_limit=3))
    for i in range(5):
        s.take_snapshot(f"manual {i}")

    assert [snap.description for snap in s.review.snapshots] == ["manual 2", "manual 3", "manual 4"]
    s.cancel()


@pytest.mark.parametrize("close", ["finalize", "cancel"])
def test_no_autosave_after_terminal_state(close):
    saved = []
    s = _session(Settings(autosave_debounce_seconds=0.05), on_autosave=saved.append)
    name = _field(s, "personal-info", "fullName")
    s.correct("personal-info", name.id, "Jane Smith")

    getattr(s, close)()
    time.sleep(0.3)

    assert saved == []
    assert not any(snap.is_autosave for snap in s.review.snapshots)
    assert s.has_pending_autosave is False


def test_closed_session_rejects_everything(session):
    name = _field(session, "personal-info", "fullName")
    session.cancel()

    assert session.state == SessionState.CANCELLED
    assert session.correct("personal-info", name.id, "X") is False
    assert session.mark_unknown("personal-info", name.id) is False
    assert session.toggle_section_visibility("skills") is False
    assert session.take_snapshot("late") is None
    assert session.finalize() is None
    assert session.cancel() is False
    assert name.corrected_value == "John Smith"


def test_finalize_builds_record_and_corrections(session):
    name = _field(session, "personal-info", "fullName")
    email = _field(session, "personal-info", "email")
    phone = _field(session, "personal-info", "phone")
    session.correct("personal-info", name.id, "Johnathan Smith")
    session.correct("personal-info", email.id, "john@x.com")
    session.mark_unknown("personal-info", phone.id)
    session.toggle_section_visibility("skills")

    result = session.finalize()

    assert session.state == SessionState.COMPLETED
    assert session.has_pending_autosave is False
    record = result.record
    assert record.personal_info.full_name == "Johnathan Smith"
    assert record.personal_info.email == "john@x.com"
    assert record.personal_info.phone is None
    assert record.personal_info.location is None

    [job] = record.experience
    assert job.position == "Senior Engineer"
    assert job.company == "Acme Corp"
    assert job.start_date == "Jan 2020"
    assert job.end_date == "Present"
    assert job.current is True
    assert job.description == "Built things"

    # Hidden sections still count
    assert [s.name for s in record.skills] == ["Python", "Go", "SQL"]
    assert record.education == []

    assert {(c.field_name, c.status) for c in result.corrections} == {
        ("fullName", FieldStatus.CORRECTED),
        ("email", FieldStatus.VALIDATED),
    }
    # Unknown fields are not counted as complete
    total = len(session.review.all_fields())
    assert result.completeness_score == pytest.approx(2 / total)
    assert result.overall_confidence == pytest.approx(session.review.overall_confidence)


def test_finalize_camel_case_output(session):
    result = session.finalize()
    data = result.model_dump(by_alias=True)

    assert data["record"]["personalInfo"]["fullName"] == "John Smith"
    assert data["record"]["experience"][0]["startDate"] == "Jan 2020"
    assert "completenessScore" in data
    assert "overallConfidence" in data
