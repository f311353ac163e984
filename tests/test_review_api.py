"""HTTP tests for upload, review operations, and error mapping."""

import pytest
from fastapi.testclient import TestClient

from resume_review.api.registry import ReviewRegistry, get_registry
from resume_review.api.routes import parse as parse_route
from resume_review.config import Settings
from resume_review.core import text_extractor
from resume_review.core.pipeline import build_review
from resume_review.core.review_session import SessionState
from resume_review.core.schemas import ExtractedText
from resume_review.main import app

SCENARIO_A = (
    "John Smith\njohn@x.com\n555-123-4567\n\nEXPERIENCE\nSenior Engineer\n"
    "Acme Corp - Remote\nJan 2020 - Present\nBuilt things\n\nSKILLS\nPython, Go, SQL"
)


@pytest.fixture
def registry():
    fresh = ReviewRegistry()
    app.dependency_overrides[get_registry] = lambda: fresh
    yield fresh
    app.dependency_overrides.clear()


@pytest.fixture
def client(registry):
    return TestClient(app)


def _upload(client, text=SCENARIO_A, name="resume.txt", content_type="text/plain"):
    return client.post("/reviews", files={"file": (name, text.encode(), content_type)})


def _field(review, section_id, field_name):
    section = next(s for s in review["sections"] if s["id"] == section_id)
    return next(section["fields"][fid] for fid in section["fieldOrder"] if section["fields"][fid]["fieldName"] == field_name)


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}
    assert client.get("/").json()["status"] == "running"


def test_parse_endpoint_returns_review_data(client, registry):
    r = client.post("/parse", files={"file": ("resume.txt", SCENARIO_A.encode(), "text/plain")})
    assert r.status_code == 200
    data = r.json()

    assert data["originalFileName"] == "resume.txt"
    assert _field(data, "personal-info", "fullName")["correctedValue"] == "John Smith"
    assert data["snapshots"][0]["description"] == "Initial parse"
    # /parse does not open a session
    assert len(registry) == 0


def test_create_review_opens_session(client, registry):
    r = _upload(client)
    assert r.status_code == 201
    body = r.json()

    assert body["state"] == "editing"
    assert body["policy"] in {"review_required", "optional_review", "quick_accept"}
    review_id = body["review"]["id"]
    assert registry.get(review_id) is not None

    r = client.get(f"/reviews/{review_id}")
    assert r.status_code == 200
    assert r.json()["review"]["id"] == review_id


def test_correct_and_mark_unknown(client):
    review = _upload(client).json()["review"]
    rid = review["id"]
    name = _field(review, "personal-info", "fullName")
    phone = _field(review, "personal-info", "phone")

    r = client.post(
        f"/reviews/{rid}/sections/personal-info/fields/{name['id']}/correct",
        json={"value": "Johnny Smith"},
    )
    assert r.status_code == 200
    updated = _field(r.json()["review"], "personal-info", "fullName")
    assert updated["correctedValue"] == "Johnny Smith"
    assert updated["status"] == "corrected"

    r = client.post(f"/reviews/{rid}/sections/personal-info/fields/{phone['id']}/mark-unknown")
    updated = _field(r.json()["review"], "personal-info", "phone")
    assert updated["correctedValue"] == ""
    assert updated["status"] == "unknown"


def test_copy_from_source_and_split(client):
    review = _upload(client).json()["review"]
    rid = review["id"]
    company = _field(review, "experience", "company")
    description = _field(review, "experience", "description")

    r = client.post(f"/reviews/{rid}/sections/experience/fields/{company['id']}/copy-from-source")
    assert _field(r.json()["review"], "experience", "company")["correctedValue"] == "Acme Corp - Remote"

    r = client.post(
        f"/reviews/{rid}/sections/experience/fields/{description['id']}/split",
        json={"offset": 5},
    )
    assert r.status_code == 200
    section = next(s for s in r.json()["review"]["sections"] if s["id"] == "experience")
    values = [section["fields"][fid]["correctedValue"] for fid in section["fieldOrder"]]
    assert values[-2:] == ["Built", "things"]


def test_toggle_visibility_and_snapshots(client):
    rid = _upload(client).json()["review"]["id"]

    r = client.post(f"/reviews/{rid}/sections/skills/toggle-visibility")
    skills = next(s for s in r.json()["review"]["sections"] if s["id"] == "skills")
    assert skills["isVisible"] is False

    r = client.post(f"/reviews/{rid}/snapshots", json={"description": "Hidden skills"})
    assert r.status_code == 201
    snapshot_id = r.json()["id"]
    assert r.json()["isAutosave"] is False

    client.post(f"/reviews/{rid}/sections/skills/toggle-visibility")
    r = client.post(f"/reviews/{rid}/snapshots/{snapshot_id}/revert")
    assert r.status_code == 200
    skills = next(s for s in r.json()["review"]["sections"] if s["id"] == "skills")
    assert skills["isVisible"] is False


def test_finalize_returns_record_and_removes_session(client, registry):
    review = _upload(client).json()["review"]
    rid = review["id"]
    email = _field(review, "personal-info", "email")
    client.post(
        f"/reviews/{rid}/sections/personal-info/fields/{email['id']}/correct",
        json={"value": "john.smith@x.com"},
    )

    r = client.post(f"/reviews/{rid}/finalize")
    assert r.status_code == 200
    data = r.json()
    assert data["record"]["personalInfo"]["email"] == "john.smith@x.com"
    assert data["record"]["experience"][0]["company"] == "Acme Corp"
    assert [s["name"] for s in data["record"]["skills"]] == ["Python", "Go", "SQL"]
    assert data["corrections"][0]["fieldName"] == "email"
    assert 0.0 <= data["completenessScore"] <= 1.0

    assert registry.get(rid) is None
    assert client.get(f"/reviews/{rid}").status_code == 404


def test_cancel_removes_session(client, registry):
    rid = _upload(client).json()["review"]["id"]
    r = client.post(f"/reviews/{rid}/cancel")
    assert r.status_code == 204
    assert len(registry) == 0


def test_unknown_ids_are_404(client):
    review = _upload(client).json()["review"]
    rid = review["id"]
    name = _field(review, "personal-info", "fullName")

    assert client.get("/reviews/missing").status_code == 404
    assert client.post(f"/reviews/{rid}/sections/nope/fields/{name['id']}/mark-unknown").status_code == 404
    assert client.post(f"/reviews/{rid}/sections/personal-info/fields/nope/mark-unknown").status_code == 404
    assert client.post(f"/reviews/{rid}/sections/nope/toggle-visibility").status_code == 404
    assert client.post(f"/reviews/{rid}/snapshots/nope/revert").status_code == 404
    assert client.post("/reviews/missing/finalize").status_code == 404


def test_empty_upload_is_400(client):
    r = client.post("/parse", files={"file": ("resume.txt", b"", "text/plain")})
    assert r.status_code == 400


def test_unsupported_format_is_415(client):
    r = client.post("/parse", files={"file": ("photo.png", b"\x89PNG" * 30, "image/png")})
    assert r.status_code == 415


def test_short_text_is_422(client):
    r = client.post("/parse", files={"file": ("resume.txt", b"John Smith", "text/plain")})
    assert r.status_code == 422
    assert "Could not extract sufficient text" in r.json()["detail"]


def test_corrupt_docx_is_422(client):
    r = client.post("/reviews", files={"file": ("resume.docx", b"not a docx " * 20, "application/msword")})
    assert r.status_code == 422


def test_oversized_upload_is_413(client, monkeypatch):
    monkeypatch.setattr(text_extractor, "get_settings", lambda: Settings(max_upload_bytes=100))
    r = client.post("/parse", files={"file": ("resume.txt", b"x" * 200, "text/plain")})
    assert r.status_code == 413


def test_declared_size_is_checked_before_parsing(client, monkeypatch):
    parsed = []
    monkeypatch.setattr(parse_route, "get_settings", lambda: Settings(max_upload_bytes=100))
    monkeypatch.setattr(parse_route, "parse_document", lambda raw: parsed.append(raw))

    r = client.post("/parse", files={"file": ("resume.txt", b"x" * 200, "text/plain")})

    assert r.status_code == 413
    assert parsed == []


def test_idle_sessions_are_evicted():
    now = [0.0]
    reg = ReviewRegistry(idle_ttl=60, clock=lambda: now[0])
    stale = reg.create(build_review(ExtractedText(text=SCENARIO_A)))
    now[0] = 30.0
    fresh = reg.create(build_review(ExtractedText(text=SCENARIO_A)))

    now[0] = 75.0
    assert reg.get(fresh.review.id) is fresh
    assert reg.get(stale.review.id) is None
    assert stale.state == SessionState.CANCELLED
    assert len(reg) == 1

    # Access resets the idle clock
    now[0] = 130.0
    assert reg.get(fresh.review.id) is fresh
