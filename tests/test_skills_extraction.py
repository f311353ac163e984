"""Comprehensive tests for skills extraction."""

from fastapi.testclient import TestClient

from resume_review.core.field_builder import lines_for
from resume_review.core.schemas import ExtractedText
from resume_review.core.skills_parser import extract_skills, split_skill_tokens
from resume_review.main import app

client = TestClient(app)


def _skills(*lines):
    extracted = ExtractedText(text="\n".join(lines))
    return extract_skills(lines_for(extracted, 0, len(lines)))


def test_comma_separated_skills():
    fields = _skills("Python, Go, SQL")
    assert [f.original_value for f in fields] == ["Python", "Go", "SQL"]


def test_mixed_delimiters():
    assert split_skill_tokens("Python; Go • SQL | Docker ▪ Kubernetes · Terraform ● AWS") == [
        "Python", "Go", "SQL", "Docker", "Kubernetes", "Terraform", "AWS",
    ]


def test_leading_dash_and_asterisk_bullets_stripped():
    fields = _skills("- Python", "* JavaScript", "-- React")
    assert [f.original_value for f in fields] == ["Python", "JavaScript", "React"]


def test_filters_numbers_short_tokens_and_the_word_skills():
    assert split_skill_tokens("Skills, C, 2019, R, Python, SKILLS") == ["Python"]


def test_filters_overlong_tokens():
    long_token = "a" * 50
    assert split_skill_tokens(f"{long_token}, Go") == ["Go"]
    assert split_skill_tokens("b" * 49) == ["b" * 49]


def test_default_level_and_category():
    [field] = _skills("Python")
    assert field.field_name == "skill"
    assert field.metadata == {"level": "Intermediate", "category": "Technical"}
    assert field.confidence == 0.85
    assert field.entry_id is None


def test_each_skill_points_at_its_line():
    fields = _skills("Python, Go", "SQL")
    assert [f.provenance.line for f in fields] == [1, 1, 2]
    assert fields[1].provenance.offset == len("Python, ")


def test_skills_section_via_parse_endpoint():
    resume_text = """Jane Doe
jane@example.com
555-123-4567

Technical Skills
• Python
• JavaScript
• React
• SQL
Experience
"""
    r = client.post("/parse", files={"file": ("resume.txt", resume_text.encode(), "text/plain")})
    assert r.status_code == 200
    data = r.json()

    skills = next(s for s in data["sections"] if s["id"] == "skills")
    names = [skills["fields"][fid]["correctedValue"] for fid in skills["fieldOrder"]]
    assert names == ["Python", "JavaScript", "React", "SQL"]
