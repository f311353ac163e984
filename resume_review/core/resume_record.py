"""
Projection of reviewed sections into a resume-shaped record.

Only corrected values are read. Field names without a mapping rule are
ignored, empty values are omitted, and entries with no data are dropped.
"""

from collections import OrderedDict
from typing import Dict, List, Optional

from resume_review.core.schemas import (
    EducationEntry,
    ExperienceEntry,
    ParsedField,
    ParsedSection,
    PersonalInfo,
    ResumeRecord,
    SectionType,
    SkillEntry,
)

PERSONAL_FIELD_MAP = {
    "fullName": "full_name",
    "email": "email",
    "phone": "phone",
    "location": "location",
    "linkedin": "linkedin",
    "website": "website",
    "summary": "summary",
}

EXPERIENCE_FIELD_MAP = {
    "position": "position",
    "company": "company",
    "startDate": "start_date",
    "endDate": "end_date",
}

EDUCATION_FIELD_MAP = {
    "degree": "degree",
    "institution": "institution",
    "field": "field",
    "startDate": "start_date",
    "endDate": "end_date",
    "gpa": "gpa",
}


def _value(field: ParsedField) -> str:
    return (field.corrected_value or "").strip()


def _fields_of(sections: List[ParsedSection], section_type: SectionType) -> List[ParsedField]:
    return [f for s in sections if s.section_type == section_type for f in s.ordered_fields()]


def _group_by_entry(fields: List[ParsedField]) -> List[List[ParsedField]]:
    """Group fields by entry_id, keeping first-seen order."""
    groups: "OrderedDict[Optional[str], List[ParsedField]]" = OrderedDict()
    for f in fields:
        groups.setdefault(f.entry_id, []).append(f)
    return list(groups.values())


def _personal_info(fields: List[ParsedField]) -> Optional[PersonalInfo]:
    values: Dict[str, str] = {}
    for f in fields:
        attr = PERSONAL_FIELD_MAP.get(f.field_name)
        value = _value(f)
        # First non-empty value wins (a split summary is joined back)
        if attr == "summary" and value and attr in values:
            values[attr] = f"{values[attr]} {value}"
        elif attr and value and attr not in values:
            values[attr] = value
    return PersonalInfo(**values) if values else None


def _experience_entry(fields: List[ParsedField]) -> Optional[ExperienceEntry]:
    data: Dict[str, object] = {}
    description: List[str] = []
    achievements: List[str] = []
    has_data = False

    for f in fields:
        value = _value(f)
        if not value:
            continue
        if f.field_name == "current":
            data["current"] = value.lower() == "true"
            continue
        has_data = True
        if f.field_name == "description":
            description.append(value)
        elif f.field_name == "achievement":
            achievements.append(value)
        elif f.field_name in EXPERIENCE_FIELD_MAP and EXPERIENCE_FIELD_MAP[f.field_name] not in data:
            data[EXPERIENCE_FIELD_MAP[f.field_name]] = value

    if not has_data:
        return None
    return ExperienceEntry(description=" ".join(description), achievements=achievements, **data)


def _education_entry(fields: List[ParsedField]) -> Optional[EducationEntry]:
    data: Dict[str, str] = {}
    for f in fields:
        attr = EDUCATION_FIELD_MAP.get(f.field_name)
        value = _value(f)
        if attr and value and attr not in data:
            data[attr] = value
    return EducationEntry(**data) if data else None


def _skills(fields: List[ParsedField]) -> List[SkillEntry]:
    skills = []
    for f in fields:
        value = _value(f)
        if f.field_name != "skill" or not value:
            continue
        skills.append(SkillEntry(
            name=value,
            level=f.metadata.get("level", "Intermediate"),
            category=f.metadata.get("category", "Technical"),
        ))
    return skills


def to_resume_record(sections: List[ParsedSection]) -> ResumeRecord:
    """Build the finalize output. Hidden sections are included."""
    experience = [
        e for e in (_experience_entry(g) for g in _group_by_entry(_fields_of(sections, SectionType.EXPERIENCE)))
        if e is not None
    ]
    education = [
        e for e in (_education_entry(g) for g in _group_by_entry(_fields_of(sections, SectionType.EDUCATION)))
        if e is not None
    ]
    return ResumeRecord(
        personal_info=_personal_info(_fields_of(sections, SectionType.PERSONAL)),
        experience=experience,
        education=education,
        skills=_skills(_fields_of(sections, SectionType.SKILLS)),
    )
