from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Literal, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator
from pydantic.alias_generators import to_camel

from resume_review.core.confidence_calculator import mean


def new_id() -> str:
    return str(uuid4())


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Extraction inputs/outputs
# ---------------------------------------------------------------------------

TextSource = Literal["text", "docx", "pdf"]


class RawDocument(BaseModel):
    model_config = ConfigDict(frozen=True)

    content: bytes
    media_type: str = ""
    filename: str = ""


class ExtractedText(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str
    source: TextSource = "text"
    page_starts: List[int] = Field(
        default_factory=list,
        description="Line index where each page begins (empty for non-paginated sources)",
    )

    @property
    def lines(self) -> List[str]:
        return self.text.split("\n")

    def page_for_line(self, index: int) -> Optional[int]:
        """1-based page number for a line index, or None when not paginated."""
        page = None
        for page_i, start in enumerate(self.page_starts, start=1):
            if index >= start:
                page = page_i
            else:
                break
        return page


class SectionType(str, Enum):
    PERSONAL = "personal"
    EXPERIENCE = "experience"
    EDUCATION = "education"
    SKILLS = "skills"
    SUMMARY = "summary"


class SectionSpan(BaseModel):
    model_config = ConfigDict(frozen=True)

    section_type: SectionType
    header_line: int
    start_line: int  # inclusive
    end_line: int  # exclusive


@dataclass(frozen=True)
class SourceLine:
    """A non-empty line handed to a field extractor, with its position."""
    index: int  # 0-based index into ExtractedText.lines
    text: str
    page: Optional[int] = None

    @property
    def number(self) -> int:
        return self.index + 1


# ---------------------------------------------------------------------------
# Review data
# ---------------------------------------------------------------------------

class FieldStatus(str, Enum):
    PENDING = "pending"
    VALIDATED = "validated"
    CORRECTED = "corrected"
    UNKNOWN = "unknown"


class Provenance(CamelModel):
    page: Optional[int] = None
    line: Optional[int] = Field(default=None, description="1-based line number in the extracted text")
    offset: Optional[int] = Field(default=None, description="Character offset of the value inside the line")
    source_text: Optional[str] = Field(default=None, description="Source line the value came from")


class ParsedField(CamelModel):
    id: str = Field(default_factory=new_id)
    field_name: str
    original_value: str = ""
    corrected_value: str = ""
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    provenance: Optional[Provenance] = None
    status: FieldStatus = FieldStatus.PENDING
    warnings: List[str] = Field(default_factory=list)
    entry_id: Optional[str] = Field(default=None, description="Groups the fields of one experience/education entry")
    metadata: Dict[str, str] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _default_corrected_value(cls, data):
        if isinstance(data, dict) and "corrected_value" not in data and "correctedValue" not in data:
            original = data.get("original_value", data.get("originalValue", ""))
            data = {**data, "corrected_value": original}
        return data


class ParsedSection(CamelModel):
    id: str
    section_name: str
    section_type: SectionType
    fields: Dict[str, ParsedField] = Field(default_factory=dict)
    field_order: List[str] = Field(default_factory=list)
    is_visible: bool = True

    @classmethod
    def from_fields(
        cls,
        section_id: str,
        section_name: str,
        section_type: SectionType,
        fields: List[ParsedField],
    ) -> "ParsedSection":
        return cls(
            id=section_id,
            section_name=section_name,
            section_type=section_type,
            fields={f.id: f for f in fields},
            field_order=[f.id for f in fields],
        )

    def ordered_fields(self) -> List[ParsedField]:
        return [self.fields[fid] for fid in self.field_order if fid in self.fields]

    def get_field(self, field_id: str) -> Optional[ParsedField]:
        return self.fields.get(field_id)

    def insert_after(self, field_id: str, new_field: ParsedField) -> None:
        position = self.field_order.index(field_id) + 1
        self.fields[new_field.id] = new_field
        self.field_order.insert(position, new_field.id)

    @computed_field(alias="confidence")
    @property
    def confidence(self) -> float:
        return mean(f.confidence for f in self.ordered_fields())

    @computed_field(alias="isEmpty")
    @property
    def is_empty(self) -> bool:
        return not any(f.corrected_value.strip() for f in self.fields.values())


class ParseSnapshot(CamelModel):
    id: str = Field(default_factory=new_id)
    timestamp: datetime = Field(default_factory=utcnow)
    sections: List[ParsedSection]
    description: str = ""
    is_autosave: bool = False


class ParseReviewData(CamelModel):
    id: str = Field(default_factory=new_id)
    original_file_name: str = ""
    original_file_type: str = ""
    sections: List[ParsedSection] = Field(default_factory=list)
    snapshots: List[ParseSnapshot] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow)
    parse_version: str = "2.0"

    def get_section(self, section_id: str) -> Optional[ParsedSection]:
        for section in self.sections:
            if section.id == section_id:
                return section
        return None

    def get_snapshot(self, snapshot_id: str) -> Optional[ParseSnapshot]:
        for snapshot in self.snapshots:
            if snapshot.id == snapshot_id:
                return snapshot
        return None

    def all_fields(self) -> List[ParsedField]:
        return [f for section in self.sections for f in section.ordered_fields()]

    @computed_field(alias="overallConfidence")
    @property
    def overall_confidence(self) -> float:
        return mean(f.confidence for f in self.all_fields())


# ---------------------------------------------------------------------------
# Finalize output (resume-shaped projection)
# ---------------------------------------------------------------------------

class PersonalInfo(CamelModel):
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    linkedin: Optional[str] = None
    website: Optional[str] = None
    summary: Optional[str] = None


class ExperienceEntry(CamelModel):
    position: str = ""
    company: str = ""
    start_date: str = ""
    end_date: str = ""
    current: bool = False
    description: str = ""
    achievements: List[str] = Field(default_factory=list)


class EducationEntry(CamelModel):
    degree: str = ""
    institution: str = ""
    field: str = ""
    start_date: str = ""
    end_date: str = ""
    gpa: Optional[str] = None


class SkillEntry(CamelModel):
    name: str
    level: str = "Intermediate"
    category: str = "Technical"


class ResumeRecord(CamelModel):
    personal_info: Optional[PersonalInfo] = None
    experience: List[ExperienceEntry] = Field(default_factory=list)
    education: List[EducationEntry] = Field(default_factory=list)
    skills: List[SkillEntry] = Field(default_factory=list)


class Correction(CamelModel):
    section_id: str
    field_id: str
    field_name: str
    corrected_value: str
    status: FieldStatus


class FinalizeResult(CamelModel):
    record: ResumeRecord
    corrections: List[Correction] = Field(default_factory=list)
    overall_confidence: float = Field(..., ge=0.0, le=1.0)
    completeness_score: float = Field(..., ge=0.0, le=1.0)
