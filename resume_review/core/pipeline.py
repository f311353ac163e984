"""
End-to-end parse: RawDocument -> ParseReviewData.

extract -> segment -> per-section extractors -> sections + initial snapshot.
"""

import logging
from typing import Dict, List, Optional

from resume_review.config import Settings
from resume_review.core.field_builder import lines_for
from resume_review.core.field_extractors import extract_fields
from resume_review.core.schemas import (
    ExtractedText,
    ParsedSection,
    ParseReviewData,
    ParseSnapshot,
    RawDocument,
    SectionType,
    SourceLine,
)
from resume_review.core.section_segmenter import personal_region, segment
from resume_review.core.text_extractor import extract

logger = logging.getLogger(__name__)

PERSONAL_SECTION_ID = "personal-info"

# (section type, section id, display name) for the sections built from spans
SECTION_LAYOUT = [
    (SectionType.EXPERIENCE, "experience", "Experience"),
    (SectionType.EDUCATION, "education", "Education"),
    (SectionType.SKILLS, "skills", "Skills"),
]

INITIAL_SNAPSHOT_DESCRIPTION = "Initial parse"


def _lines_by_type(extracted: ExtractedText) -> Dict[SectionType, List[SourceLine]]:
    """Lines of every span, grouped per section type (repeated sections concatenated)."""
    spans = segment(extracted)
    line_count = len(extracted.lines)

    grouped: Dict[SectionType, List[SourceLine]] = {}
    start, end = personal_region(spans, line_count)
    grouped[SectionType.PERSONAL] = lines_for(extracted, start, end)

    for span in spans:
        grouped.setdefault(span.section_type, []).extend(
            lines_for(extracted, span.start_line, span.end_line)
        )
    return grouped


def build_sections(extracted: ExtractedText) -> List[ParsedSection]:
    grouped = _lines_by_type(extracted)

    personal_fields = extract_fields(SectionType.PERSONAL, grouped[SectionType.PERSONAL])
    # Summary has no section of its own; it lives with the personal info
    personal_fields.extend(extract_fields(SectionType.SUMMARY, grouped.get(SectionType.SUMMARY, [])))
    sections = [
        ParsedSection.from_fields(
            PERSONAL_SECTION_ID, "Personal Information", SectionType.PERSONAL, personal_fields
        )
    ]

    for section_type, section_id, section_name in SECTION_LAYOUT:
        if section_type not in grouped:
            continue
        fields = extract_fields(section_type, grouped[section_type])
        logger.debug(f"Section {section_id}: {len(fields)} fields")
        sections.append(ParsedSection.from_fields(section_id, section_name, section_type, fields))

    return sections


def build_review(extracted: ExtractedText, file_name: str = "", file_type: str = "") -> ParseReviewData:
    """Assemble review data from already-extracted text."""
    sections = build_sections(extracted)
    review = ParseReviewData(
        original_file_name=file_name,
        original_file_type=file_type,
        sections=sections,
    )
    review.snapshots.append(ParseSnapshot(
        sections=[s.model_copy(deep=True) for s in sections],
        description=INITIAL_SNAPSHOT_DESCRIPTION,
        is_autosave=False,
    ))
    logger.info(
        f"Parsed {file_name or 'document'}: {len(sections)} sections, "
        f"overall confidence {review.overall_confidence:.2f}"
    )
    return review


def parse_document(raw: RawDocument, settings: Optional[Settings] = None) -> ParseReviewData:
    """
    Parse an uploaded document into review data.

    Raises the extraction errors from core.errors for document-level problems;
    field-level problems show up as empty fields with warnings.
    """
    extracted = extract(raw, settings=settings)
    return build_review(extracted, file_name=raw.filename, file_type=raw.media_type)
