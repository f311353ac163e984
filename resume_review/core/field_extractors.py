"""
Section type -> extractor dispatch.

Every extractor has the same shape, (lines) -> fields, and none of them keep
state between documents.
"""

from typing import Callable, Dict, List

from resume_review.core.education_parser import extract_education
from resume_review.core.experience_parser import extract_experience
from resume_review.core.personal_info_parser import extract_personal_info
from resume_review.core.schemas import ParsedField, SectionType, SourceLine
from resume_review.core.skills_parser import extract_skills
from resume_review.core.summary_parser import extract_summary

FieldExtractor = Callable[[List[SourceLine]], List[ParsedField]]

SECTION_EXTRACTORS: Dict[SectionType, FieldExtractor] = {
    SectionType.PERSONAL: extract_personal_info,
    SectionType.EXPERIENCE: extract_experience,
    SectionType.EDUCATION: extract_education,
    SectionType.SKILLS: extract_skills,
    SectionType.SUMMARY: extract_summary,
}


def extract_fields(section_type: SectionType, lines: List[SourceLine]) -> List[ParsedField]:
    return SECTION_EXTRACTORS[section_type](lines)
