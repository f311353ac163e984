"""
Skills extraction: every line of the skills span is a delimited list.
"""

import logging
import re
from typing import List

from resume_review.core.confidence_calculator import ConfidenceCalculator
from resume_review.core.field_builder import make_field
from resume_review.core.schemas import ParsedField, SourceLine

logger = logging.getLogger(__name__)

SKILL_SPLIT_RE = re.compile(r"[,;•·|▪●]")
LEADING_BULLET_RE = re.compile(r"^[\-\*]+\s*")

MIN_SKILL_CHARS = 2
MAX_SKILL_CHARS = 49
DEFAULT_LEVEL = "Intermediate"
DEFAULT_CATEGORY = "Technical"


def split_skill_tokens(text: str) -> List[str]:
    """'Python, Go; - SQL' -> ['Python', 'Go', 'SQL'] (filters applied)."""
    tokens = []
    for raw in SKILL_SPLIT_RE.split(text):
        token = LEADING_BULLET_RE.sub("", raw.strip()).strip()
        if not MIN_SKILL_CHARS <= len(token) <= MAX_SKILL_CHARS:
            continue
        if token.isdigit() or token.lower() == "skills":
            continue
        tokens.append(token)
    return tokens


def extract_skills(lines: List[SourceLine]) -> List[ParsedField]:
    fields: List[ParsedField] = []
    for line in lines:
        for token in split_skill_tokens(line.text):
            conf, _ = ConfidenceCalculator.skill(token)
            fields.append(make_field(
                "skill",
                token,
                conf,
                line,
                metadata={"level": DEFAULT_LEVEL, "category": DEFAULT_CATEGORY},
            ))
    logger.debug(f"Extracted {len(fields)} skills from {len(lines)} lines")
    return fields
