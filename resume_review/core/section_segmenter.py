"""
Section segmentation: split extracted text into labeled line ranges.

Each non-empty line is tested against an ordered list of header patterns per
section type. A header closes the previous span and opens a new one on the
following line. Lines before the first header form the implicit personal
region, which is returned separately by personal_region().
"""

import logging
import re
from typing import List, Optional, Tuple

from resume_review.core.schemas import ExtractedText, SectionSpan, SectionType
from resume_review.core.text_normalization import despace_if_needed, strip_bullet

logger = logging.getLogger(__name__)

# Priority order matters: when a header matches several types, the first wins.
SECTION_PATTERNS: List[Tuple[SectionType, List[re.Pattern]]] = [
    (SectionType.EXPERIENCE, [
        re.compile(r"(?:work|professional|relevant|industry|career|employment)?\s*experience"),
        re.compile(r"employment(?:\s+history)?"),
        re.compile(r"(?:work|career|professional)\s+history"),
    ]),
    (SectionType.EDUCATION, [
        re.compile(r"education(?:al\s+background)?"),
        re.compile(r"academic\s+(?:background|history|qualifications)"),
        re.compile(r"academics?"),
        re.compile(r"qualifications"),
    ]),
    (SectionType.SKILLS, [
        re.compile(r"(?:technical|core|key|professional|relevant)?\s*skills"),
        re.compile(r"(?:core\s+)?competencies"),
        re.compile(r"(?:areas\s+of\s+)?expertise"),
        re.compile(r"technical\s+proficiencies"),
    ]),
    (SectionType.SUMMARY, [
        re.compile(r"(?:professional|career|executive)?\s*summary"),
        re.compile(r"(?:career\s+)?objective"),
        re.compile(r"(?:professional\s+)?profile"),
        re.compile(r"about(?:\s+me)?"),
    ]),
]

HEADER_DECORATION_RE = re.compile(r"^[\s#*=_~\-:|]+|[\s#*=_~\-:|]+$")
HEADER_JOINER_RE = re.compile(r"\s*(?:&|\band\b|/|,|\+)\s*")
MAX_HEADER_WORDS = 6
MAX_HEADER_CHARS = 60


def _header_parts(line: str) -> Optional[List[str]]:
    """
    Normalize a candidate header line into its lowercase parts.
    Returns None when the line cannot be a header at all.
    """
    t = despace_if_needed(strip_bullet(line))
    if not t or len(t) > MAX_HEADER_CHARS:
        return None
    if "@" in t or any(c.isdigit() for c in t):
        return None
    # "Skills: Python, Go" carries content and is not a bare header
    if ":" in t and t.split(":", 1)[1].strip():
        return None

    t = HEADER_DECORATION_RE.sub("", t).lower()
    t = " ".join(t.split())
    if not t or len(t.split()) > MAX_HEADER_WORDS:
        return None
    return [p for p in HEADER_JOINER_RE.split(t) if p]


def classify_header(line: str) -> Optional[SectionType]:
    """Return the section type a header line introduces, or None."""
    parts = _header_parts(line)
    if not parts:
        return None
    for section_type, patterns in SECTION_PATTERNS:
        for part in parts:
            if any(p.fullmatch(part) for p in patterns):
                return section_type
    return None


def segment(extracted: ExtractedText) -> List[SectionSpan]:
    """Produce ordered, non-overlapping section spans over extracted.lines."""
    lines = extracted.lines
    spans: List[SectionSpan] = []
    current_type: Optional[SectionType] = None
    current_header = -1

    for idx, line in enumerate(lines):
        if not line.strip():
            continue
        section_type = classify_header(line)
        if section_type is None:
            continue

        if current_type is not None:
            spans.append(SectionSpan(
                section_type=current_type,
                header_line=current_header,
                start_line=current_header + 1,
                end_line=idx,
            ))
        logger.debug(f"Header {line.strip()!r} at line {idx + 1} -> {section_type.value}")
        current_type = section_type
        current_header = idx

    if current_type is not None:
        spans.append(SectionSpan(
            section_type=current_type,
            header_line=current_header,
            start_line=current_header + 1,
            end_line=len(lines),
        ))

    return spans


def personal_region(spans: List[SectionSpan], line_count: int) -> Tuple[int, int]:
    """Line range (start, end-exclusive) of the implicit personal region."""
    if not spans:
        return 0, line_count
    return 0, spans[0].header_line
