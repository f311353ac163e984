"""
Education parsing module for extracting education entries from the education span.

Deterministic, rule-based: a line with a degree keyword opens an entry, the
next line is the institution ("University - City" is split on " - "), and the
line after that may carry one or two dates.
"""

import logging
import re
from typing import List, Optional, Tuple

from resume_review.core.confidence_calculator import ConfidenceCalculator
from resume_review.core.dates import date_tokens
from resume_review.core.field_builder import empty_field, make_field
from resume_review.core.schemas import ParsedField, SourceLine, new_id
from resume_review.core.text_normalization import strip_bullet

logger = logging.getLogger(__name__)

# ===== DEGREE KEYWORDS (Strong Signal) =====
# Not after a comma: "Oxford, MS" and "Boston, MA" are state codes
DEGREE_RE = re.compile(
    r"(?<![A-Za-z])(?<!,)(?<!,\s)(?:"
    r"bachelor(?:'?s)?|master(?:'?s)?|ph\.?\s?d\.?|doctorate|doctoral|associate(?:'?s)?|diploma|certificate"
    r"|b\.?\s?s\.?|b\.?\s?a\.?|b\.?\s?sc\.?|b\.?\s?eng\.?|m\.?\s?s\.?|m\.\s?a\.|m\.?\s?sc\.?|m\.?\s?b\.?\s?a\.?"
    r")(?![A-Za-z])",
    re.IGNORECASE,
)
# "Bachelor of Science in Computer Science" -> "Computer Science"
FIELD_OF_STUDY_RE = re.compile(r"\bin\s+([A-Za-z&'][A-Za-z&' ]*[A-Za-z])")
GPA_RE = re.compile(r"\bGPA\b\s*[:\-]?\s*(\d\.\d{1,2})(?:\s*/\s*\d(?:\.\d{1,2})?)?", re.IGNORECASE)

INSTITUTION_SEPARATOR = " - "


def looks_like_degree(text: str) -> bool:
    return bool(DEGREE_RE.search(text))


def looks_like_date_line(text: str) -> bool:
    """Dates lead the line: '2012 - 2016' or 'May 2012', not 'MIT - 2016'."""
    head = text.split(INSTITUTION_SEPARATOR, 1)[0]
    return bool(date_tokens(head))


def extract_field_of_study(degree_line: str) -> Optional[str]:
    m = FIELD_OF_STUDY_RE.search(degree_line)
    if not m:
        return None
    # Trailing date or separator text is not part of the field
    value = re.split(r"\s+-\s+|,", m.group(1))[0].strip()
    return value or None


def _assign_dates(tokens: List[str]) -> Tuple[str, str]:
    """
    One token is the graduation (end) date; two tokens are start and end.
    """
    if not tokens:
        return "", ""
    if len(tokens) == 1:
        return "", tokens[0]
    return tokens[0], tokens[1]


def _entry_fields(
    degree_line: SourceLine,
    institution_line: Optional[SourceLine],
    date_line: Optional[SourceLine],
    entry_lines: List[SourceLine],
) -> List[ParsedField]:
    eid = new_id()
    fields: List[ParsedField] = []

    degree = strip_bullet(degree_line.text)
    conf, _ = ConfidenceCalculator.education_field("degree", degree)
    fields.append(make_field("degree", degree, conf, degree_line, entry_id=eid))

    if institution_line is not None:
        text = strip_bullet(institution_line.text)
        split = INSTITUTION_SEPARATOR in text
        institution = text.split(INSTITUTION_SEPARATOR, 1)[0].strip()
        conf, _ = ConfidenceCalculator.education_field("institution", institution, matched_pattern=split)
        fields.append(make_field("institution", institution, conf, institution_line, entry_id=eid))
    else:
        fields.append(empty_field("institution", "Institution not detected - add manually", entry_id=eid))

    field_of_study = extract_field_of_study(degree)
    if field_of_study:
        conf, _ = ConfidenceCalculator.education_field("field", field_of_study)
        fields.append(make_field("field", field_of_study, conf, degree_line, entry_id=eid))
    else:
        fields.append(empty_field("field", "Field of study not detected", entry_id=eid))

    start, end = _assign_dates(date_tokens(date_line.text)) if date_line is not None else ("", "")
    for name, value in (("startDate", start), ("endDate", end)):
        if value:
            conf, _ = ConfidenceCalculator.education_field(name, value, matched_pattern=True)
            fields.append(make_field(name, value, conf, date_line, entry_id=eid))
        else:
            fields.append(empty_field(name, f"No {'start' if name == 'startDate' else 'end'} date found", entry_id=eid))

    for line in entry_lines:
        m = GPA_RE.search(line.text)
        if m:
            conf, _ = ConfidenceCalculator.education_field("gpa", m.group(1))
            fields.append(make_field("gpa", m.group(1), conf, line, entry_id=eid))
            break

    return fields


def extract_education(lines: List[SourceLine]) -> List[ParsedField]:
    fields: List[ParsedField] = []
    i = 0
    n = len(lines)

    while i < n:
        if not looks_like_degree(lines[i].text):
            i += 1
            continue

        degree_line = lines[i]
        institution_line = None
        date_line = None
        j = i + 1

        # Institution: next line unless it starts another degree or is only dates
        if j < n and not looks_like_degree(lines[j].text):
            if looks_like_date_line(lines[j].text):
                date_line = lines[j]
            else:
                institution_line = lines[j]
            j += 1

        if date_line is None and j < n and not looks_like_degree(lines[j].text) and date_tokens(lines[j].text):
            date_line = lines[j]
            j += 1

        # "MIT - 2016 - 2020" carries both institution and dates
        if date_line is None and institution_line is not None:
            trailing = institution_line.text.split(INSTITUTION_SEPARATOR, 1)[1:]
            if trailing and date_tokens(trailing[0]):
                date_line = institution_line

        # Remaining non-degree lines (honors, GPA, coursework) belong to this entry
        k = j
        while k < n and not looks_like_degree(lines[k].text):
            k += 1
        entry_lines = lines[i:k]

        logger.debug(f"Education entry at line {degree_line.number}: {degree_line.text!r}")
        fields.extend(_entry_fields(degree_line, institution_line, date_line, entry_lines))
        i = k

    return fields
