"""
Date patterns shared by the experience and education parsers.

Only English month names/abbreviations followed by a year, bare years, and the
"Present"/"Current" keywords are recognized. Other formats are left alone.
"""

import re
from typing import List

MONTHS = (
    r"(?:jan(?:uary)?|feb(?:ruary)?|mar(?:ch)?|apr(?:il)?|may|june?|july?|aug(?:ust)?"
    r"|sep(?:t(?:ember)?)?|oct(?:ober)?|nov(?:ember)?|dec(?:ember)?)"
)
YEAR = r"(?:19|20)\d{2}"
MONTH_YEAR = MONTHS + r"\.?\s+" + YEAR
ONGOING = r"(?:present|current)"
RANGE_SEP = r"\s*(?:-|–|—|to)\s*"

# A line "looks like a date line" if it has a month-year or a year range
DATE_LINE_RE = re.compile(
    rf"\b{MONTH_YEAR}\b|\b{YEAR}{RANGE_SEP}(?:{ONGOING}|{YEAR})\b",
    re.IGNORECASE,
)
# Individual tokens, in document order
DATE_TOKEN_RE = re.compile(rf"\b{MONTH_YEAR}\b|\b{YEAR}\b|\b{ONGOING}\b", re.IGNORECASE)
ONGOING_RE = re.compile(rf"^{ONGOING}$", re.IGNORECASE)


def is_date_line(text: str) -> bool:
    return bool(DATE_LINE_RE.search(text))


def date_tokens(text: str) -> List[str]:
    """All date tokens in order, e.g. 'Jan 2020 - Present' -> ['Jan 2020', 'Present']."""
    return [m.group(0) for m in DATE_TOKEN_RE.finditer(text)]


def is_ongoing(token: str) -> bool:
    return bool(ONGOING_RE.match(token.strip()))
