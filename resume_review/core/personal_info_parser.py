"""
Personal-info extraction from the region above the first section header.

Contact fields (email, phone, URLs, location) are found by regex anywhere in
the region; the full name is a positional guess from the first line.
"""

import logging
import re
from typing import List, Optional, Tuple

from resume_review.core.confidence_calculator import ConfidenceCalculator
from resume_review.core.field_builder import empty_field, make_field
from resume_review.core.schemas import ParsedField, SourceLine

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"\b[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}\b")
PHONE_RE = re.compile(r"(?<!\d)(?:\+?\d{1,3}[-.\s]?)?\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}(?!\d)")
URL_RE = re.compile(
    r"(?:https?://|www\.)[^\s<>()|,]+|(?<![@\w.])(?:[\w-]+\.)*linkedin\.com/[^\s<>()|,]+",
    re.IGNORECASE,
)
POSTAL_CODE_RE = re.compile(r"\b\d{5}(?:-\d{4})?\b")
STATE_CODES = (
    "AL AK AZ AR CA CO CT DE FL GA HI ID IL IN IA KS KY LA ME MD MA MI MN MS MO MT NE NV NH NJ "
    "NM NY NC ND OH OK OR PA RI SC SD TN TX UT VT VA WA WV WI WY DC"
).split()
# Comma required: "AL JOHNSON" and "MARIA DE LA CRUZ" are names
STATE_ABBREV_RE = re.compile(r",\s*\b(?:" + "|".join(STATE_CODES) + r")\b")
NAME_SEGMENT_SPLIT_RE = re.compile(r"\s{2,}|\s*[/|]\s*")
NAME_CHARS_RE = re.compile(r"[A-Za-z][A-Za-z\s\-'.]*")

LOCATION_PATTERNS: List[Tuple[re.Pattern, bool]] = [
    # (pattern, has_state_code)
    (re.compile(r"\b[A-Z][a-zA-Z.]+(?:\s[A-Z][a-zA-Z.]+)*,\s*[A-Z]{2}(?:\s+\d{5}(?:-\d{4})?)?\b"), True),
    (re.compile(r"\b[A-Z][a-z]+(?:\s[A-Z][a-z]+)*,\s*[A-Z][a-z]+(?:\s[A-Z][a-z]+)*\b"), False),
]
LOCATION_SCAN_LINES = 10

JOB_TITLE_KEYWORDS = {
    "manager", "engineer", "director", "developer", "designer", "analyst",
    "consultant", "specialist", "coordinator", "administrator", "architect",
    "scientist", "lead", "senior", "junior", "intern", "officer", "president",
    "vp", "executive", "assistant", "representative", "technician",
    "supervisor", "head", "chief", "ceo", "cto", "cfo", "coo", "founder",
    "programmer", "accountant", "recruiter", "strategist", "owner", "partner",
}


def _clean_url(url: str) -> str:
    return url.rstrip(".,;:)")


def _name_candidates(first_line: str) -> List[str]:
    """Strip contact noise from the first line and split it into candidate segments."""
    t = EMAIL_RE.sub(" ", first_line)
    t = URL_RE.sub(" ", t)
    t = PHONE_RE.sub(" ", t)
    t = POSTAL_CODE_RE.sub(" ", t)
    t = STATE_ABBREV_RE.sub(" ", t)
    segments = [s.strip(" ,;:-–—•") for s in NAME_SEGMENT_SPLIT_RE.split(t)]
    return [" ".join(s.split()) for s in segments if s.strip(" ,;:-–—•")]


def _looks_like_name(segment: str) -> bool:
    words = segment.split()
    if not 2 <= len(words) <= 4:
        return False
    if not NAME_CHARS_RE.fullmatch(segment):
        return False
    return not any(w.lower().strip(".'-") in JOB_TITLE_KEYWORDS for w in words)


def guess_full_name(first_line: str) -> Tuple[Optional[str], bool]:
    """
    Two-pass name heuristic over the first line.

    Returns (name, used_fallback). The first segment with 2-4 name-like words
    and no job-title keyword wins; otherwise the first segment is returned
    unfiltered, which can pick a job title on malformed headers.
    """
    candidates = _name_candidates(first_line)
    if not candidates:
        return None, False
    for segment in candidates:
        if _looks_like_name(segment):
            return segment, False
    return candidates[0], True


def _first_match(lines: List[SourceLine], pattern: re.Pattern, accept=None) -> Tuple[Optional[str], Optional[SourceLine]]:
    for line in lines:
        for m in pattern.finditer(line.text):
            value = m.group(0).strip()
            if accept is None or accept(value):
                return value, line
    return None, None


def _find_location(lines: List[SourceLine]) -> Tuple[Optional[str], Optional[SourceLine], bool]:
    for line in lines[:LOCATION_SCAN_LINES]:
        t = EMAIL_RE.sub(" ", line.text)
        t = URL_RE.sub(" ", t)
        for pattern, has_state_code in LOCATION_PATTERNS:
            m = pattern.search(t)
            if m:
                return m.group(0).strip(), line, has_state_code
    return None, None, False


def extract_personal_info(lines: List[SourceLine]) -> List[ParsedField]:
    """Fields: fullName, email, phone, location, linkedin, website (always all six)."""
    fields: List[ParsedField] = []

    # --- Full name (first line only) ---
    name, used_fallback = guess_full_name(lines[0].text) if lines else (None, False)
    if name:
        conf, method = ConfidenceCalculator.full_name(name, used_fallback=used_fallback)
        warnings = ["Name detection uncertain - verify"] if conf < 0.7 else []
        logger.debug(f"Name guess {name!r} via {method} ({conf:.2f})")
        fields.append(make_field("fullName", name, conf, lines[0], warnings=warnings))
    else:
        fields.append(empty_field("fullName", "No name found in document"))

    # --- Email / phone ---
    email, email_line = _first_match(lines, EMAIL_RE)
    if email:
        conf, _ = ConfidenceCalculator.email(email)
        fields.append(make_field("email", email, conf, email_line))
    else:
        fields.append(empty_field("email", "No email address found in document"))

    phone, phone_line = _first_match(lines, PHONE_RE)
    if phone:
        conf, _ = ConfidenceCalculator.phone(phone)
        fields.append(make_field("phone", phone, conf, phone_line))
    else:
        fields.append(empty_field("phone", "No phone number found in document"))

    # --- Location ---
    location, location_line, has_state_code = _find_location(lines)
    if location:
        conf, _ = ConfidenceCalculator.location(location, has_state_code=has_state_code)
        fields.append(make_field("location", location, conf, location_line))
    else:
        fields.append(empty_field("location", "Location not detected - add manually"))

    # --- URLs: linkedin vs. everything else, first match wins per field ---
    linkedin, linkedin_line = _first_match(
        lines, URL_RE, accept=lambda u: "linkedin" in u.lower()
    )
    if linkedin:
        linkedin = _clean_url(linkedin)
        # Scored before the scheme is filled in
        conf, _ = ConfidenceCalculator.url(linkedin, url_type="linkedin")
        if not linkedin.lower().startswith(("http://", "https://")):
            linkedin = f"https://{linkedin}"
        fields.append(make_field("linkedin", linkedin, conf, linkedin_line))
    else:
        fields.append(empty_field("linkedin", "No LinkedIn profile found"))

    website, website_line = _first_match(
        lines, URL_RE, accept=lambda u: "linkedin" not in u.lower()
    )
    if website:
        website = _clean_url(website)
        conf, _ = ConfidenceCalculator.url(website, url_type="website")
        fields.append(make_field("website", website, conf, website_line))
    else:
        fields.append(empty_field("website", "No website found"))

    return fields
