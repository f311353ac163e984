"""
Experience parsing: a small cursor state machine over the experience span.

Expected shape of one entry (lines may be missing):

    Senior Engineer                <- position title
    Acme Corp - Remote             <- company " - " trailing text
    Jan 2020 - Present             <- date line
    • Built the billing pipeline   <- achievement bullets
    Owned on-call rotation         <- description text

A new entry starts when a title-like line is followed by a "company - text"
line. Every field of one entry shares an entry_id.
"""

import logging
from typing import List, Optional, Tuple

from resume_review.core.confidence_calculator import ConfidenceCalculator
from resume_review.core.dates import date_tokens, is_date_line, is_ongoing
from resume_review.core.field_builder import empty_field, make_field
from resume_review.core.schemas import ParsedField, SourceLine, new_id
from resume_review.core.text_normalization import is_bulleted, strip_bullet

logger = logging.getLogger(__name__)

COMPANY_SEPARATOR = " - "
MAX_TITLE_CHARS = 80
MAX_TITLE_WORDS = 8
MIN_BODY_CHARS = 5


def looks_like_title(text: str) -> bool:
    """Non-bulleted, reasonably short, and not a date line."""
    if is_bulleted(text) or is_date_line(text):
        return False
    t = text.strip()
    return 0 < len(t) <= MAX_TITLE_CHARS and len(t.split()) <= MAX_TITLE_WORDS


def looks_like_company(text: str) -> bool:
    """A 'company - text' line whose leading part is not a date."""
    if is_bulleted(text) or COMPANY_SEPARATOR not in text:
        return False
    head = text.split(COMPANY_SEPARATOR, 1)[0]
    return bool(head.strip()) and not date_tokens(head)


def split_company(text: str) -> Tuple[str, str]:
    """'Acme Corp - Remote' -> ('Acme Corp', 'Remote')."""
    parts = text.split(COMPANY_SEPARATOR)
    return parts[0].strip(), COMPANY_SEPARATOR.join(parts[1:]).strip()


class _EntryBuilder:
    """Collects one experience entry before it is turned into fields."""

    def __init__(self, title_line: SourceLine):
        self.entry_id = new_id()
        self.title_line = title_line
        self.company_line: Optional[SourceLine] = None
        self.date_line: Optional[SourceLine] = None
        self.description_lines: List[SourceLine] = []
        self.achievement_lines: List[SourceLine] = []

    def add_body(self, line: SourceLine) -> None:
        text = strip_bullet(line.text)
        if len(text) < MIN_BODY_CHARS:
            logger.debug(f"Dropping short body line {line.text!r} at line {line.number}")
            return
        if is_bulleted(line.text):
            self.achievement_lines.append(line)
        else:
            self.description_lines.append(line)

    def build(self) -> List[ParsedField]:
        eid = self.entry_id
        fields: List[ParsedField] = []

        position = self.title_line.text.strip()
        conf, _ = ConfidenceCalculator.experience_field("position", position)
        fields.append(make_field("position", position, conf, self.title_line, entry_id=eid))

        if self.company_line is not None:
            split = COMPANY_SEPARATOR in self.company_line.text
            company, trailing = split_company(self.company_line.text)
            conf, _ = ConfidenceCalculator.experience_field("company", company, matched_pattern=split)
            # "Acme - Jan 2020 - Present": the trailing text is the date, not a location
            metadata = {"location": trailing} if trailing and self.company_line is not self.date_line else {}
            fields.append(make_field("company", company, conf, self.company_line, entry_id=eid, metadata=metadata))
        else:
            fields.append(empty_field("company", "Company not detected - add manually", entry_id=eid))

        fields.extend(self._date_fields())

        if self.description_lines:
            description = " ".join(strip_bullet(line.text) for line in self.description_lines)
            conf, _ = ConfidenceCalculator.experience_field("description", description)
            fields.append(make_field("description", description, conf, self.description_lines[0], entry_id=eid))

        for line in self.achievement_lines:
            text = strip_bullet(line.text)
            conf, _ = ConfidenceCalculator.experience_field("achievement", text)
            fields.append(make_field("achievement", text, conf, line, entry_id=eid))

        return fields

    def _date_fields(self) -> List[ParsedField]:
        eid = self.entry_id
        if self.date_line is None:
            return [
                empty_field("startDate", "No start date found", entry_id=eid),
                empty_field("endDate", "No end date found", entry_id=eid),
                empty_field("current", "Could not tell whether this position is current", entry_id=eid),
            ]

        tokens = date_tokens(self.date_line.text)
        start = tokens[0] if tokens else ""
        end = tokens[1] if len(tokens) > 1 else ""
        current = bool(end) and is_ongoing(end)

        fields = []
        if start:
            conf, _ = ConfidenceCalculator.experience_field("startDate", start, matched_pattern=True)
            fields.append(make_field("startDate", start, conf, self.date_line, entry_id=eid))
        else:
            fields.append(empty_field("startDate", "No start date found", entry_id=eid))

        if end:
            conf, _ = ConfidenceCalculator.experience_field("endDate", end, matched_pattern=True)
            fields.append(make_field("endDate", end, conf, self.date_line, entry_id=eid))
        else:
            fields.append(empty_field("endDate", "No end date found", entry_id=eid))

        conf, _ = ConfidenceCalculator.experience_field("current", "true" if current else "false", matched_pattern=current)
        fields.append(make_field("current", "true" if current else "false", conf, self.date_line, entry_id=eid))
        return fields


def _read_entry_header(lines: List[SourceLine], i: int) -> Tuple[_EntryBuilder, int]:
    """Consume title, company and date lines starting at i. Returns (entry, next index)."""
    entry = _EntryBuilder(lines[i])
    j = i + 1
    n = len(lines)

    if j < n and not is_bulleted(lines[j].text):
        nxt = lines[j].text
        if looks_like_company(nxt):
            entry.company_line = lines[j]
            # "Acme Corp - Jan 2020 - Present" carries both company and dates
            if is_date_line(nxt):
                entry.date_line = lines[j]
            j += 1
        elif is_date_line(nxt):
            entry.date_line = lines[j]
            j += 1
        else:
            entry.company_line = lines[j]
            j += 1

    if entry.date_line is None and j < n and is_date_line(lines[j].text):
        entry.date_line = lines[j]
        j += 1

    return entry, j


def extract_experience(lines: List[SourceLine]) -> List[ParsedField]:
    fields: List[ParsedField] = []
    entry: Optional[_EntryBuilder] = None
    i = 0
    n = len(lines)

    while i < n:
        text = lines[i].text
        starts_entry = looks_like_title(text) and (
            entry is None or (i + 1 < n and looks_like_company(lines[i + 1].text))
        )
        if starts_entry:
            if entry is not None:
                fields.extend(entry.build())
            entry, i = _read_entry_header(lines, i)
            logger.debug(f"Experience entry at line {entry.title_line.number}: {entry.title_line.text!r}")
            continue

        if entry is None:
            logger.debug(f"Skipping line {lines[i].number} before first experience entry: {text!r}")
        else:
            entry.add_body(lines[i])
        i += 1

    if entry is not None:
        fields.extend(entry.build())

    return fields
