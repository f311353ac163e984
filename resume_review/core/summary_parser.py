from typing import List

from resume_review.core.confidence_calculator import ConfidenceCalculator
from resume_review.core.field_builder import empty_field, make_field
from resume_review.core.schemas import ParsedField, SourceLine
from resume_review.core.text_normalization import collapse_whitespace


def extract_summary(lines: List[SourceLine]) -> List[ParsedField]:
    """All summary lines joined with single spaces. One field, possibly empty."""
    summary = collapse_whitespace(" ".join(line.text for line in lines))
    if not summary:
        return [empty_field("summary", "No summary found")]
    conf, _ = ConfidenceCalculator.summary(summary)
    return [make_field("summary", summary, conf, lines[0])]
