"""
Confidence scoring for extracted resume fields.

Each extractor asks ConfidenceCalculator for a score so that the rules live in
one place. Scores let the caller decide whether a parse needs human review
before it is accepted.

Confidence Scale:
  0.95  = Exact regex match (email, dates)
  0.9   = Regex match with minor ambiguity (phone)
  0.8   = Structural match (company split on " - ", summary section)
  0.7   = Positional heuristic with good signals (job title)
  0.5   = Ambiguous but extractable
  <0.5  = Low confidence (should prompt for clarification)
  0.0   = Nothing found (empty slot)
"""

import re
from typing import Iterable, Literal, Optional, Tuple


ReviewPolicy = Literal["review_required", "optional_review", "quick_accept"]

NON_NAME_WORDS = {
    "resume", "cv", "curriculum", "vitae", "profile", "contact", "email", "phone",
}


def clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def mean(values: Iterable[float]) -> float:
    """Arithmetic mean that is defined as 0.0 for an empty input (never NaN)."""
    items = [v for v in values if v is not None]
    if not items:
        return 0.0
    return clamp(sum(items) / len(items))


def review_policy(confidence: float, review_required_below: float, quick_accept_at: float) -> ReviewPolicy:
    """
    Classify a confidence score against caller-owned thresholds.

    The thresholds come from configuration; the core only exposes the numbers.
    """
    if confidence < review_required_below:
        return "review_required"
    if confidence >= quick_accept_at:
        return "quick_accept"
    return "optional_review"


class ConfidenceCalculator:
    """Central place for all extraction confidence logic."""

    @staticmethod
    def email(email_value: str) -> Tuple[float, str]:
        if not email_value:
            return 0.0, "no_email_found"
        if not re.fullmatch(r"[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}", email_value, re.IGNORECASE):
            return 0.4, "invalid_email_format"
        return 0.95, "regex_exact"

    @staticmethod
    def phone(phone_value: str) -> Tuple[float, str]:
        if not phone_value:
            return 0.0, "no_phone_found"
        digits_only = re.sub(r"\D", "", phone_value)
        if len(digits_only) < 7:
            return 0.3, "too_few_digits"
        return 0.9, "regex_exact"

    @staticmethod
    def url(url_value: str, url_type: str = "website") -> Tuple[float, str]:
        """
        Types: linkedin, website.
        URLs found without a scheme score lower than fully qualified ones.
        """
        if not url_value:
            return 0.0, "no_url_found"
        has_scheme = url_value.lower().startswith(("http://", "https://"))
        if url_type == "linkedin":
            if "linkedin.com" in url_value.lower():
                return (0.95, "linkedin_exact") if has_scheme else (0.85, "linkedin_no_scheme")
            return 0.5, "linkedin_invalid"
        if not has_scheme:
            return 0.6, "website_no_scheme"
        return 0.9, "website_valid"

    @staticmethod
    def full_name(name_value: str, used_fallback: bool = False) -> Tuple[float, str]:
        """
        Positional name guess from the first line of the document.

        Factors:
          - 2-4 words (first + last, optional middle names)
          - Each word capitalized
          - No resume boilerplate words ("Resume", "CV", "Contact")
          - Fallback segments (failed the job-title filter) are capped low
        """
        if not name_value:
            return 0.0, "no_name_found"

        words = name_value.split()
        if len(words) < 2 or len(words) > 4:
            confidence, method = 0.3, "word_count_out_of_range"
        elif any(w.lower().strip(".,") in NON_NAME_WORDS for w in words):
            confidence, method = 0.2, "contains_non_name_words"
        elif not all(re.fullmatch(r"[A-Z][A-Za-z'.\-]*", w) for w in words):
            confidence, method = 0.4, "irregular_capitalization"
        else:
            confidence, method = 0.85, "heuristic_first_line"

        if used_fallback:
            confidence = min(confidence, 0.4)
            method = "fallback_first_segment"
        return clamp(confidence), method

    @staticmethod
    def location(location_value: str, has_state_code: bool = False) -> Tuple[float, str]:
        if not location_value:
            return 0.0, "no_location_found"
        if has_state_code:
            return 0.75, "city_state_code"
        return 0.6, "city_region"

    @staticmethod
    def experience_field(
        field_name: str,  # "position", "company", "startDate", "endDate", "current", "description", "achievement"
        field_value: Optional[str],
        matched_pattern: bool = False,
    ) -> Tuple[float, str]:
        """
        Different fields have different confidence profiles:
          - Position: positional guess, medium
          - Company: higher when the line splits cleanly on " - "
          - Dates: high when the date regex matched
          - Body text: accumulated lines, medium-high
        """
        if not field_value:
            return 0.0, f"no_{field_name}_found"

        if field_name == "position":
            return 0.7, "position_positional"
        elif field_name == "company":
            return (0.8, "company_split") if matched_pattern else (0.6, "company_whole_line")
        elif field_name in ("startDate", "endDate"):
            return (0.95, "date_regex") if matched_pattern else (0.4, "date_inferred")
        elif field_name == "current":
            return (0.9, "current_keyword") if matched_pattern else (0.8, "current_from_end_date")
        elif field_name in ("description", "achievement"):
            return 0.75, f"{field_name}_accumulated"
        return 0.6, f"field_{field_name}_unknown"

    @staticmethod
    def education_field(
        field_name: str,  # "degree", "institution", "field", "startDate", "endDate", "gpa"
        field_value: Optional[str],
        matched_pattern: bool = False,
    ) -> Tuple[float, str]:
        if not field_value:
            return 0.0, f"no_{field_name}_found"

        if field_name == "degree":
            return 0.85, "degree_keyword"
        elif field_name == "institution":
            return (0.8, "institution_split") if matched_pattern else (0.65, "institution_whole_line")
        elif field_name == "field":
            return 0.7, "field_in_phrase"
        elif field_name in ("startDate", "endDate"):
            return (0.9, "date_regex") if matched_pattern else (0.4, "date_inferred")
        elif field_name == "gpa":
            return 0.9, "gpa_regex"
        return 0.6, f"field_{field_name}_unknown"

    @staticmethod
    def skill(skill_value: str) -> Tuple[float, str]:
        if not skill_value:
            return 0.0, "empty_skill"
        if len(skill_value) < 2 or len(skill_value) > 49:
            return 0.2, "skill_length_invalid"
        return 0.85, "section_token"

    @staticmethod
    def summary(summary_value: str) -> Tuple[float, str]:
        if not summary_value:
            return 0.0, "no_summary_found"
        return 0.8, "summary_section"
