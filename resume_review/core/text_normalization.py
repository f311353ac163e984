"""
Text normalization helpers shared by the extractors and parsers.

Kept deliberately conservative: extraction artifacts are fixed only where the
heuristics downstream depend on it (line endings, invisible characters,
letter-spaced headings, bullet prefixes). Everything else is left verbatim so
that provenance snippets match the source.
"""

import re


ZERO_WIDTH_RE = re.compile(r"[\u200b\u200c\u200d\u2060\ufeff]")
NBSP_RE = re.compile(r"[\u00a0\u2007\u202f]")
SPACED_CHARS_RE = re.compile(r"^(?:[A-Za-z0-9@.()\-\+&]\s+){2,}[A-Za-z0-9@.()\-\+&]+$")
BULLET_RE = re.compile(r"^\s*(?:[•·▪●◦‣∙○■□➢➤►–—*]|-(?=\s))\s*")


def normalize_text(text: str) -> str:
    """Normalize line endings and strip invisible characters. Line count is preserved."""
    if not text:
        return ""
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = ZERO_WIDTH_RE.sub("", text)
    text = NBSP_RE.sub(" ", text)
    return text


def despace_if_needed(text: str) -> str:
    """
    Fix PDFs that extract text with spaces between characters.

    Examples:
      'E X P E R I E N C E' -> 'EXPERIENCE'
      'W O R K   H I S T O R Y' -> 'WORK HISTORY'   (preserves word boundary)
    """
    t = text.strip()
    if not t:
        return t

    # Only apply when the line is mostly single characters separated by spaces
    if SPACED_CHARS_RE.match(t):
        parts = re.split(r"\s{2,}", t)
        parts = ["".join(p.split()) for p in parts]
        return " ".join([p for p in parts if p])

    return t


def is_bulleted(text: str) -> bool:
    return bool(BULLET_RE.match(text))


def strip_bullet(text: str) -> str:
    return BULLET_RE.sub("", text, count=1).strip()


def collapse_whitespace(text: str) -> str:
    return " ".join(text.split())


def printable_length(text: str) -> int:
    """Count of printable characters once surrounding whitespace is trimmed."""
    return sum(1 for c in text.strip() if c.isprintable())
