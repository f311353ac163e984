from io import BytesIO
from typing import Any, List, Tuple

import pdfplumber


def _words_to_text(page: Any, *, x_tolerance: float = 3, y_tolerance: float = 2, line_y_tolerance: float = 3) -> str:
    """
    Extract text from a PDF page using word objects.

    Groups words by vertical position (y-coordinate) in reading order, then
    joins them with single spaces. Multi-column layouts are not reconstructed.

    Args:
        page: pdfplumber page object
        x_tolerance: Distance tolerance for grouping characters into words
        y_tolerance: Distance tolerance for vertical grouping of characters
        line_y_tolerance: Distance tolerance for grouping words into lines

    Returns:
        Page text, one visual line per text line
    """
    words = page.extract_words(
        x_tolerance=x_tolerance,
        y_tolerance=y_tolerance,
        keep_blank_chars=False,
        use_text_flow=True,
    )

    if not words:
        return ""

    # Group words into lines by 'top' (y) coordinate
    words.sort(key=lambda w: (round(w["top"] / line_y_tolerance), w["x0"]))
    lines = []
    current_key = None
    current_words = []

    for w in words:
        key = round(w["top"] / line_y_tolerance)
        if current_key is None or key == current_key:
            current_words.append(w["text"])
            current_key = key
        else:
            lines.append(" ".join(current_words))
            current_words = [w["text"]]
            current_key = key

    if current_words:
        lines.append(" ".join(current_words))

    return "\n".join(lines)


def extract_pdf_text(pdf_bytes: bytes) -> Tuple[str, List[int]]:
    """
    Extract page text from every page of a PDF, pages separated by newlines.

    Returns:
        (text, page_starts) where page_starts[i] is the line index at which
        page i+1 begins in the returned text.
    """
    page_texts: List[str] = []
    page_starts: List[int] = []
    line_count = 0

    with pdfplumber.open(BytesIO(pdf_bytes)) as pdf:
        for page in pdf.pages:
            text = _words_to_text(page)
            page_starts.append(line_count)
            page_texts.append(text)
            line_count += len(text.split("\n"))

    return "\n".join(page_texts), page_starts
