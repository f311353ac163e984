from typing import Dict, List, Optional

from resume_review.core.schemas import ExtractedText, ParsedField, Provenance, SourceLine


def lines_for(extracted: ExtractedText, start: int, end: int) -> List[SourceLine]:
    """Non-empty lines in [start, end) with their positions, stripped."""
    all_lines = extracted.lines
    out: List[SourceLine] = []
    for idx in range(max(0, start), min(end, len(all_lines))):
        text = all_lines[idx].strip()
        if text:
            out.append(SourceLine(index=idx, text=text, page=extracted.page_for_line(idx)))
    return out


def provenance_for(line: SourceLine, value: str) -> Provenance:
    offset = line.text.find(value) if value else -1
    return Provenance(
        page=line.page,
        line=line.number,
        offset=offset if offset >= 0 else None,
        source_text=line.text,
    )


def make_field(
    field_name: str,
    value: str,
    confidence: float,
    line: Optional[SourceLine],
    *,
    entry_id: Optional[str] = None,
    metadata: Optional[Dict[str, str]] = None,
    warnings: Optional[List[str]] = None,
) -> ParsedField:
    """Build a pending field with provenance pointing at the source line."""
    return ParsedField(
        field_name=field_name,
        original_value=value,
        corrected_value=value,
        confidence=confidence,
        provenance=provenance_for(line, value) if line is not None else None,
        entry_id=entry_id,
        metadata=metadata or {},
        warnings=warnings or [],
    )


def empty_field(field_name: str, warning: str, *, entry_id: Optional[str] = None) -> ParsedField:
    """A slot that was looked for but not found: empty value, confidence 0."""
    return ParsedField(
        field_name=field_name,
        original_value="",
        corrected_value="",
        confidence=0.0,
        entry_id=entry_id,
        warnings=[warning],
    )
