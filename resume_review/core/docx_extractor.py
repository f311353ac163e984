from io import BytesIO
from typing import List

from docx import Document


def extract_docx_text(docx_bytes: bytes) -> str:
    """
    Deterministically extract raw paragraph text from a Word document.
    One paragraph per line; empty paragraphs are kept as blank lines so that
    section spacing survives.
    """
    doc = Document(BytesIO(docx_bytes))
    out: List[str] = []
    for p in doc.paragraphs:
        out.append((p.text or "").strip())
    return "\n".join(out)
