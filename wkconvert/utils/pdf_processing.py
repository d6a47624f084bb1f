"""PDF inspection helpers for converted documents."""

import io
from pathlib import Path
from typing import Optional, Union

from PyPDF2 import PdfReader


def page_count(pdf: Union[Path, str, bytes]) -> Optional[int]:
    """Get page count from a PDF path or raw PDF bytes, or None if unreadable."""
    try:
        if isinstance(pdf, bytes):
            reader = PdfReader(io.BytesIO(pdf))
        else:
            reader = PdfReader(str(pdf))
        return len(reader.pages)
    except Exception:
        return None


def looks_like_pdf(data: bytes) -> bool:
    """Check for the %PDF- magic header."""
    return data[:5] == b"%PDF-"
