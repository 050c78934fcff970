"""PDF text extraction with PyMuPDF."""

from __future__ import annotations

import asyncio
import logging

import fitz  # PyMuPDF

from ..errors import ExtractionError
from ..text.cleaning import clean_extracted_text

log = logging.getLogger(__name__)


def extract_text(data: bytes) -> str:
    """Extract and clean the text layer of every page, in page order.

    Raises ExtractionError if the bytes are not a readable PDF or no text
    is found.
    """
    if not data:
        raise ExtractionError("Empty document")

    try:
        with fitz.open(stream=data, filetype="pdf") as doc:
            pages = [page.get_text("text") for page in doc]
    except (RuntimeError, ValueError) as e:
        raise ExtractionError(f"Unreadable PDF: {e}") from e

    text = clean_extracted_text(" ".join(pages))
    if not text:
        raise ExtractionError("No text found in PDF")

    log.info("Extracted text length: %d characters", len(text))
    log.debug("Sample text: %r", text[:200])
    return text


async def extract_text_async(data: bytes) -> str:
    """Run extraction in the thread pool since PyMuPDF is synchronous."""
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, extract_text, data)
