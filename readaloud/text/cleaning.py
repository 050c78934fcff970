"""Text cleanup applied after extraction and before synthesis."""

from __future__ import annotations

import re

from .chunker import normalize_whitespace

SPACE_BEFORE_TERMINAL = re.compile(r"\s+([.!?])")


def clean_extracted_text(text: str) -> str:
    """Collapse whitespace and drop spaces left before terminal punctuation.

    PDF text layers often split a sentence's final period into its own text
    item, which comes out as ``"end ."`` after joining.
    """
    return SPACE_BEFORE_TERMINAL.sub(r"\1", normalize_whitespace(text))


def clean_text_for_tts(text: str) -> str:
    return normalize_whitespace(text)
