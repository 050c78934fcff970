"""Greedy sentence/word chunking of document text for TTS."""

from __future__ import annotations

import re
from dataclasses import dataclass

WHITESPACE = re.compile(r"\s+")

# A sentence runs up through one or more terminal markers followed by a
# space or the end of the text, so "3.14" stays whole. A trailing fragment
# without a marker is kept as the last sentence.
SENTENCE = re.compile(r"[^ ].*?[.!?]+(?= |$)|[^ ].*$")


@dataclass(frozen=True)
class Chunk:
    """One bounded-size unit of text.

    ``len(text) <= size_bound`` always holds, except for a single word longer
    than the bound. Such a word is emitted alone and unsplit on purpose.
    """

    index: int
    text: str
    size_bound: int

    @property
    def oversized(self) -> bool:
        return len(self.text) > self.size_bound


def normalize_whitespace(text: str) -> str:
    return WHITESPACE.sub(" ", text).strip()


def split_sentences(text: str) -> list[str]:
    """Split normalized text into sentences, keeping their punctuation."""
    return [s for s in (m.strip() for m in SENTENCE.findall(text)) if s]


class _Packer:
    """Accumulates pieces into chunks no longer than ``max_size``."""

    def __init__(self, max_size: int) -> None:
        self.max_size = max_size
        self.current = ""
        self.pieces: list[str] = []

    def fits(self, piece: str) -> bool:
        if not self.current:
            return len(piece) <= self.max_size
        return len(self.current) + 1 + len(piece) <= self.max_size

    def add(self, piece: str) -> None:
        self.current = f"{self.current} {piece}" if self.current else piece

    def flush(self) -> None:
        if self.current:
            self.pieces.append(self.current)
        self.current = ""

    def pack(self, piece: str) -> None:
        if not self.fits(piece):
            self.flush()
        self.add(piece)


def chunk_text(text: str, max_size: int = 300) -> tuple[Chunk, ...]:
    """Split ``text`` into chunks of at most ``max_size`` characters.

    Whole sentences are packed greedily. A sentence that cannot fit on its
    own is packed word by word instead, and a word longer than ``max_size``
    becomes a chunk by itself.
    """
    if max_size <= 0:
        raise ValueError(f"max_size must be positive, got {max_size}")

    normalized = normalize_whitespace(text)
    packer = _Packer(max_size)

    for sentence in split_sentences(normalized):
        if len(sentence) <= max_size:
            packer.pack(sentence)
            continue

        packer.flush()
        for word in sentence.split(" "):
            packer.pack(word)

    packer.flush()
    pieces = [p for p in packer.pieces if p]
    return tuple(
        Chunk(index=i, text=piece, size_bound=max_size)
        for i, piece in enumerate(pieces)
    )
