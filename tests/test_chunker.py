from __future__ import annotations

import pytest

from readaloud.text.chunker import (
    Chunk,
    chunk_text,
    normalize_whitespace,
    split_sentences,
)

SAMPLE = (
    "The quick brown fox jumps over the lazy dog. Pack my box with five dozen "
    "liquor jugs!   Sphinx of black quartz, judge my vow?\n\nHow vexingly quick "
    "daft zebras jump... The five boxing wizards jump quickly. Pi is roughly "
    "3.14159 and that is close enough for most purposes. A tail without a stop"
)


def texts(chunks: tuple[Chunk, ...]) -> list[str]:
    return [c.text for c in chunks]


def test_empty_input_yields_no_chunks() -> None:
    assert chunk_text("", 100) == ()
    assert chunk_text("   \n\t  ", 100) == ()


def test_short_text_fits_in_one_chunk() -> None:
    assert texts(chunk_text("Hello world. Bye.", 100)) == ["Hello world. Bye."]


def test_sentences_that_only_fit_alone_are_separate_chunks() -> None:
    assert texts(chunk_text("A. B. C.", 3)) == ["A.", "B.", "C."]


def test_separator_counts_towards_size() -> None:
    # "A. B." is 5 characters
    assert texts(chunk_text("A. B. C.", 5)) == ["A. B.", "C."]
    assert texts(chunk_text("A. B. C.", 4)) == ["A.", "B.", "C."]


def test_single_oversized_word_is_emitted_unsplit() -> None:
    word = "supercalifragilisticexpialidocious"
    chunks = chunk_text(word, 10)

    assert texts(chunks) == [word]
    assert chunks[0].oversized
    assert chunks[0].size_bound == 10


def test_oversized_sentence_falls_back_to_words() -> None:
    sentence = "one two three four five six seven eight nine ten."
    chunks = chunk_text(sentence, 15)

    assert texts(chunks) == ["one two three", "four five six", "seven eight", "nine ten."]
    assert all(len(c.text) <= 15 for c in chunks)


def test_long_word_inside_sentence_stands_alone() -> None:
    chunks = chunk_text("tiny words then incomprehensibilities end.", 12)

    assert texts(chunks) == ["tiny words", "then", "incomprehensibilities", "end."]
    assert [c.oversized for c in chunks] == [False, False, True, False]


def test_word_packing_only_applies_to_oversized_sentences() -> None:
    text = "Short one. This sentence is much too long to fit. Tiny."
    chunks = chunk_text(text, 20)

    assert chunks[0].text == "Short one."
    assert chunks[-1].text.endswith("Tiny.")


def test_leftover_words_can_absorb_next_sentence() -> None:
    chunks = chunk_text("alpha beta gamma delta. Hi.", 12)

    assert texts(chunks) == ["alpha beta", "gamma delta.", "Hi."]
    chunks = chunk_text("alpha beta gamma. Hi.", 12)
    assert texts(chunks) == ["alpha beta", "gamma. Hi."]


def test_text_without_terminal_marker_is_one_sentence() -> None:
    assert split_sentences("no punctuation here at all") == ["no punctuation here at all"]


def test_sentence_split_keeps_runs_of_markers_and_decimals() -> None:
    assert split_sentences("Wait... what?! Pi is 3.14. End") == [
        "Wait...", "what?!", "Pi is 3.14.", "End",
    ]


def test_normalize_whitespace() -> None:
    assert normalize_whitespace("  a\n\tb   c  ") == "a b c"


@pytest.mark.parametrize("max_size", [1, 7, 20, 45, 80, 300])
def test_size_bound_coverage_and_indices(max_size: int) -> None:
    chunks = chunk_text(SAMPLE, max_size)

    assert [c.index for c in chunks] == list(range(len(chunks)))
    for c in chunks:
        assert c.text
        assert len(c.text) <= max_size or " " not in c.text
    assert normalize_whitespace(" ".join(texts(chunks))) == normalize_whitespace(SAMPLE)


def test_non_positive_size_is_rejected() -> None:
    with pytest.raises(ValueError):
        chunk_text("Hello.", 0)
    with pytest.raises(ValueError):
        chunk_text("Hello.", -5)


def test_chunks_are_immutable() -> None:
    chunk = chunk_text("Hello.", 10)[0]
    with pytest.raises(AttributeError):
        chunk.text = "changed"  # type: ignore[misc]
