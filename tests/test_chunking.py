"""
Tests for splitting text into chunks and merging them back
"""
import random

import pytest

from src.haunted import chunking
from src.haunted.chunking import chunk_text, merge_chunks, merge_chunks_sequential
from src.haunted.models import TextChunk

WORDS = ["ghost", "lecture", "crypt", "syllabus", "unit", "moonlit", "raven", "topic"]


def random_document(seed: int, length: int) -> str:
    """Words with a sprinkling of sentence ends, line breaks and paragraph breaks"""
    rng = random.Random(seed)
    parts = []
    size = 0
    while size < length:
        token = rng.choice(WORDS)
        roll = rng.random()
        if roll < 0.05:
            token += ".\n\n"
        elif roll < 0.12:
            token += "\n"
        elif roll < 0.25:
            token += ". "
        else:
            token += " "
        parts.append(token)
        size += len(token)
    return "".join(parts).strip()


def make_chunk(index: int, content: str) -> TextChunk:
    return TextChunk(index=index, content=content, character_count=len(content))


class TestChunkText:

    def test_empty_text(self):
        assert chunk_text("") == []

    def test_text_smaller_than_max(self):
        chunks = chunk_text("A short syllabus.", 100, 10)
        assert len(chunks) == 1
        assert chunks[0].index == 0
        assert chunks[0].content == "A short syllabus."
        assert chunks[0].character_count == 17
        assert chunks[0].is_processed is False

    def test_exactly_max_size_is_one_chunk(self):
        text = "x" * 100
        chunks = chunk_text(text, 100, 0)
        assert [c.content for c in chunks] == [text]

    def test_one_over_max_size(self):
        text = "x" * 101
        chunks = chunk_text(text, 100, 0)
        assert [c.character_count for c in chunks] == [100, 1]

    def test_single_character(self):
        assert [c.content for c in chunk_text("a", 100, 0)] == ["a"]

    def test_long_repeated_text_with_overlap(self):
        text = "a" * 50000
        chunks = chunk_text(text, 30000, 200)

        assert len(chunks) >= 2
        assert all(c.character_count <= 30000 for c in chunks)
        # dropping the 200 character overlap from later chunks rebuilds the original
        rebuilt = chunks[0].content + "".join(c.content[200:] for c in chunks[1:])
        assert rebuilt == text

    def test_prefers_paragraph_boundaries(self):
        text = "A" * 150 + "\n\n" + "B" * 150
        chunks = chunk_text(text, 200, 0)
        assert [c.content for c in chunks] == ["A" * 150 + "\n\n", "B" * 150]

    def test_falls_back_to_line_break(self):
        text = "A" * 150 + "\n" + "B" * 150
        chunks = chunk_text(text, 200, 0)
        assert chunks[0].content == "A" * 150 + "\n"

    def test_falls_back_to_sentence_end(self):
        text = "A" * 150 + ". " + "B" * 150
        chunks = chunk_text(text, 200, 0)
        assert chunks[0].content == "A" * 150 + ". "

    def test_hard_cut_without_boundaries(self):
        text = "A" * 450
        chunks = chunk_text(text, 200, 0)
        assert [c.character_count for c in chunks] == [200, 200, 50]

    def test_boundary_search_only_looks_back_500_characters(self):
        # the only paragraph break is more than 500 characters before the cut
        text = "A" * 100 + "\n\n" + "B" * 1500
        chunks = chunk_text(text, 1000, 0)
        assert chunks[0].character_count == 1000

    def test_overlap_starts_next_chunk_before_previous_end(self):
        text = "A" * 150 + "\n\n" + "B" * 150
        chunks = chunk_text(text, 200, 20)
        assert chunks[1].content.startswith(chunks[0].content[-20:])

    def test_boundary_too_close_to_start_is_skipped(self):
        # cutting after the paragraph break would give a chunk shorter than the overlap
        text = "A" * 150 + "\n\n" + "B" * 1000
        chunks = chunk_text(text, 600, 200)
        assert [c.character_count for c in chunks] == [600, 600, 352]
        assert all(later.content.startswith(earlier.content[-200:]) for earlier, later in zip(chunks, chunks[1:]))
        assert merge_chunks(chunks, 200) == text

    def test_overlap_larger_than_chunk_still_progresses(self):
        text = "abcdefghij" * 30
        chunks = chunk_text(text, 50, 500)
        assert merge_chunks_sequential(chunks) == text

    def test_invalid_sizes_are_clamped(self):
        chunks = chunk_text("abc", 0, -5)
        assert [c.content for c in chunks] == ["a", "b", "c"]


@pytest.mark.parametrize("seed", range(20))
@pytest.mark.parametrize("max_size", [100, 137, 500, 1000])
def test_chunking_without_overlap_is_complete(seed, max_size):
    text = random_document(seed, 4000 + seed * 97)
    chunks = chunk_text(text, max_size, 0)

    assert "".join(c.content for c in chunks) == text
    assert all(c.character_count == len(c.content) <= max_size for c in chunks)
    assert [c.index for c in chunks] == list(range(len(chunks)))


@pytest.mark.parametrize("seed", range(10))
def test_indices_sequential_with_overlap(seed):
    text = random_document(seed, 3000)
    chunks = chunk_text(text, 300, 40)
    assert [c.index for c in chunks] == list(range(len(chunks)))
    assert all(c.character_count <= 300 for c in chunks)


class TestMergeChunks:

    def test_empty(self):
        assert merge_chunks([]) == ""
        assert merge_chunks_sequential([]) == ""

    def test_single_chunk(self):
        assert merge_chunks([make_chunk(0, "  Only chunk\n")], 200) == "  Only chunk\n"

    def test_removes_overlap(self):
        chunks = [make_chunk(0, "The raven spoke twice"), make_chunk(1, "spoke twice at midnight")]
        assert merge_chunks(chunks, 11) == "The raven spoke twice at midnight"

    def test_sorts_out_of_order_chunks(self):
        chunks = [make_chunk(2, "third"), make_chunk(0, "first "), make_chunk(1, "second ")]
        assert merge_chunks_sequential(chunks) == "first second third"

    def test_half_window_match(self):
        # the model rewrote the start of the overlap, only its second half survived
        chunks = [make_chunk(0, "Intro text abcdefghij"), make_chunk(1, "fghij and more")]
        assert merge_chunks(chunks, 10) == "Intro text abcdefghij and more"

    def test_match_too_far_into_chunk_is_ignored(self):
        chunks = [make_chunk(0, "abc"), make_chunk(1, "xxxxxxxxxxabc tail")]
        assert merge_chunks(chunks, 3) == "abc\nxxxxxxxxxxabc tail"

    def test_no_overlap_found_uses_newline(self):
        chunks = [make_chunk(0, "Hello world"), make_chunk(1, "Completely different")]
        assert merge_chunks(chunks, 5) == "Hello world\nCompletely different"

    def test_zero_overlap_concatenates(self):
        chunks = [make_chunk(0, "Hello "), make_chunk(1, "world")]
        assert merge_chunks(chunks, 0) == "Hello world"

    def test_does_not_mutate_chunks(self):
        chunks = [make_chunk(1, "b tail"), make_chunk(0, "head b")]
        merge_chunks(chunks, 2)
        assert [c.index for c in chunks] == [1, 0]
        assert all(c.is_processed is False for c in chunks)

    def test_falls_back_to_sequential_on_error(self, monkeypatch):
        def explode(*args):
            raise RuntimeError("boom")

        monkeypatch.setattr(chunking, "_strip_overlap", explode)
        chunks = [make_chunk(1, "world"), make_chunk(0, "Hello ")]
        assert merge_chunks(chunks, 200) == "Hello world"


@pytest.mark.parametrize("seed", range(15))
def test_merge_recovers_original_text(seed):
    text = random_document(seed, 6000)
    overlapped = chunk_text(text, 1000, 50)
    plain = chunk_text(text, 1000, 0)

    assert len(overlapped) > 1
    assert merge_chunks(overlapped, 50) == merge_chunks_sequential(plain) == text


def test_merge_long_repeated_text():
    text = "a" * 50000
    assert merge_chunks(chunk_text(text, 30000, 200), 200) == text
