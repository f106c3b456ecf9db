# text chunking and reassembly for size-limited llm calls
import logging
from typing import List, Sequence

from .boundaries import LINE, PARAGRAPH, SENTENCE, find_boundary, pattern
from .models import TextChunk

logger = logging.getLogger(__name__)

MAX_CHUNK_SIZE = 30000
OVERLAP_SIZE = 200
# how far back from a hard cut we look for a natural break
BOUNDARY_LOOKBACK = 500

CHUNK_BREAKS = [
    pattern(PARAGRAPH, r'\n\n'),
    pattern(LINE, r'\n'),
    pattern(SENTENCE, r'\. '),
]


def _make_chunk(index: int, content: str) -> TextChunk:
    return TextChunk(index=index, content=content, character_count=len(content), is_processed=False)


def chunk_text(text: str, max_chunk_size: int = MAX_CHUNK_SIZE, overlap_size: int = OVERLAP_SIZE) -> List[TextChunk]:
    """
    Split text into chunks of at most max_chunk_size characters.

    Cuts prefer paragraph breaks, then line breaks, then sentence ends found
    in the last 500 characters of each window, but never within overlap_size
    characters of the chunk start. Every chunk after the first
    starts overlap_size characters before the previous one ended so the llm
    sees some shared context; merge_chunks removes that region again.
    """
    if not text:
        return []

    max_chunk_size = max(1, max_chunk_size)
    overlap_size = max(0, overlap_size)

    # text fits in one chunk, return it as-is
    if len(text) <= max_chunk_size:
        return [_make_chunk(0, text)]

    chunks: List[TextChunk] = []
    position = 0

    while position < len(text):
        end = min(position + max_chunk_size, len(text))

        # only the final chunk may end wherever the text ends
        if end < len(text):
            # a cut inside the first overlap_size characters would leave nothing to overlap with
            search_start = max(position + overlap_size, end - BOUNDARY_LOOKBACK)
            boundary = find_boundary(text, search_start, end, CHUNK_BREAKS)
            if boundary is not None:
                end = boundary

        chunks.append(_make_chunk(len(chunks), text[position:end]))

        if end >= len(text):
            break

        # step back for overlap but always make forward progress
        next_position = end - overlap_size
        position = next_position if next_position > position else end

    logger.debug(f"Split {len(text)} characters into {len(chunks)} chunks (max={max_chunk_size}, overlap={overlap_size})")
    return chunks


def merge_chunks_sequential(chunks: Sequence[TextChunk]) -> str:
    """Concatenate chunk contents in index order with no overlap handling"""
    if not chunks:
        return ""
    ordered = sorted(chunks, key=lambda chunk: chunk.index)
    return "".join(chunk.content for chunk in ordered)


def _strip_overlap(merged: str, current: str, window: int):
    # look for the tail of what we have so far near the start of the next chunk
    if window <= 0:
        return None
    candidate = merged[-min(window, len(merged)):]
    if not candidate:
        return None
    return candidate, current.find(candidate)


def merge_chunks(chunks: Sequence[TextChunk], overlap_size: int = OVERLAP_SIZE) -> str:
    """
    Merge processed chunks back into one text, dropping the duplicated overlap.

    Falls back to plain sequential concatenation if anything goes wrong so a
    malformed llm response never breaks the pipeline.
    """
    if not chunks:
        return ""

    if len(chunks) == 1:
        return chunks[0].content

    # no overlap was created, nothing to detect
    if overlap_size <= 0:
        return merge_chunks_sequential(chunks)

    try:
        ordered = sorted(chunks, key=lambda chunk: chunk.index)
        merged = ordered[0].content

        for chunk in ordered[1:]:
            current = chunk.content

            for window in (overlap_size, overlap_size // 2):
                found = _strip_overlap(merged, current, window)
                if found is None:
                    continue
                candidate, overlap_index = found
                if overlap_index != -1 and overlap_index < overlap_size:
                    merged += current[overlap_index + len(candidate):]
                    break
            else:
                # no clear overlap, keep the texts from running together
                logger.debug(f"No overlap found before chunk {chunk.index}, joining with newline")
                merged += "\n" + current

        return merged

    except Exception as e:
        logger.warning(f"Chunk merging failed, using sequential fallback: {e}", exc_info=True)
        return merge_chunks_sequential(chunks)
