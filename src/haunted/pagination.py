# divides final haunted text into pages for the viewer
import logging
from typing import List

from .boundaries import LINE, PARAGRAPH, SENTENCE, WORD, find_boundary, pattern

logger = logging.getLogger(__name__)

CHARACTERS_PER_PAGE = 2000
# how far around the raw cut we look for a natural break
BREAK_SEARCH_RADIUS = 200

PAGE_BREAKS = [
    pattern(PARAGRAPH, r'\n\n', last=False),
    pattern(LINE, r'\n'),
    pattern(SENTENCE, r'[.!?]\s', last=False),
    pattern(WORD, r' '),
]


def divide_into_pages(content: str, characters_per_page: int = CHARACTERS_PER_PAGE) -> List[str]:
    """
    Divide content into pages of roughly characters_per_page characters.

    Each cut moves to the nearest paragraph break, line break, sentence end
    or space within 200 characters of the raw cut. Pages are stripped and
    blank pages dropped.
    """
    if not content or not content.strip():
        return []

    characters_per_page = max(1, characters_per_page)
    pages: List[str] = []
    current = 0

    while current < len(content):
        end = current + characters_per_page

        # not at the end yet, try to break at a natural boundary
        if end < len(content):
            search_start = max(current, end - BREAK_SEARCH_RADIUS)
            boundary = find_boundary(content, search_start, end + BREAK_SEARCH_RADIUS, PAGE_BREAKS)
            if boundary is not None:
                end = boundary

        page = content[current:end].strip()
        if page:
            pages.append(page)

        current = end

    if not pages:
        logger.warning("Pagination produced no pages, returning content as a single page")
        return [content]

    return pages


def clamp_page_number(page: int, total_pages: int) -> int:
    """Keep a 1-based page number inside 1..total_pages"""
    if total_pages < 1:
        return 1
    return max(1, min(page, total_pages))
