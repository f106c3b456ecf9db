# boundary-seeking cut search shared by the chunker and the paginator
import re
from dataclasses import dataclass
from typing import Optional, Sequence


@dataclass(frozen=True)
class BoundaryPattern:
    """A natural break to look for; `last` picks the final match in the window instead of the first"""
    name: str
    regex: "re.Pattern[str]"
    last: bool = True


PARAGRAPH = "paragraph"
LINE = "line"
SENTENCE = "sentence"
WORD = "word"


def pattern(name: str, expr: str, last: bool = True) -> BoundaryPattern:
    return BoundaryPattern(name=name, regex=re.compile(expr), last=last)


def find_boundary(text: str, start: int, end: int, patterns: Sequence[BoundaryPattern]) -> Optional[int]:
    """
    Search text[start:end] for each pattern in priority order.

    Returns the absolute offset just past the first pattern that matches,
    or None when the window holds no natural break.
    """
    start = max(0, start)
    end = min(len(text), end)
    if start >= end:
        return None

    window = text[start:end]
    for boundary in patterns:
        if boundary.last:
            # step one character at a time so overlapping matches count, like rfind
            match = None
            found = boundary.regex.search(window)
            while found is not None:
                match = found
                found = boundary.regex.search(window, found.start() + 1)
        else:
            match = boundary.regex.search(window)

        if match is not None:
            return start + match.end()

    return None
