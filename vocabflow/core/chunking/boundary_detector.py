"""
Paragraph, sentence and word boundary detection for segmentation.

All searches look inside a window ``[search_start, search_end)`` of the
text and return the offset just after the boundary, or None.
"""

import re
from typing import Optional, Tuple

from .models import BoundaryType

# Distance either side of the ideal split point that is searched for a boundary
SEARCH_WINDOW = 1000

PARAGRAPH_PATTERN = re.compile(r'\n\s*\n')
SENTENCE_PATTERN = re.compile(r'[.!?]\s')


def _nearest_match_end(pattern, text: str, search_start: int, search_end: int,
                       ideal_point: int) -> Optional[int]:
    """End offset of the match closest to ideal_point (earliest wins ties)."""
    best_match = None
    best_distance = None

    for match in pattern.finditer(text, search_start, search_end):
        candidate = match.end()
        distance = abs(candidate - ideal_point)
        if best_distance is None or distance < best_distance:
            best_distance = distance
            best_match = candidate

    return best_match


def find_paragraph_boundary(text: str, search_start: int, search_end: int,
                            ideal_point: int) -> Optional[int]:
    """Find the blank line nearest to ideal_point; split after it."""
    return _nearest_match_end(PARAGRAPH_PATTERN, text, search_start, search_end, ideal_point)


def find_sentence_boundary(text: str, search_start: int, search_end: int,
                           ideal_point: int) -> Optional[int]:
    """Find the sentence terminator (., ! or ? then whitespace) nearest to ideal_point."""
    return _nearest_match_end(SENTENCE_PATTERN, text, search_start, search_end, ideal_point)


def find_word_boundary(text: str, search_start: int, search_end: int,
                       ideal_point: int) -> Optional[int]:
    """
    Find whitespace scanning backward from ideal_point, then forward.

    Returns:
        Offset just after the whitespace character, or None
    """
    # Never return past search_end, even when ideal_point sits on it
    for i in range(min(ideal_point, search_end - 1, len(text) - 1), search_start - 1, -1):
        if text[i].isspace():
            return i + 1

    for i in range(ideal_point, min(search_end, len(text))):
        if text[i].isspace():
            return i + 1

    return None


def find_split_point(text: str, start_index: int, target_size: int,
                     max_size: int, min_size: int = 0) -> Tuple[int, BoundaryType]:
    """
    Choose where the segment starting at start_index should end.

    Preference order: paragraph break, sentence end, word boundary. If none
    exists in the search window the text is cut at the ideal offset, which
    may fall mid-word.

    Args:
        text: Full (trimmed) document text
        start_index: Start offset of the segment being built
        target_size: Preferred segment length
        max_size: Hard upper bound on segment length
        min_size: Lower bound on segment length; boundaries closer to
            start_index are ignored

    Returns:
        Tuple of (split offset, boundary type)
    """
    ideal_split = start_index + target_size
    max_split = min(start_index + max_size, len(text))

    if max_split >= len(text):
        return (len(text), BoundaryType.DOCUMENT_END)

    search_start = max(start_index + min_size, ideal_split - SEARCH_WINDOW)
    search_end = min(max_split, ideal_split + SEARCH_WINDOW)

    split = find_paragraph_boundary(text, search_start, search_end, ideal_split)
    if split is not None:
        return (split, BoundaryType.PARAGRAPH_END)

    split = find_sentence_boundary(text, search_start, search_end, ideal_split)
    if split is not None:
        return (split, BoundaryType.SENTENCE_END)

    split = find_word_boundary(text, search_start, search_end, ideal_split)
    if split is not None:
        return (split, BoundaryType.WORD_END)

    return (ideal_split, BoundaryType.FORCED_SIZE)
