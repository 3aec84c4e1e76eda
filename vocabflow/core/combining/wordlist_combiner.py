"""
Merge per-segment word lists into one deduplicated list.

Earlier segments win: when the same source term (compared trimmed and
case-insensitively) appears in several segments, the pair from the lowest
position is kept.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, TYPE_CHECKING

from vocabflow.core.agents.types import WordPair

if TYPE_CHECKING:
    from vocabflow.core.processing.models import SegmentResult


@dataclass
class CombineMetadata:
    """Bookkeeping for a combine run."""
    total_segments_processed: int = 0
    successful_segments: int = 0
    failed_segments: int = 0
    duplicates_removed: int = 0
    words_before_limit: int = 0
    words_after_limit: int = 0

    def to_dict(self) -> dict:
        return {
            'total_segments_processed': self.total_segments_processed,
            'successful_segments': self.successful_segments,
            'failed_segments': self.failed_segments,
            'duplicates_removed': self.duplicates_removed,
            'words_before_limit': self.words_before_limit,
            'words_after_limit': self.words_after_limit,
        }


@dataclass
class CombinedWordlist:
    words: List[WordPair] = field(default_factory=list)
    metadata: CombineMetadata = field(default_factory=CombineMetadata)


def normalize_source(source: str) -> str:
    """Deduplication key for a source term."""
    return source.strip().lower()


def is_valid_word_pair(pair) -> bool:
    """A pair is usable if both sides are non-blank strings."""
    return (
        isinstance(pair, WordPair)
        and isinstance(pair.source, str)
        and isinstance(pair.target, str)
        and bool(pair.source.strip())
        and bool(pair.target.strip())
    )


def sanitize_word_pairs(pairs: Iterable[WordPair]) -> List[WordPair]:
    """Drop pairs with a blank source or target."""
    return [pair for pair in pairs if is_valid_word_pair(pair)]


def combine_wordlists(results: List["SegmentResult"],
                      max_words: Optional[int] = None) -> CombinedWordlist:
    """
    Combine successful segment results into one list.

    Args:
        results: Segment results in any order (sorted by position here)
        max_words: Optional cap on unique entries; combining stops once reached

    Returns:
        CombinedWordlist with trimmed, deduplicated pairs and metadata

    Raises:
        ValueError: If max_words is given and is not positive
    """
    if max_words is not None and max_words < 1:
        raise ValueError(f"Invalid max_words: {max_words}. Must be at least 1.")

    metadata = CombineMetadata(total_segments_processed=len(results))
    if not results:
        return CombinedWordlist(metadata=metadata)

    ordered = sorted(results, key=lambda result: result.position)
    successful = [result for result in ordered if result.success and result.words]
    metadata.successful_segments = len(successful)
    metadata.failed_segments = len(results) - len(successful)

    seen = set()
    combined: List[WordPair] = []
    limit_reached = False

    for result in successful:
        for pair in sanitize_word_pairs(result.words):
            key = normalize_source(pair.source)
            if key in seen:
                metadata.duplicates_removed += 1
                continue

            seen.add(key)
            combined.append(WordPair(source=pair.source.strip(), target=pair.target.strip()))

            if max_words is not None and len(combined) >= max_words:
                limit_reached = True
                break

        if limit_reached:
            break

    metadata.words_before_limit = len(combined) + metadata.duplicates_removed
    metadata.words_after_limit = len(combined)
    return CombinedWordlist(words=combined, metadata=metadata)
