"""
Combining of per-segment word lists.
"""
from vocabflow.core.combining.wordlist_combiner import (
    CombineMetadata,
    CombinedWordlist,
    combine_wordlists,
    is_valid_word_pair,
    sanitize_word_pairs,
)

__all__ = [
    'CombineMetadata',
    'CombinedWordlist',
    'combine_wordlists',
    'is_valid_word_pair',
    'sanitize_word_pairs',
]
