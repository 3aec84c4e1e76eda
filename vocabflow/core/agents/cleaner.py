"""
Regex and heuristic text cleaning.

Removes page furniture (page numbers, running headers and footers, tables of
contents, index entries, figure captions) before vocabulary extraction.
"""

import re
from collections import Counter
from typing import List

from vocabflow.core.chunking.models import DocumentType
from .types import CleanerOutput

PAGE_NUMBER_PATTERNS = [
    re.compile(r'^\s*\d+\s*$', re.MULTILINE),                          # "12"
    re.compile(r'^\s*-\s*\d+\s*-\s*$', re.MULTILINE),                  # "- 12 -"
    re.compile(r'^\s*Page\s+\d+\s*$', re.MULTILINE | re.IGNORECASE),   # "Page 12"
    re.compile(r'^\s*\[\d+\]\s*$', re.MULTILINE),                      # "[12]"
    re.compile(r'^\s*\d+\s+of\s+\d+\s*$', re.MULTILINE | re.IGNORECASE),  # "12 of 300"
]

TOC_PATTERNS = [
    re.compile(r'^.{3,}\.{3,}[ \t]*\d+[ \t]*$', re.MULTILINE),  # "Chapter 1 ........ 5"
    re.compile(r'^.{3,}[ \t]+\d+[ \t]*$', re.MULTILINE),        # "Chapter 1     5"
]

INDEX_PATTERN = re.compile(
    r'^[A-Z][a-z]+(?:[ \t]+[a-z]+)*,?[ \t]+\d+(?:[-–]\d+)?(?:,[ \t]*\d+(?:[-–]\d+)?)*[ \t]*$',
    re.MULTILINE
)

CAPTION_PATTERNS = [
    re.compile(r'^(?:Figure|Table|Image|Chart|Diagram)\s+\d+[:.]\s*.+$', re.MULTILINE | re.IGNORECASE),
    re.compile(r'^(?:Fig\.|Tab\.)\s+\d+[:.]\s*.+$', re.MULTILINE | re.IGNORECASE),
]

URL_PATTERN = re.compile(r'https?://\S+')
EMAIL_PATTERN = re.compile(r'[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}')

# Lines repeated at least this often are treated as running headers/footers
HEADER_FOOTER_MIN_REPEATS = 3
HEADER_FOOTER_MAX_LENGTH = 100

CONFIDENCE_CLEANED = 0.85
CONFIDENCE_UNTOUCHED = 0.95


class TextCleaner:
    """Default cleaning stage.

    Each pass that changes the text records its name in
    ``CleanerOutput.removed_sections``.
    """

    def clean(self, raw_text: str, document_type: DocumentType) -> CleanerOutput:
        removed: List[str] = []

        text = self._apply(raw_text, PAGE_NUMBER_PATTERNS, 'page_numbers', removed)
        text = self._remove_headers_footers(text, removed)
        text = self._apply(text, TOC_PATTERNS, 'table_of_contents', removed)
        text = self._apply(text, [INDEX_PATTERN], 'indexes', removed)
        text = self._apply(text, CAPTION_PATTERNS, 'captions', removed)

        # Links in office documents are usually deliberate content
        if document_type in (DocumentType.TXT, DocumentType.PDF):
            text = self._apply(text, [URL_PATTERN, EMAIL_PATTERN], 'urls_emails', removed)

        text = self._normalize_whitespace(text, removed)

        return CleanerOutput(
            cleaned_text=text,
            removed_sections=removed,
            confidence=CONFIDENCE_CLEANED if removed else CONFIDENCE_UNTOUCHED,
        )

    @staticmethod
    def _apply(text: str, patterns, name: str, removed: List[str]) -> str:
        result = text
        for pattern in patterns:
            result = pattern.sub('', result)
        if result != text:
            removed.append(name)
        return result

    @staticmethod
    def _remove_headers_footers(text: str, removed: List[str]) -> str:
        lines = text.split('\n')
        counts = Counter(
            line.strip() for line in lines
            if 0 < len(line.strip()) < HEADER_FOOTER_MAX_LENGTH
        )
        repeated = {line for line, count in counts.items() if count >= HEADER_FOOTER_MIN_REPEATS}
        if not repeated:
            return text

        kept = [line for line in lines if line.strip() not in repeated]
        removed.append('headers_footers')
        return '\n'.join(kept)

    @staticmethod
    def _normalize_whitespace(text: str, removed: List[str]) -> str:
        result = '\n'.join(line.strip() for line in text.split('\n'))
        result = re.sub(r'\n{3,}', '\n\n', result)
        result = re.sub(r' {2,}', ' ', result)
        result = result.strip()
        if result != text:
            removed.append('whitespace')
        return result
