"""
Protocol interfaces for the per-segment pipeline stages.

Any object matching these signatures can be injected into ChunkProcessor,
which keeps the stages replaceable and easy to mock in tests.
"""

from typing import Protocol, List, Optional

from vocabflow.core.chunking.models import DocumentType
from .types import CleanerOutput, ExtractorOutput, TranslatorOutput


class ICleaner(Protocol):
    """Interface for noise removal."""

    def clean(self, raw_text: str, document_type: DocumentType) -> CleanerOutput:
        """Remove page furniture and normalize whitespace.

        Args:
            raw_text: Segment text as produced by the segmenter
            document_type: Format the text was extracted from

        Returns:
            CleanerOutput with the cleaned text
        """
        ...


class IExtractor(Protocol):
    """Interface for vocabulary extraction."""

    async def extract(self, cleaned_text: str, max_words: int) -> ExtractorOutput:
        """Pick up to max_words notable terms from the text.

        Args:
            cleaned_text: Output of the cleaning stage
            max_words: Upper bound on returned words

        Returns:
            ExtractorOutput with the words

        Raises:
            LLMError: When the backing service fails
        """
        ...


class ITranslator(Protocol):
    """Interface for term translation."""

    async def translate(self, words: List[str], context: Optional[str] = None) -> TranslatorOutput:
        """Translate each word, using context to disambiguate.

        Args:
            words: Terms to translate
            context: Optional excerpt of the surrounding text

        Returns:
            TranslatorOutput with one pair per word

        Raises:
            LLMError: When the backing service fails
        """
        ...
