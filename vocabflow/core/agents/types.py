"""
Data shared by the cleaning, extraction and translation stages.
"""

from dataclasses import dataclass, field
from typing import List


@dataclass(frozen=True)
class WordPair:
    """A source term and its rendering in the target language."""
    source: str
    target: str

    def to_dict(self) -> dict:
        return {'source': self.source, 'target': self.target}


@dataclass
class CleanerOutput:
    """Result of the cleaning stage.

    Attributes:
        cleaned_text: Text with noise removed
        removed_sections: Names of the passes that changed the text
        confidence: 0-1 estimate of cleaning quality
    """
    cleaned_text: str
    removed_sections: List[str] = field(default_factory=list)
    confidence: float = 1.0


@dataclass
class ExtractorOutput:
    """Result of the extraction stage.

    Attributes:
        words: Extracted terms, unique and in extraction order
        confidence: 0-1 estimate of extraction quality
        filtered_count: Raw candidates dropped (stop words, duplicates, over the cap)
    """
    words: List[str]
    confidence: float = 1.0
    filtered_count: int = 0


@dataclass
class TranslatorOutput:
    """Result of the translation stage.

    Attributes:
        translations: One pair per requested word, in request order
        confidence: 0-1 estimate of translation quality
        fallback_used: Words whose target is the word itself
    """
    translations: List[WordPair]
    confidence: float = 1.0
    fallback_used: List[str] = field(default_factory=list)
