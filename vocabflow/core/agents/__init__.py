"""
Per-segment pipeline stages: cleaning, extraction and translation.
"""
from vocabflow.core.agents.types import CleanerOutput, ExtractorOutput, TranslatorOutput, WordPair
from vocabflow.core.agents.interfaces import ICleaner, IExtractor, ITranslator
from vocabflow.core.agents.cleaner import TextCleaner
from vocabflow.core.agents.extractor import LLMExtractor
from vocabflow.core.agents.translator import LLMTranslator

__all__ = [
    'CleanerOutput',
    'ExtractorOutput',
    'TranslatorOutput',
    'WordPair',
    'ICleaner',
    'IExtractor',
    'ITranslator',
    'TextCleaner',
    'LLMExtractor',
    'LLMTranslator',
]
