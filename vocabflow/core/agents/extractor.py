"""
LLM-backed vocabulary extraction.

The model is asked for one lowercase base-form word per line. Replies are
parsed leniently (numbering, bullets and markdown are stripped) and
filtered for stop words, short words and duplicates. If nothing usable
comes back, words are pulled from the text itself with a regex scan.
"""

import re
import time
from typing import List, Optional, Tuple

from vocabflow.core.llm.base import LLMProvider
from vocabflow.utils.unified_logger import UnifiedLogger, LogType, get_logger
from .types import ExtractorOutput

STOP_WORDS = frozenset([
    'the', 'be', 'to', 'of', 'and', 'a', 'in', 'that', 'have', 'i',
    'it', 'for', 'not', 'on', 'with', 'he', 'as', 'you', 'do', 'at',
    'this', 'but', 'his', 'by', 'from', 'they', 'we', 'say', 'her', 'she',
    'or', 'an', 'will', 'my', 'one', 'all', 'would', 'there', 'their',
    'what', 'so', 'up', 'out', 'if', 'about', 'who', 'get', 'which', 'go',
    'me', 'when', 'make', 'can', 'like', 'time', 'no', 'just', 'him', 'know',
    'take', 'people', 'into', 'year', 'your', 'good', 'some', 'could', 'them',
    'see', 'other', 'than', 'then', 'now', 'look', 'only', 'come', 'its', 'over',
    'think', 'also', 'back', 'after', 'use', 'two', 'how', 'our', 'work',
    'first', 'well', 'way', 'even', 'new', 'want', 'because', 'any', 'these',
    'give', 'day', 'most', 'us', 'is', 'was', 'are', 'been', 'has', 'had',
    'were', 'said', 'did', 'having', 'may', 'should', 'am', 'being',
])

MIN_WORD_LENGTH = 3
MAX_SAMPLE_CHARS = 20000
EXTRACTION_TEMPERATURE = 0.3
MAX_EXTRACTION_TOKENS = 500

FALLBACK_WORD_PATTERN = re.compile(r'\b[a-z]{3,15}\b', re.IGNORECASE)

_LEADING_NUMBER = re.compile(r'^\s*\d+[.)\-:\s]+')
_LEADING_BULLET = re.compile(r'^\s*[•\-*+>]+\s*')
_MARKDOWN = re.compile(r'[*_`]')
_BRACKETS = re.compile(r'[()\[\]]')
_PUNCTUATION = re.compile(r'[^\w\s]')
_PURE_WORD = re.compile(r'^[a-z]+$')
_NON_LETTER = re.compile(r'[^a-z]')

SYSTEM_PROMPT_TEMPLATE = """Extract {max_words} vocabulary words. Output format:

algorithm
database
network

Rules: lowercase, base form, one per line, no numbers/bullets"""


def clean_line(line: str) -> str:
    """Strip numbering, bullets, markdown and punctuation from a reply line."""
    cleaned = _LEADING_NUMBER.sub('', line)
    cleaned = _LEADING_BULLET.sub('', cleaned)
    cleaned = _MARKDOWN.sub('', cleaned)
    cleaned = _BRACKETS.sub('', cleaned)
    cleaned = _PUNCTUATION.sub('', cleaned)
    return cleaned.strip()


def sample_text(text: str, max_chars: int = MAX_SAMPLE_CHARS) -> Tuple[str, bool]:
    """
    Shorten long text to beginning (40%), middle (30%) and end (30%) excerpts.

    Returns:
        Tuple of (text to send, whether sampling was applied)
    """
    if len(text) <= max_chars:
        return (text, False)

    begin_chars = int(max_chars * 0.4)
    middle_chars = int(max_chars * 0.3)
    end_chars = max_chars - begin_chars - middle_chars

    beginning = text[:begin_chars]
    middle_start = (len(text) - middle_chars) // 2
    middle = text[middle_start:middle_start + middle_chars]
    end = text[-end_chars:]

    return (f"{beginning}\n...\n{middle}\n...\n{end}", True)


def max_tokens_for(word_count: int) -> int:
    return min(word_count * 2 + 50, MAX_EXTRACTION_TOKENS)


def parse_reply(content: str) -> List[str]:
    """Pull one candidate word from each line of a model reply."""
    words = []
    for line in content.split('\n'):
        if not line.strip():
            continue
        cleaned = clean_line(line).lower()
        if not cleaned:
            continue

        if _PURE_WORD.match(cleaned):
            words.append(cleaned)
            continue

        # Multi-word line: keep the first acceptable word
        for token in cleaned.split():
            token = _NON_LETTER.sub('', token)
            if len(token) >= MIN_WORD_LENGTH:
                words.append(token)
                break

    return words


def filter_words(raw_words: List[str]) -> List[str]:
    """Drop short words, stop words and duplicates, keeping first-seen order."""
    seen = set()
    kept = []
    for word in raw_words:
        if len(word) < MIN_WORD_LENGTH or word in STOP_WORDS or word in seen:
            continue
        seen.add(word)
        kept.append(word)
    return kept


def fallback_extraction(text: str, max_words: int) -> List[str]:
    """Regex scan of the source text, used when the model reply is unusable."""
    seen = set()
    words = []
    for match in FALLBACK_WORD_PATTERN.finditer(text):
        word = match.group(0).lower()
        if word in STOP_WORDS or word in seen:
            continue
        seen.add(word)
        words.append(word)
        if len(words) >= max_words:
            break
    return words


class LLMExtractor:
    """Extraction stage backed by an LLM provider.

    Provider errors (LLMError) propagate unchanged so that the caller's
    retry policy can classify them.
    """

    def __init__(self, provider: LLMProvider, logger: Optional[UnifiedLogger] = None):
        self.provider = provider
        self.logger = logger or get_logger()

    async def extract(self, cleaned_text: str, max_words: int) -> ExtractorOutput:
        text, was_sampled = sample_text(cleaned_text)
        if was_sampled:
            self.logger.debug(
                f"Text sampling applied: {len(cleaned_text)} chars -> {len(text)} chars",
                LogType.CHUNK_INFO
            )

        system_prompt = SYSTEM_PROMPT_TEMPLATE.format(max_words=max_words)
        max_tokens = max_tokens_for(max_words)
        self.logger.debug("Extraction request", LogType.LLM_REQUEST, {
            'model': self.provider.model,
            'system_prompt': system_prompt,
            'user_prompt': text[:500],
        })

        start = time.perf_counter()
        response = await self.provider.generate(
            text,
            system_prompt=system_prompt,
            max_tokens=max_tokens,
            temperature=EXTRACTION_TEMPERATURE,
        )
        self.logger.debug("Extraction response", LogType.LLM_RESPONSE, {
            'execution_time': time.perf_counter() - start,
            'response': response.content,
        })

        raw_words = parse_reply(response.content)
        words = filter_words(raw_words)[:max_words]

        if words:
            ratio = len(words) / min(len(raw_words) or 1, max_words)
            confidence = max(0.85, min(0.99, ratio))
            return ExtractorOutput(
                words=words,
                confidence=confidence,
                filtered_count=len(raw_words) - len(words),
            )

        self.logger.warning(
            "Model reply yielded no words, falling back to regex extraction",
            LogType.CHUNK_INFO
        )
        words = fallback_extraction(text, max_words)
        return ExtractorOutput(
            words=words,
            confidence=0.7 if words else 0.0,
            filtered_count=len(raw_words),
        )
