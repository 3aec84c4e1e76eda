"""
LLM-backed term translation.

The model answers with ``source|target`` lines in request order. A line is
accepted only if its source matches the requested word (case-insensitive)
and its target passes the optional script check. Every other word falls
back to itself.
"""

import re
import time
from typing import List, Optional

from vocabflow.core.llm.base import LLMProvider
from vocabflow.utils.unified_logger import UnifiedLogger, LogType, get_logger
from .types import TranslatorOutput, WordPair

TRANSLATION_TEMPERATURE = 0.2
TOKENS_PER_WORD = 20
MAX_CONTEXT_CHARS = 500

CJK_PATTERN = r'[\u4e00-\u9fff]'

SYSTEM_PROMPT_TEMPLATE = """You are an expert {source_language}-to-{target_language} translator specializing in vocabulary learning. Your task is to provide accurate, contextually appropriate {target_language} translations for {source_language} words.

Rules:
1. Provide the most common and useful translation for each word
2. For polysemous words (words with multiple meanings), use the context to determine the most appropriate translation
3. For rare or specialized words, provide the best available translation
4. Return ONLY the translations in the exact format specified below
5. Maintain the same order as the input words

Output format (one per line):
source_word|translation"""


class LLMTranslator:
    """Translation stage backed by an LLM provider.

    Args:
        provider: LLM provider used for generation
        source_language: Language of the extracted words
        target_language: Language to translate into
        target_pattern: Regex the target must contain to be accepted
            (None disables the check)
        logger: Optional logger (global logger by default)
    """

    def __init__(self, provider: LLMProvider,
                 source_language: str = "English",
                 target_language: str = "Mandarin Chinese (simplified characters)",
                 target_pattern: Optional[str] = CJK_PATTERN,
                 logger: Optional[UnifiedLogger] = None):
        self.provider = provider
        self.source_language = source_language
        self.target_language = target_language
        self._target_re = re.compile(target_pattern) if target_pattern else None
        self.logger = logger or get_logger()

    def _build_prompts(self, words: List[str], context: Optional[str]):
        system_prompt = SYSTEM_PROMPT_TEMPLATE.format(
            source_language=self.source_language,
            target_language=self.target_language,
        )
        word_list = '\n'.join(words)
        user_prompt = (
            f"Translate these {self.source_language} words to {self.target_language}:\n\n{word_list}"
        )
        if context and context.strip():
            user_prompt += (
                f"\n\nDocument context (for polysemous words):\n{context[:MAX_CONTEXT_CHARS]}"
            )
        return system_prompt, user_prompt

    def _accept(self, line: str, word: str) -> Optional[str]:
        """Return the target from a reply line, or None if the line doesn't fit the word."""
        parts = line.split('|')
        if len(parts) != 2:
            return None
        source, target = (part.strip() for part in parts)
        if source.lower() != word.lower() or not target:
            return None
        if self._target_re and not self._target_re.search(target):
            return None
        return target

    async def translate(self, words: List[str], context: Optional[str] = None) -> TranslatorOutput:
        if not words:
            return TranslatorOutput(translations=[], confidence=1.0, fallback_used=[])

        system_prompt, user_prompt = self._build_prompts(words, context)
        self.logger.debug("Translation request", LogType.LLM_REQUEST, {
            'model': self.provider.model,
            'system_prompt': system_prompt,
            'user_prompt': user_prompt,
        })

        start = time.perf_counter()
        response = await self.provider.generate(
            user_prompt,
            system_prompt=system_prompt,
            max_tokens=len(words) * TOKENS_PER_WORD,
            temperature=TRANSLATION_TEMPERATURE,
        )
        self.logger.debug("Translation response", LogType.LLM_RESPONSE, {
            'execution_time': time.perf_counter() - start,
            'response': response.content,
        })

        lines = [line.strip() for line in response.content.split('\n') if line.strip()]

        translations = []
        fallback_used = []
        for index, word in enumerate(words):
            target = self._accept(lines[index], word) if index < len(lines) else None
            if target is None:
                target = word
                fallback_used.append(word)
            translations.append(WordPair(source=word, target=target))

        if fallback_used:
            self.logger.debug(
                f"{len(fallback_used)} of {len(words)} words fell back to the source word",
                LogType.CHUNK_INFO
            )

        success_rate = (len(translations) - len(fallback_used)) / len(translations)
        return TranslatorOutput(
            translations=translations,
            confidence=max(0.85, min(0.99, success_rate)),
            fallback_used=fallback_used,
        )
