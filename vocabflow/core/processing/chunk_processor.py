"""
Per-segment pipeline: clean, extract, translate.

ChunkProcessor.process never raises. Each stage's failure is caught where it
happens and reported as a SegmentResult; the whole pipeline runs under a
per-segment timeout.
"""

import asyncio
import math
import time
from typing import List, Optional

from vocabflow.config import ChunkingConfig
from vocabflow.core.agents.interfaces import ICleaner, IExtractor, ITranslator
from vocabflow.core.agents.types import WordPair
from vocabflow.core.chunking.models import DocumentType, Segment
from vocabflow.core.llm.retry import RetryPolicy, with_retry
from vocabflow.utils.unified_logger import UnifiedLogger, LogType, get_logger
from .models import (
    ProcessingStage,
    SegmentErrorCode,
    SegmentMetrics,
    SegmentResult,
)

# Characters of cleaned text passed to the translator for disambiguation
TRANSLATION_CONTEXT_CHARS = 500


def estimate_tokens(text_length: int, word_count: int) -> int:
    """
    Rough token cost of extraction plus translation for one segment.

    Extraction is about one token per 4 input characters plus 2 per output
    word; translation is about 20 tokens per word pair.
    """
    extraction_tokens = math.ceil(text_length / 4) + word_count * 2
    translation_tokens = word_count * 20
    return extraction_tokens + translation_tokens


def _elapsed_ms(start: float) -> float:
    return (time.perf_counter() - start) * 1000


def _message(error: Exception, default: str) -> str:
    text = getattr(error, 'message', None) or str(error)
    return text or default


class _StageFailure(Exception):
    """Internal signal carrying a ready-made failure result out of a stage."""

    def __init__(self, result: SegmentResult):
        super().__init__(result.error.message)
        self.result = result


class ChunkProcessor:
    """Runs one segment through the three-stage pipeline.

    Args:
        config: Chunking configuration (word cap, timeout, warning thresholds)
        cleaner: Cleaning stage
        extractor: Extraction stage
        translator: Translation stage
        retry_policy: Policy applied around extraction and translation calls
        logger: Optional logger (global logger by default)
        timeout_ms: Per-segment timeout override (config.chunk_timeout_ms by default)
    """

    def __init__(self, config: ChunkingConfig, cleaner: ICleaner, extractor: IExtractor,
                 translator: ITranslator, retry_policy: Optional[RetryPolicy] = None,
                 logger: Optional[UnifiedLogger] = None, timeout_ms: Optional[int] = None):
        self.config = config
        self.cleaner = cleaner
        self.extractor = extractor
        self.translator = translator
        self.retry_policy = retry_policy or RetryPolicy()
        self.logger = logger or get_logger()
        self.timeout_ms = timeout_ms if timeout_ms is not None else config.chunk_timeout_ms

    async def process(self, segment: Segment, document_type: DocumentType,
                      max_words: Optional[int] = None) -> SegmentResult:
        """
        Process one segment.

        Args:
            segment: Segment to process
            document_type: Format of the source document (passed to the cleaner)
            max_words: Word cap override (config.max_words_per_chunk by default)

        Returns:
            SegmentResult; failures are reported, never raised
        """
        if max_words is None:
            max_words = self.config.max_words_per_chunk
        self.logger.debug(
            f"Starting processing ({segment.length} chars)",
            LogType.CHUNK_INFO,
            {'segment_id': segment.id}
        )

        try:
            return await asyncio.wait_for(
                self._run_stages(segment, document_type, max_words),
                timeout=self.timeout_ms / 1000.0
            )
        except asyncio.TimeoutError:
            self.logger.error(
                f"Timeout after {self.timeout_ms}ms",
                LogType.ERROR_DETAIL,
                {'segment_id': segment.id, 'code': SegmentErrorCode.TIMEOUT.value}
            )
            return SegmentResult.failure(
                segment.id, segment.position,
                SegmentErrorCode.TIMEOUT,
                f"Processing timeout after {self.timeout_ms}ms",
                ProcessingStage.EXTRACTION,
            )
        except Exception as e:
            self.logger.error(
                f"Unexpected error: {e}",
                LogType.ERROR_DETAIL,
                {'segment_id': segment.id, 'code': SegmentErrorCode.PROCESSING_ERROR.value}
            )
            return SegmentResult.failure(
                segment.id, segment.position,
                SegmentErrorCode.PROCESSING_ERROR,
                _message(e, "Unknown error"),
                ProcessingStage.EXTRACTION,
            )

    async def _run_stages(self, segment: Segment, document_type: DocumentType,
                          max_words: int) -> SegmentResult:
        timings = {'clean_ms': 0.0, 'extract_ms': 0.0, 'translate_ms': 0.0}

        try:
            cleaned_text = self._clean(segment, document_type, timings)
            words = await self._extract(segment, cleaned_text, max_words, timings)
            pairs = await self._translate(segment, words, cleaned_text, timings)
        except _StageFailure as failure:
            return failure.result

        metrics = SegmentMetrics(
            estimated_tokens=estimate_tokens(len(cleaned_text), len(words)),
            **timings
        )
        self._warn_on_thresholds(segment, metrics)

        self.logger.info(
            f"Processed in {metrics.total_ms:.0f}ms: {len(pairs)} word pairs",
            LogType.CHUNK_INFO,
            {'segment_id': segment.id}
        )
        return SegmentResult.ok(segment.id, segment.position, pairs, metrics)

    def _fail(self, segment: Segment, code: SegmentErrorCode, message: str,
              stage: ProcessingStage, timings: dict) -> _StageFailure:
        self.logger.warning(
            f"{stage.value.capitalize()} failed: {message}",
            LogType.ERROR_DETAIL,
            {'segment_id': segment.id, 'code': code.value, 'stage': stage.value}
        )
        return _StageFailure(SegmentResult.failure(
            segment.id, segment.position, code, message, stage,
            SegmentMetrics(**timings)
        ))

    def _clean(self, segment: Segment, document_type: DocumentType, timings: dict) -> str:
        start = time.perf_counter()
        try:
            output = self.cleaner.clean(segment.text, document_type)
        except Exception as e:
            timings['clean_ms'] = _elapsed_ms(start)
            raise self._fail(segment, SegmentErrorCode.CLEANING_FAILED,
                             _message(e, "Cleaning failed"), ProcessingStage.CLEANING, timings)
        timings['clean_ms'] = _elapsed_ms(start)

        cleaned_text = output.cleaned_text if output else ""
        if not cleaned_text or not cleaned_text.strip():
            raise self._fail(segment, SegmentErrorCode.CLEANING_FAILED,
                             "Cleaning produced empty text", ProcessingStage.CLEANING, timings)

        self.logger.debug(
            f"Cleaning completed: {segment.length} -> {len(cleaned_text)} chars",
            LogType.CHUNK_INFO,
            {'segment_id': segment.id}
        )
        return cleaned_text

    async def _extract(self, segment: Segment, cleaned_text: str, max_words: int,
                       timings: dict) -> List[str]:
        start = time.perf_counter()
        try:
            output = await with_retry(
                lambda: self.extractor.extract(cleaned_text, max_words),
                self.retry_policy,
                operation_id=f"{segment.id}:extraction",
                log_callback=self.logger.create_log_callback(f"[{segment.id}] ")
            )
        except Exception as e:
            timings['extract_ms'] = _elapsed_ms(start)
            raise self._fail(segment, SegmentErrorCode.EXTRACTION_FAILED,
                             _message(e, "Extraction failed"), ProcessingStage.EXTRACTION, timings)
        timings['extract_ms'] = _elapsed_ms(start)

        words = list(output.words) if output else []
        if not words:
            raise self._fail(segment, SegmentErrorCode.EXTRACTION_FAILED,
                             "No words extracted from chunk", ProcessingStage.EXTRACTION, timings)
        return words

    async def _translate(self, segment: Segment, words: List[str], cleaned_text: str,
                         timings: dict) -> List[WordPair]:
        context = cleaned_text[:TRANSLATION_CONTEXT_CHARS]
        start = time.perf_counter()
        try:
            output = await with_retry(
                lambda: self.translator.translate(words, context),
                self.retry_policy,
                operation_id=f"{segment.id}:translation",
                log_callback=self.logger.create_log_callback(f"[{segment.id}] ")
            )
        except Exception as e:
            timings['translate_ms'] = _elapsed_ms(start)
            raise self._fail(segment, SegmentErrorCode.TRANSLATION_FAILED,
                             _message(e, "Translation failed"), ProcessingStage.TRANSLATION, timings)
        timings['translate_ms'] = _elapsed_ms(start)

        pairs = list(output.translations) if output else []
        if not pairs:
            raise self._fail(segment, SegmentErrorCode.TRANSLATION_FAILED,
                             "Translation produced no results", ProcessingStage.TRANSLATION, timings)
        return pairs

    def _warn_on_thresholds(self, segment: Segment, metrics: SegmentMetrics) -> None:
        threshold_ms = self.config.processing_warning_ms
        data = {'segment_id': segment.id}

        if metrics.extract_ms > threshold_ms:
            self.logger.warning(
                f"Extraction took {metrics.extract_ms:.0f}ms (>{threshold_ms}ms threshold)",
                LogType.CHUNK_INFO, data
            )
        if metrics.translate_ms > threshold_ms:
            self.logger.warning(
                f"Translation took {metrics.translate_ms:.0f}ms (>{threshold_ms}ms threshold)",
                LogType.CHUNK_INFO, data
            )
        if metrics.estimated_tokens > self.config.token_usage_warning_threshold:
            self.logger.warning(
                f"High token usage for {segment.id}",
                LogType.TOKEN_USAGE,
                {
                    'segment_id': segment.id,
                    'estimated_tokens': metrics.estimated_tokens,
                    'threshold': self.config.token_usage_warning_threshold,
                }
            )
