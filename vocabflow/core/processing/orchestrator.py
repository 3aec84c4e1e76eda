"""
Document orchestration: segment, fan out, aggregate.

Segments are processed concurrently under a semaphore. A failed segment
never cancels its siblings; the run succeeds as long as one segment does.
"""

import asyncio
import time
from typing import List, Optional

from vocabflow.config import ChunkingConfig, LLMConfig, load_chunking_config, load_llm_config
from vocabflow.core.agents.cleaner import TextCleaner
from vocabflow.core.agents.extractor import LLMExtractor
from vocabflow.core.agents.translator import LLMTranslator
from vocabflow.core.chunking.document_segmenter import segment_document
from vocabflow.core.chunking.models import Document, DocumentType, Segment
from vocabflow.core.combining.wordlist_combiner import combine_wordlists
from vocabflow.core.llm.providers.openai import OpenAICompatibleProvider
from vocabflow.core.llm.retry import RetryPolicy
from vocabflow.utils.unified_logger import UnifiedLogger, LogType, get_logger
from .chunk_processor import ChunkProcessor
from .events import EventBus, EventType, Event, create_chunk_event
from .metrics import PipelineMetrics
from .models import (
    ALL_CHUNKS_FAILED,
    OrchestrationError,
    OrchestrationResult,
    ProcessingStage,
    SegmentErrorCode,
    SegmentFailure,
    SegmentResult,
)


class Orchestrator:
    """Processes a whole document through segmentation, per-segment processing and combining.

    Args:
        config: Chunking configuration
        processor: Per-segment processor
        event_bus: Optional bus receiving progress events
        logger: Optional logger (global logger by default)
        max_words: Optional cap on the combined word list
    """

    def __init__(self, config: ChunkingConfig, processor: ChunkProcessor,
                 event_bus: Optional[EventBus] = None,
                 logger: Optional[UnifiedLogger] = None,
                 max_words: Optional[int] = None):
        self.config = config
        self.processor = processor
        self.event_bus = event_bus
        self.logger = logger or get_logger()
        self.max_words = max_words

    def _publish(self, event: Event) -> None:
        if self.event_bus:
            self.event_bus.publish(event)

    async def orchestrate(self, document: Document) -> OrchestrationResult:
        """
        Run the full pipeline over a document.

        Args:
            document: Raw text plus its document type

        Returns:
            OrchestrationResult describing every segment's outcome

        Raises:
            DocumentEmptyError: If the document has no text
        """
        metrics = PipelineMetrics()

        # Stage 1: segmentation (raises for empty documents)
        start = time.perf_counter()
        segmentation = segment_document(document.text, self.config)
        metrics.segmentation_ms = (time.perf_counter() - start) * 1000
        segments = segmentation.segments
        metrics.average_segment_size = segmentation.metadata.average_segment_size

        max_concurrent = self.config.effective_max_concurrent_chunks
        self.logger.info("Processing started", LogType.PROCESSING_START, {
            'document_type': document.document_type.value,
            'original_length': segmentation.metadata.original_length,
            'total_segments': len(segments),
            'max_concurrent': max_concurrent,
        })
        self._publish(Event(
            type=EventType.PROCESSING_STARTED,
            data={
                'total_segments': len(segments),
                'original_length': segmentation.metadata.original_length,
                'average_segment_size': segmentation.metadata.average_segment_size,
            },
            source="orchestrator"
        ))

        # Stage 2: bounded fan-out
        start = time.perf_counter()
        semaphore = asyncio.Semaphore(max_concurrent)
        progress = {'completed': 0}
        results: List[SegmentResult] = list(await asyncio.gather(*(
            self._process_segment(segment, document.document_type, semaphore, progress)
            for segment in segments
        )))
        metrics.processing_ms = (time.perf_counter() - start) * 1000

        for result in results:
            metrics.record_result(result)
        failures = [SegmentFailure.from_result(result) for result in results if not result.success]

        if metrics.estimated_tokens > self.config.total_token_warning_threshold:
            self.logger.warning("High total token usage", LogType.TOKEN_USAGE, {
                'estimated_tokens': metrics.estimated_tokens,
                'threshold': self.config.total_token_warning_threshold,
            })

        if metrics.succeeded_segments == 0:
            metrics.finalize()
            first_message = failures[0].message if failures else "Unknown error"
            error = OrchestrationError(
                code=ALL_CHUNKS_FAILED,
                message=f"All {len(segments)} chunks failed to process. First error: {first_message}",
            )
            self.logger.error(error.message, LogType.ERROR_DETAIL, {'code': error.code})
            self._publish_completed(metrics, success=False)
            return OrchestrationResult(
                success=False,
                translations=[],
                segment_results=results,
                failures=failures,
                stats=metrics,
                error=error,
            )

        # Stage 3: combining
        start = time.perf_counter()
        combined = combine_wordlists(results, self.max_words)
        metrics.combining_ms = (time.perf_counter() - start) * 1000
        metrics.unique_words = len(combined.words)
        metrics.duplicates_removed = combined.metadata.duplicates_removed

        warnings = []
        if failures:
            message = f"{metrics.succeeded_segments} of {len(segments)} sections processed successfully"
            warnings.append(message)
            self.logger.warning(message)

        metrics.finalize()
        self.logger.info("Processing complete", LogType.PROCESSING_END, {
            'succeeded': metrics.succeeded_segments,
            'failed': metrics.failed_segments,
            'unique_words': metrics.unique_words,
        })
        self.logger.debug(metrics.log_summary())
        self._publish_completed(metrics, success=True)

        return OrchestrationResult(
            success=True,
            translations=combined.words,
            segment_results=results,
            failures=failures,
            stats=metrics,
            warnings=warnings,
        )

    async def _process_segment(self, segment: Segment, document_type: DocumentType,
                               semaphore: asyncio.Semaphore, progress: dict) -> SegmentResult:
        async with semaphore:
            self._publish(create_chunk_event(
                EventType.CHUNK_STARTED, segment.id, segment.position, segment.total_segments
            ))

            try:
                result = await self.processor.process(segment, document_type)
            except Exception as e:
                # Processors are expected to report failures as data
                result = SegmentResult.failure(
                    segment.id, segment.position,
                    SegmentErrorCode.PROCESSING_ERROR,
                    str(e) or "Unknown error",
                    ProcessingStage.EXTRACTION,
                )

            if result.success:
                self._publish(create_chunk_event(
                    EventType.CHUNK_COMPLETED, segment.id, segment.position, segment.total_segments,
                    words_extracted=len(result.words)
                ))
            else:
                self._publish(create_chunk_event(
                    EventType.CHUNK_FAILED, segment.id, segment.position, segment.total_segments,
                    code=result.error.code.value,
                    stage=result.error.stage.value,
                    error=result.error.message
                ))

            self.logger.info("Segment finished", LogType.CHUNK_INFO, {
                'segment_id': segment.id,
                'completed': True,
            })
            progress['completed'] += 1
            self.logger.info("Progress", LogType.PROGRESS, {
                'current': progress['completed'],
                'total': segment.total_segments,
            })
            return result

    def _publish_completed(self, metrics: PipelineMetrics, success: bool) -> None:
        self._publish(Event(
            type=EventType.PROCESSING_COMPLETED,
            data={'success': success, **metrics.to_dict()},
            source="orchestrator"
        ))


def create_orchestrator(config: Optional[ChunkingConfig] = None,
                        llm_config: Optional[LLMConfig] = None,
                        event_bus: Optional[EventBus] = None,
                        logger: Optional[UnifiedLogger] = None,
                        max_words: Optional[int] = None) -> Orchestrator:
    """
    Wire the default pipeline: TextCleaner plus LLM-backed extraction and
    translation against an OpenAI-compatible endpoint.

    Configuration not passed in is loaded from the environment.
    """
    config = config or load_chunking_config()
    llm_config = llm_config or load_llm_config()
    logger = logger or get_logger()

    provider = OpenAICompatibleProvider.from_config(
        llm_config, log_callback=logger.create_log_callback()
    )
    processor = ChunkProcessor(
        config,
        cleaner=TextCleaner(),
        extractor=LLMExtractor(provider, logger=logger),
        translator=LLMTranslator(provider, logger=logger),
        retry_policy=RetryPolicy.from_llm_config(llm_config),
        logger=logger,
    )
    return Orchestrator(config, processor, event_bus=event_bus, logger=logger, max_words=max_words)
