"""
Result types for per-segment processing and orchestration.

ChunkProcessor never raises: every outcome, good or bad, is a SegmentResult
value with an explicit ``success`` flag.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple, TYPE_CHECKING

from vocabflow.core.agents.types import WordPair

if TYPE_CHECKING:
    from vocabflow.core.processing.metrics import PipelineMetrics


class ProcessingStage(Enum):
    """Stage of the per-segment pipeline."""
    CLEANING = "cleaning"
    EXTRACTION = "extraction"
    TRANSLATION = "translation"


class SegmentErrorCode(Enum):
    """Why a segment produced no words."""
    CLEANING_FAILED = "CHUNK_CLEANING_FAILED"
    EXTRACTION_FAILED = "CHUNK_EXTRACTION_FAILED"
    TRANSLATION_FAILED = "CHUNK_TRANSLATION_FAILED"
    TIMEOUT = "CHUNK_TIMEOUT"
    PROCESSING_ERROR = "CHUNK_PROCESSING_ERROR"


ALL_CHUNKS_FAILED = "ALL_CHUNKS_FAILED"


@dataclass(frozen=True)
class SegmentError:
    """Failure detail carried by an unsuccessful SegmentResult."""
    code: SegmentErrorCode
    message: str
    stage: ProcessingStage

    def to_dict(self) -> dict:
        return {'code': self.code.value, 'message': self.message, 'stage': self.stage.value}


@dataclass(frozen=True)
class SegmentMetrics:
    """Per-stage wall-clock durations (ms) and the estimated token cost."""
    clean_ms: float = 0.0
    extract_ms: float = 0.0
    translate_ms: float = 0.0
    estimated_tokens: int = 0

    @property
    def total_ms(self) -> float:
        return self.clean_ms + self.extract_ms + self.translate_ms

    def to_dict(self) -> dict:
        return {
            'clean_ms': self.clean_ms,
            'extract_ms': self.extract_ms,
            'translate_ms': self.translate_ms,
            'estimated_tokens': self.estimated_tokens,
        }


@dataclass(frozen=True)
class SegmentResult:
    """Outcome of processing one segment.

    Build with ``SegmentResult.ok`` or ``SegmentResult.failure``; exactly one
    of ``words``/``error`` is meaningful depending on ``success``.
    """
    segment_id: str
    position: int
    success: bool
    words: Tuple[WordPair, ...] = ()
    error: Optional[SegmentError] = None
    metrics: SegmentMetrics = field(default_factory=SegmentMetrics)

    @classmethod
    def ok(cls, segment_id: str, position: int, words: List[WordPair],
           metrics: SegmentMetrics) -> "SegmentResult":
        return cls(
            segment_id=segment_id,
            position=position,
            success=True,
            words=tuple(words),
            metrics=metrics,
        )

    @classmethod
    def failure(cls, segment_id: str, position: int, code: SegmentErrorCode,
                message: str, stage: ProcessingStage,
                metrics: Optional[SegmentMetrics] = None) -> "SegmentResult":
        return cls(
            segment_id=segment_id,
            position=position,
            success=False,
            error=SegmentError(code=code, message=message, stage=stage),
            metrics=metrics or SegmentMetrics(),
        )

    def to_dict(self) -> dict:
        return {
            'segment_id': self.segment_id,
            'position': self.position,
            'success': self.success,
            'words': [pair.to_dict() for pair in self.words],
            'error': self.error.to_dict() if self.error else None,
            'metrics': self.metrics.to_dict(),
        }


@dataclass(frozen=True)
class SegmentFailure:
    """A failed segment as reported by the orchestrator."""
    segment_id: str
    position: int
    code: SegmentErrorCode
    message: str
    stage: ProcessingStage

    @classmethod
    def from_result(cls, result: SegmentResult) -> "SegmentFailure":
        return cls(
            segment_id=result.segment_id,
            position=result.position,
            code=result.error.code,
            message=result.error.message,
            stage=result.error.stage,
        )

    def to_dict(self) -> dict:
        return {
            'segment_id': self.segment_id,
            'position': self.position,
            'code': self.code.value,
            'message': self.message,
            'stage': self.stage.value,
        }


@dataclass(frozen=True)
class OrchestrationError:
    """Run-level error, set only when no segment succeeded."""
    code: str
    message: str


@dataclass
class OrchestrationResult:
    """Aggregated outcome of processing a whole document.

    Attributes:
        success: True if at least one segment succeeded
        translations: Deduplicated word pairs (empty when success is False)
        segment_results: Every segment's result, in segment order
        failures: Failed segments, in segment order
        stats: Run metrics
        warnings: Human-readable notes about partial failure
        error: Set when every segment failed
    """
    success: bool
    translations: List[WordPair]
    segment_results: List[SegmentResult]
    failures: List[SegmentFailure]
    stats: "PipelineMetrics"
    warnings: List[str] = field(default_factory=list)
    error: Optional[OrchestrationError] = None

    def to_dict(self) -> dict:
        return {
            'success': self.success,
            'translations': [pair.to_dict() for pair in self.translations],
            'segment_results': [result.to_dict() for result in self.segment_results],
            'failures': [failure.to_dict() for failure in self.failures],
            'stats': self.stats.to_dict(),
            'warnings': list(self.warnings),
            'error': {'code': self.error.code, 'message': self.error.message} if self.error else None,
        }
