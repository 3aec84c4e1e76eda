"""
Per-segment processing and whole-document orchestration.
"""
from vocabflow.core.processing.models import (
    ALL_CHUNKS_FAILED,
    OrchestrationError,
    OrchestrationResult,
    ProcessingStage,
    SegmentError,
    SegmentErrorCode,
    SegmentFailure,
    SegmentMetrics,
    SegmentResult,
)
from vocabflow.core.processing.metrics import PipelineMetrics
from vocabflow.core.processing.events import Event, EventBus, EventType
from vocabflow.core.processing.chunk_processor import ChunkProcessor, estimate_tokens
from vocabflow.core.processing.orchestrator import Orchestrator, create_orchestrator

__all__ = [
    'ALL_CHUNKS_FAILED',
    'OrchestrationError',
    'OrchestrationResult',
    'ProcessingStage',
    'SegmentError',
    'SegmentErrorCode',
    'SegmentFailure',
    'SegmentMetrics',
    'SegmentResult',
    'PipelineMetrics',
    'Event',
    'EventBus',
    'EventType',
    'ChunkProcessor',
    'estimate_tokens',
    'Orchestrator',
    'create_orchestrator',
]
