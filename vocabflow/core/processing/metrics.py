"""Orchestration metrics and statistics tracking."""

import time
from dataclasses import dataclass, field
from typing import Dict

from .models import SegmentResult


@dataclass
class PipelineMetrics:
    """Statistics for one orchestration run.

    Tracks segment counts, failures per stage, token estimates and timing.
    """
    # === Counts ===
    total_segments: int = 0
    succeeded_segments: int = 0
    failed_segments: int = 0
    failures_by_stage: Dict[str, int] = field(default_factory=dict)
    failures_by_code: Dict[str, int] = field(default_factory=dict)
    average_segment_size: int = 0

    # === Words ===
    total_words: int = 0
    unique_words: int = 0
    duplicates_removed: int = 0

    # === Tokens ===
    estimated_tokens: int = 0

    # === Timing (ms) ===
    segmentation_ms: float = 0.0
    processing_ms: float = 0.0
    combining_ms: float = 0.0
    total_ms: float = 0.0
    start_time: float = field(default_factory=time.perf_counter)

    def record_result(self, result: SegmentResult) -> None:
        """Record one segment outcome."""
        self.total_segments += 1
        self.estimated_tokens += result.metrics.estimated_tokens

        if result.success:
            self.succeeded_segments += 1
            self.total_words += len(result.words)
            return

        self.failed_segments += 1
        stage = result.error.stage.value
        code = result.error.code.value
        self.failures_by_stage[stage] = self.failures_by_stage.get(stage, 0) + 1
        self.failures_by_code[code] = self.failures_by_code.get(code, 0) + 1

    def finalize(self) -> None:
        """Finalize metrics (call when orchestration completes)."""
        self.total_ms = (time.perf_counter() - self.start_time) * 1000

    @property
    def success_rate(self) -> float:
        if self.total_segments == 0:
            return 0.0
        return self.succeeded_segments / self.total_segments

    def to_dict(self) -> Dict:
        """Convert metrics to dictionary for serialization."""
        return {
            "total_segments": self.total_segments,
            "succeeded_segments": self.succeeded_segments,
            "failed_segments": self.failed_segments,
            "failures_by_stage": dict(self.failures_by_stage),
            "failures_by_code": dict(self.failures_by_code),
            "average_segment_size": self.average_segment_size,
            "total_words": self.total_words,
            "unique_words": self.unique_words,
            "duplicates_removed": self.duplicates_removed,
            "estimated_tokens": self.estimated_tokens,
            "segmentation_ms": self.segmentation_ms,
            "processing_ms": self.processing_ms,
            "combining_ms": self.combining_ms,
            "total_ms": self.total_ms,
            "success_rate": self.success_rate,
        }

    def log_summary(self, log_callback=None) -> str:
        """Build (and optionally log) a human-readable summary.

        Args:
            log_callback: Optional callback (log_type, message)
        """
        summary = f"""=== Processing Metrics Summary ===
Segments: {self.total_segments}
Succeeded: {self.succeeded_segments} ({self.success_rate:.1%})
Failed: {self.failed_segments}
"""
        for stage, count in sorted(self.failures_by_stage.items()):
            summary += f"  {stage}: {count}\n"

        summary += f"""
Words:
  Collected: {self.total_words}
  Unique: {self.unique_words}
  Duplicates removed: {self.duplicates_removed}

Tokens (estimated): {self.estimated_tokens:,}

Timing:
  Segmentation: {self.segmentation_ms:.1f}ms
  Processing: {self.processing_ms:.1f}ms
  Combining: {self.combining_ms:.1f}ms
  Total: {self.total_ms:.1f}ms
"""
        if log_callback:
            log_callback("info", summary)
        return summary
