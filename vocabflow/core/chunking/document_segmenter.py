"""
Split a document into overlapping, size-bounded segments.

Segmentation is a pure function of the text and the configuration: the same
input always yields the same segments.
"""

from dataclasses import replace
from typing import List

from vocabflow.config import ChunkingConfig
from vocabflow.core.exceptions import DocumentEmptyError
from .boundary_detector import find_split_point
from .models import (
    BoundaryType,
    Segment,
    SegmentationMetadata,
    SegmentationResult,
)


def _segment_id(position: int) -> str:
    return f"chunk-{position}"


def segment_document(text: str, config: ChunkingConfig) -> SegmentationResult:
    """
    Split text into segments preferring natural boundaries.

    The text is trimmed first; all offsets refer to the trimmed text.
    Consecutive segments overlap by at most ``config.overlap_size``
    characters. A final segment shorter than ``config.min_size`` is merged
    into the one before it; that merged segment is the only one allowed to
    exceed ``config.max_size`` (by less than ``config.min_size``).

    Args:
        text: Raw document text
        config: Chunking configuration (sizes and overlap)

    Returns:
        SegmentationResult with segments in document order

    Raises:
        DocumentEmptyError: If the text is empty or whitespace only
    """
    trimmed = (text or "").strip()
    if not trimmed:
        raise DocumentEmptyError()

    length = len(trimmed)

    if length <= config.target_size:
        segment = Segment(
            id=_segment_id(1),
            text=trimmed,
            start_index=0,
            end_index=length,
            position=1,
            total_segments=1,
        )
        return SegmentationResult(
            segments=[segment],
            metadata=SegmentationMetadata(
                original_length=length,
                total_segments=1,
                average_segment_size=length,
            ),
        )

    segments = _compute_segments(trimmed, config)
    segments = _merge_short_tail(trimmed, segments, config.min_size)

    # Second phase: the count is only known once all boundaries are fixed
    total = len(segments)
    segments = [replace(segment, total_segments=total) for segment in segments]

    total_size = sum(segment.length for segment in segments)
    return SegmentationResult(
        segments=segments,
        metadata=SegmentationMetadata(
            original_length=length,
            total_segments=total,
            average_segment_size=_round_half_up(total_size / total),
        ),
    )


def _compute_segments(text: str, config: ChunkingConfig) -> List[Segment]:
    segments = []
    current_index = 0
    position = 1
    length = len(text)

    while current_index < length:
        if length - current_index <= config.max_size:
            segments.append(Segment(
                id=_segment_id(position),
                text=text[current_index:],
                start_index=current_index,
                end_index=length,
                position=position,
                boundary_type=BoundaryType.DOCUMENT_END,
            ))
            break

        split_point, boundary_type = find_split_point(
            text, current_index, config.target_size, config.max_size, config.min_size
        )
        segments.append(Segment(
            id=_segment_id(position),
            text=text[current_index:split_point],
            start_index=current_index,
            end_index=split_point,
            position=position,
            boundary_type=boundary_type,
        ))

        current_index = max(current_index + 1, split_point - config.overlap_size)
        position += 1

    return segments


def _merge_short_tail(text: str, segments: List[Segment], min_size: int) -> List[Segment]:
    """Fold a too-short final segment into its predecessor."""
    if len(segments) < 2 or segments[-1].length >= min_size:
        return segments

    last = segments[-1]
    previous = segments[-2]
    merged = replace(
        previous,
        text=text[previous.start_index:last.end_index],
        end_index=last.end_index,
        boundary_type=BoundaryType.DOCUMENT_END,
    )
    return segments[:-2] + [merged]


def _round_half_up(value: float) -> int:
    return int(value + 0.5)
