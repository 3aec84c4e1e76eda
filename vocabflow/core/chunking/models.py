"""
Data models for document segmentation.

Provides the enums and dataclasses shared by the boundary detector and the
segmenter.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List


class DocumentType(Enum):
    """Format the raw text was extracted from."""
    TXT = "txt"
    PDF = "pdf"
    DOCX = "docx"
    XLSX = "xlsx"


class BoundaryType(Enum):
    """Type of segment boundary."""
    PARAGRAPH_END = "paragraph_end"
    SENTENCE_END = "sentence_end"
    WORD_END = "word_end"
    FORCED_SIZE = "forced_size"
    DOCUMENT_END = "document_end"


@dataclass(frozen=True)
class Document:
    """Raw extracted text plus the format it came from."""
    text: str
    document_type: DocumentType = DocumentType.TXT


@dataclass(frozen=True)
class Segment:
    """A bounded slice of the trimmed document.

    ``start_index``/``end_index`` are offsets into the trimmed text, end
    exclusive. ``position`` is 1-based.
    """
    id: str
    text: str
    start_index: int
    end_index: int
    position: int
    total_segments: int = 0
    boundary_type: BoundaryType = BoundaryType.DOCUMENT_END

    @property
    def length(self) -> int:
        return len(self.text)


@dataclass(frozen=True)
class SegmentationMetadata:
    """Summary of a segmentation run."""
    original_length: int
    total_segments: int
    average_segment_size: int

    def to_dict(self) -> dict:
        return {
            'original_length': self.original_length,
            'total_segments': self.total_segments,
            'average_segment_size': self.average_segment_size,
        }


@dataclass(frozen=True)
class SegmentationResult:
    """Segments in document order plus metadata."""
    segments: List[Segment]
    metadata: SegmentationMetadata

    def __len__(self) -> int:
        return len(self.segments)

    def __iter__(self):
        return iter(self.segments)
