"""
Chunking module for document segmentation.

Splits large documents into bounded, overlapping segments at natural boundaries.
"""
from vocabflow.core.chunking.models import (
    BoundaryType,
    Document,
    DocumentType,
    Segment,
    SegmentationMetadata,
    SegmentationResult,
)
from vocabflow.core.chunking.document_segmenter import segment_document

__all__ = [
    'BoundaryType',
    'Document',
    'DocumentType',
    'Segment',
    'SegmentationMetadata',
    'SegmentationResult',
    'segment_document',
]
