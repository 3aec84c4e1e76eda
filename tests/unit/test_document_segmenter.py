"""
Unit tests for document segmentation.
"""

import random

import pytest

from vocabflow.config import make_test_config
from vocabflow.core.chunking import BoundaryType, segment_document
from vocabflow.core.exceptions import DocumentEmptyError

VOCABULARY = [
    "network", "database", "algorithm", "protocol", "server", "client",
    "request", "response", "memory", "storage", "compiler", "language",
    "river", "mountain", "forest", "harvest", "village", "journey",
]


def build_prose(length: int, seed: int = 7) -> str:
    """Deterministic paragraphs of sentences, at least ``length`` chars long."""
    rng = random.Random(seed)
    paragraphs = []
    total = 0
    while total < length:
        sentences = []
        for _ in range(rng.randint(3, 6)):
            words = [rng.choice(VOCABULARY) for _ in range(rng.randint(5, 15))]
            sentences.append(" ".join(words).capitalize() + ".")
        paragraph = " ".join(sentences)
        paragraphs.append(paragraph)
        total += len(paragraph) + 2
    return "\n\n".join(paragraphs)


def assert_segmentation_invariants(text, result, config):
    trimmed = text.strip()
    segments = result.segments

    assert segments[0].start_index == 0
    assert segments[-1].end_index == len(trimmed)
    assert result.metadata.total_segments == len(segments)
    assert result.metadata.original_length == len(trimmed)

    for index, segment in enumerate(segments, start=1):
        assert segment.position == index
        assert segment.id == f"chunk-{index}"
        assert segment.total_segments == len(segments)
        assert segment.text == trimmed[segment.start_index:segment.end_index]

    for segment in segments[:-1]:
        assert segment.length <= config.max_size

    # A short tail is merged away, so only a lone segment may be under min_size
    if len(segments) > 1:
        for segment in segments:
            assert segment.length >= config.min_size

    for previous, current in zip(segments, segments[1:]):
        assert current.start_index > previous.start_index
        # No gaps, and overlap bounded
        assert current.start_index <= previous.end_index
        assert previous.end_index - current.start_index <= config.overlap_size


class TestSegmentDocument:
    """Segmentation of whole documents"""

    def test_long_document_without_boundaries(self, default_config):
        """A 20000-char run of one letter yields several bounded segments"""
        text = "a" * 20000
        result = segment_document(text, default_config)

        assert len(result) > 1
        assert all(segment.length <= 10000 for segment in result)
        assert result.metadata.total_segments == len(result.segments)
        assert_segmentation_invariants(text, result, default_config)

    def test_forced_split_offsets(self, default_config):
        result = segment_document("a" * 20000, default_config)

        offsets = [(s.start_index, s.end_index) for s in result]
        assert offsets == [(0, 8000), (7800, 15800), (15600, 20000)]
        assert result.segments[0].boundary_type == BoundaryType.FORCED_SIZE
        assert result.segments[-1].boundary_type == BoundaryType.DOCUMENT_END
        assert result.metadata.average_segment_size == 6800

    @pytest.mark.parametrize("text", ["", "   ", "\n\t  \n"])
    def test_empty_document_rejected(self, text, default_config):
        with pytest.raises(DocumentEmptyError):
            segment_document(text, default_config)

    def test_short_document_single_segment(self, default_config):
        result = segment_document("  Hello world.  \n", default_config)

        assert len(result) == 1
        segment = result.segments[0]
        assert segment.text == "Hello world."
        assert (segment.start_index, segment.end_index) == (0, 12)
        assert segment.total_segments == 1
        assert result.metadata.original_length == 12
        assert result.metadata.average_segment_size == 12

    def test_document_between_target_and_max(self, default_config):
        """Longer than target but within max: still one segment"""
        result = segment_document("a" * 9000, default_config)
        assert len(result) == 1
        assert result.segments[0].length == 9000

    def test_prose_invariants_default_sizes(self, default_config):
        text = build_prose(60000)
        result = segment_document(text, default_config)

        assert len(result) > 5
        assert_segmentation_invariants(text, result, default_config)
        assert all(segment.length >= default_config.min_size for segment in result)

    def test_prose_prefers_paragraph_breaks(self, default_config):
        result = segment_document(build_prose(60000), default_config)
        for segment in result.segments[:-1]:
            assert segment.boundary_type == BoundaryType.PARAGRAPH_END

    def test_prose_invariants_small_sizes(self):
        config = make_test_config(target_size=500, max_size=800, min_size=200, overlap_size=50)
        text = build_prose(20000, seed=3)
        result = segment_document(text, config)

        assert len(result) > 10
        assert_segmentation_invariants(text, result, config)

    def test_segmentation_is_deterministic(self, default_config):
        text = build_prose(40000, seed=11)
        assert segment_document(text, default_config) == segment_document(text, default_config)

    def test_short_tail_merged(self):
        config = make_test_config(target_size=1000, max_size=1500, min_size=900, overlap_size=100)
        result = segment_document("a" * 2500, config)

        offsets = [(s.start_index, s.end_index) for s in result]
        assert offsets == [(0, 1000), (900, 2500)]
        assert result.segments[-1].text == "a" * 1600
        assert all(segment.total_segments == 2 for segment in result)

    def test_long_enough_tail_kept(self):
        config = make_test_config(target_size=1000, max_size=1500, min_size=600, overlap_size=100)
        result = segment_document("a" * 2500, config)

        offsets = [(s.start_index, s.end_index) for s in result]
        assert offsets == [(0, 1000), (900, 1900), (1800, 2500)]

    def test_offsets_refer_to_trimmed_text(self, default_config):
        text = "\n\n   " + "a" * 12000 + "   \n"
        result = segment_document(text, default_config)
        assert result.metadata.original_length == 12000
        assert_segmentation_invariants(text, result, default_config)

    def test_three_part_fixture(self, small_config, three_part_text):
        result = segment_document(three_part_text, small_config)
        assert [s.text[0] for s in result] == ["a", "b", "c"]
        assert [s.boundary_type for s in result] == [
            BoundaryType.PARAGRAPH_END, BoundaryType.PARAGRAPH_END, BoundaryType.DOCUMENT_END
        ]

    def test_early_paragraph_break_not_used_below_min_size(self):
        """A break closer to the segment start than min_size is skipped"""
        config = make_test_config(target_size=2000, max_size=3000, min_size=1500, overlap_size=0)
        text = "a" * 1100 + "\n\n" + "b" * 5000
        result = segment_document(text, config)

        offsets = [(s.start_index, s.end_index) for s in result]
        assert offsets == [(0, 2000), (2000, 4000), (4000, 6102)]
        assert result.segments[0].boundary_type == BoundaryType.FORCED_SIZE
        assert_segmentation_invariants(text, result, config)

    def test_prose_invariants_wide_window(self):
        """Search window reaching back past min_size still yields full-size segments"""
        config = make_test_config(target_size=1200, max_size=1800, min_size=900, overlap_size=100)
        text = build_prose(30000, seed=5)
        result = segment_document(text, config)

        assert len(result) > 10
        assert_segmentation_invariants(text, result, config)
