"""
Pytest configuration and fixtures for all tests.

This file is automatically loaded by pytest and provides common fixtures
and configuration for all test modules.
"""

import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

# Import pytest for fixtures
import pytest

from vocabflow.config import make_test_config
from vocabflow.utils.unified_logger import UnifiedLogger, LogLevel


@pytest.fixture
def log_entries():
    """Structured log entries captured by the quiet_logger fixture."""
    return []


@pytest.fixture
def quiet_logger(log_entries):
    """Logger that prints nothing and records every entry."""
    return UnifiedLogger(
        name="test",
        console_output=False,
        enable_colors=False,
        min_level=LogLevel.DEBUG,
        storage_callback=log_entries.append
    )


@pytest.fixture
def default_config():
    """Chunking configuration with production defaults."""
    return make_test_config()


@pytest.fixture
def small_config():
    """Small sizes so multi-segment documents stay short in tests."""
    return make_test_config(
        target_size=1000,
        max_size=1500,
        min_size=500,
        overlap_size=0,
    )


@pytest.fixture
def three_part_text():
    """Document that small_config splits into exactly three segments.

    Segment 1 is all 'a', segment 2 all 'b', segment 3 all 'c'; the parts are
    separated by blank lines that land exactly on the ideal split points.
    """
    return "a" * 998 + "\n\n" + "b" * 998 + "\n\n" + "c" * 998
