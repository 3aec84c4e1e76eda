"""
Centralized configuration

Values come from the environment (optionally a .env file in the working
directory). Configuration objects are frozen: build one at startup and pass
it to every component that needs it.
"""
import os
import logging
from pathlib import Path
from dataclasses import dataclass, replace
from typing import Optional
from dotenv import load_dotenv

from vocabflow.core.exceptions import ConfigurationError

# Setup debug logger for configuration
_config_logger = logging.getLogger('config')

# Check for DEBUG_MODE early (before .env is loaded, check environment)
_debug_mode = os.getenv('DEBUG_MODE', 'false').lower() == 'true'
if _debug_mode:
    logging.basicConfig(level=logging.DEBUG, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    _config_logger.setLevel(logging.DEBUG)
    _config_logger.debug("DEBUG_MODE enabled - verbose logging active")

_env_file = Path.cwd() / '.env'

# Load .env file if it exists
_dotenv_result = load_dotenv(_env_file)
if _debug_mode:
    _config_logger.debug(f"Loaded .env from {_env_file.absolute()}: {_dotenv_result}")

# Debug mode (reload after .env is loaded)
DEBUG_MODE = os.getenv('DEBUG_MODE', 'false').lower() == 'true'


def _parse_bool(name: str, default: bool) -> bool:
    """Read a boolean environment variable ('true' is the only truthy value)."""
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() == 'true'


def _parse_int(name: str, default: int, minimum: Optional[int] = None,
               maximum: Optional[int] = None) -> int:
    """
    Read an integer environment variable and clamp it to [minimum, maximum].

    Unparseable values fall back to the default. Out-of-range values are
    clamped. Both cases log a warning.
    """
    value = os.getenv(name)
    if value is None:
        return default

    try:
        parsed = int(value.strip())
    except ValueError:
        _config_logger.warning(f"Invalid integer value for {name}: {value!r}, using default: {default}")
        return default

    if minimum is not None and parsed < minimum:
        _config_logger.warning(f"{name}={parsed} below minimum {minimum}, using minimum")
        return minimum

    if maximum is not None and parsed > maximum:
        _config_logger.warning(f"{name}={parsed} above maximum {maximum}, using maximum")
        return maximum

    return parsed


def _parse_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value.strip())
    except ValueError:
        _config_logger.warning(f"Invalid float value for {name}: {value!r}, using default: {default}")
        return default


# ============================================================================
# CHUNKING CONFIGURATION
# ============================================================================

# Default values and (min, max) clamps applied when reading the environment
DEFAULT_TARGET_SIZE = 8000
DEFAULT_MAX_SIZE = 10000
DEFAULT_MIN_SIZE = 2000
DEFAULT_OVERLAP_SIZE = 200
DEFAULT_MAX_CONCURRENT_CHUNKS = 3
DEFAULT_CHUNK_TIMEOUT_MS = 30000
DEFAULT_MAX_WORDS_PER_CHUNK = 50
DEFAULT_PROCESSING_WARNING_MS = 10000
DEFAULT_TOKEN_USAGE_WARNING_THRESHOLD = 5000
DEFAULT_TOTAL_TOKEN_WARNING_THRESHOLD = 50000

TARGET_SIZE_RANGE = (1000, 50000)
MAX_SIZE_RANGE = (1000, 100000)
MIN_SIZE_RANGE = (500, 10000)
OVERLAP_SIZE_RANGE = (0, 1000)
MAX_CONCURRENT_CHUNKS_RANGE = (1, 10)
CHUNK_TIMEOUT_MS_RANGE = (5000, 120000)
MAX_WORDS_PER_CHUNK_RANGE = (10, 100)
PROCESSING_WARNING_MS_RANGE = (1000, 60000)
TOKEN_USAGE_WARNING_RANGE = (1000, 20000)
TOTAL_TOKEN_WARNING_RANGE = (10000, 200000)


@dataclass(frozen=True)
class ChunkingConfig:
    """Tunables for segmentation and per-segment processing.

    Instances are validated on construction and never mutated afterwards.
    """

    # Feature flags
    enable_concurrent_processing: bool = True

    # Segmentation (characters)
    target_size: int = DEFAULT_TARGET_SIZE
    max_size: int = DEFAULT_MAX_SIZE
    min_size: int = DEFAULT_MIN_SIZE
    overlap_size: int = DEFAULT_OVERLAP_SIZE

    # Processing
    max_concurrent_chunks: int = DEFAULT_MAX_CONCURRENT_CHUNKS
    chunk_timeout_ms: int = DEFAULT_CHUNK_TIMEOUT_MS
    max_words_per_chunk: int = DEFAULT_MAX_WORDS_PER_CHUNK

    # Performance thresholds (warnings only)
    processing_warning_ms: int = DEFAULT_PROCESSING_WARNING_MS
    token_usage_warning_threshold: int = DEFAULT_TOKEN_USAGE_WARNING_THRESHOLD
    total_token_warning_threshold: int = DEFAULT_TOTAL_TOKEN_WARNING_THRESHOLD

    def __post_init__(self):
        """Validate configuration after initialization."""
        self.validate()

    def validate(self) -> None:
        """Check cross-field consistency.

        Raises:
            ConfigurationError: listing every violated rule
        """
        errors = []

        if self.target_size > self.max_size:
            errors.append(f"target_size ({self.target_size}) cannot exceed max_size ({self.max_size})")

        if self.min_size > self.target_size:
            errors.append(f"min_size ({self.min_size}) cannot exceed target_size ({self.target_size})")

        if self.overlap_size >= self.min_size:
            errors.append(f"overlap_size ({self.overlap_size}) must be less than min_size ({self.min_size})")

        if self.max_words_per_chunk < 10:
            errors.append(f"max_words_per_chunk ({self.max_words_per_chunk}) must be at least 10")

        if self.chunk_timeout_ms < 5000:
            errors.append(f"chunk_timeout_ms ({self.chunk_timeout_ms}) must be at least 5000ms")

        if self.max_concurrent_chunks < 1:
            errors.append(f"max_concurrent_chunks ({self.max_concurrent_chunks}) must be at least 1")

        if errors:
            raise ConfigurationError(
                "Invalid chunking configuration:\n" + "\n".join(errors),
                errors=errors
            )

    @property
    def effective_max_concurrent_chunks(self) -> int:
        """Concurrency limit actually applied (1 when concurrency is disabled)."""
        if not self.enable_concurrent_processing:
            return 1
        return self.max_concurrent_chunks

    @property
    def chunk_timeout_seconds(self) -> float:
        return self.chunk_timeout_ms / 1000.0

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization"""
        return {
            'enable_concurrent_processing': self.enable_concurrent_processing,
            'target_size': self.target_size,
            'max_size': self.max_size,
            'min_size': self.min_size,
            'overlap_size': self.overlap_size,
            'max_concurrent_chunks': self.max_concurrent_chunks,
            'chunk_timeout_ms': self.chunk_timeout_ms,
            'max_words_per_chunk': self.max_words_per_chunk,
            'processing_warning_ms': self.processing_warning_ms,
            'token_usage_warning_threshold': self.token_usage_warning_threshold,
            'total_token_warning_threshold': self.total_token_warning_threshold,
        }


def load_chunking_config() -> ChunkingConfig:
    """
    Load and validate the chunking configuration from environment variables.

    Returns:
        A frozen, validated ChunkingConfig

    Raises:
        ConfigurationError: if the values are inconsistent with each other
    """
    config = ChunkingConfig(
        enable_concurrent_processing=_parse_bool('ENABLE_CONCURRENT_CHUNK_PROCESSING', True),
        target_size=_parse_int('CHUNK_TARGET_SIZE', DEFAULT_TARGET_SIZE, *TARGET_SIZE_RANGE),
        max_size=_parse_int('CHUNK_MAX_SIZE', DEFAULT_MAX_SIZE, *MAX_SIZE_RANGE),
        min_size=_parse_int('CHUNK_MIN_SIZE', DEFAULT_MIN_SIZE, *MIN_SIZE_RANGE),
        overlap_size=_parse_int('CHUNK_OVERLAP_SIZE', DEFAULT_OVERLAP_SIZE, *OVERLAP_SIZE_RANGE),
        max_concurrent_chunks=_parse_int(
            'MAX_CONCURRENT_CHUNKS', DEFAULT_MAX_CONCURRENT_CHUNKS, *MAX_CONCURRENT_CHUNKS_RANGE
        ),
        chunk_timeout_ms=_parse_int('CHUNK_TIMEOUT_MS', DEFAULT_CHUNK_TIMEOUT_MS, *CHUNK_TIMEOUT_MS_RANGE),
        max_words_per_chunk=_parse_int(
            'MAX_WORDS_PER_CHUNK', DEFAULT_MAX_WORDS_PER_CHUNK, *MAX_WORDS_PER_CHUNK_RANGE
        ),
        processing_warning_ms=_parse_int(
            'CHUNK_PROCESSING_WARNING_MS', DEFAULT_PROCESSING_WARNING_MS, *PROCESSING_WARNING_MS_RANGE
        ),
        token_usage_warning_threshold=_parse_int(
            'TOKEN_USAGE_WARNING_THRESHOLD', DEFAULT_TOKEN_USAGE_WARNING_THRESHOLD, *TOKEN_USAGE_WARNING_RANGE
        ),
        total_token_warning_threshold=_parse_int(
            'TOTAL_TOKEN_WARNING_THRESHOLD', DEFAULT_TOTAL_TOKEN_WARNING_THRESHOLD, *TOTAL_TOKEN_WARNING_RANGE
        ),
    )

    if not config.enable_concurrent_processing and config.max_concurrent_chunks > 1:
        _config_logger.warning(
            f"Concurrent processing is disabled but max_concurrent_chunks is "
            f"{config.max_concurrent_chunks}. Chunks will be processed one at a time."
        )

    _config_logger.debug(get_config_summary(config))
    return config


def make_test_config(**overrides) -> ChunkingConfig:
    """Build a config from the defaults plus overrides, ignoring the environment.

    Clamps are not applied, only cross-field validation, so tests can use
    sizes far below the production minimums.
    """
    return replace(_DEFAULT_CONFIG, **overrides)


_DEFAULT_CONFIG = ChunkingConfig()


def get_config_summary(config: ChunkingConfig) -> str:
    """Human-readable summary of a chunking configuration."""
    return "\n".join([
        "Chunking Configuration:",
        "  Feature Flags:",
        f"    - Concurrent Processing: {'enabled' if config.enable_concurrent_processing else 'disabled'}",
        "  Chunking:",
        f"    - Target Size: {config.target_size} chars",
        f"    - Max Size: {config.max_size} chars",
        f"    - Min Size: {config.min_size} chars",
        f"    - Overlap: {config.overlap_size} chars",
        "  Processing:",
        f"    - Max Concurrent: {config.effective_max_concurrent_chunks} chunks",
        f"    - Timeout: {config.chunk_timeout_ms}ms",
        f"    - Max Words/Chunk: {config.max_words_per_chunk}",
        "  Thresholds:",
        f"    - Processing Warning: {config.processing_warning_ms}ms",
        f"    - Token Warning: {config.token_usage_warning_threshold}",
        f"    - Total Token Warning: {config.total_token_warning_threshold}",
    ])


# ============================================================================
# LLM CONFIGURATION
# ============================================================================

DEFAULT_LLM_API_URL = 'http://localhost:11434/v1/chat/completions'
DEFAULT_LLM_MODEL = 'qwen3:14b'


@dataclass(frozen=True)
class LLMConfig:
    """Settings for the OpenAI-compatible endpoint used by extraction and translation."""

    api_url: str = DEFAULT_LLM_API_URL
    api_key: str = ''
    model: str = DEFAULT_LLM_MODEL
    default_max_tokens: int = 2000
    default_temperature: float = 0.7
    timeout_ms: int = 60000

    # Retry settings (consumed by RetryPolicy.from_llm_config)
    max_retries: int = 3
    base_delay_ms: int = 1000
    max_delay_ms: int = 10000
    backoff_multiplier: float = 2.0

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000.0


def load_llm_config() -> LLMConfig:
    """Load LLM endpoint and retry settings from environment variables."""
    config = LLMConfig(
        api_url=os.getenv('LLM_API_URL', DEFAULT_LLM_API_URL),
        api_key=os.getenv('LLM_API_KEY', ''),
        model=os.getenv('LLM_MODEL', DEFAULT_LLM_MODEL),
        default_max_tokens=_parse_int('LLM_MAX_TOKENS', 2000, 1),
        default_temperature=_parse_float('LLM_TEMPERATURE', 0.7),
        timeout_ms=_parse_int('LLM_TIMEOUT_MS', 60000, 1000),
        max_retries=_parse_int('LLM_MAX_RETRIES', 3, 0),
        base_delay_ms=_parse_int('LLM_BASE_DELAY_MS', 1000, 0),
        max_delay_ms=_parse_int('LLM_MAX_DELAY_MS', 10000, 0),
        backoff_multiplier=_parse_float('LLM_BACKOFF_MULTIPLIER', 2.0),
    )

    if DEBUG_MODE or _debug_mode:
        _config_logger.debug(f"   LLM_API_URL: {config.api_url}")
        _config_logger.debug(f"   LLM_MODEL: {config.model}")
        _config_logger.debug(
            f"   LLM_API_KEY: {'***' + config.api_key[-4:] if config.api_key else '(not set)'}"
        )

    return config
