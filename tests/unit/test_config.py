"""
Tests for chunking and LLM configuration loading.
"""

import dataclasses

import pytest

from vocabflow.config import (
    ChunkingConfig,
    LLMConfig,
    get_config_summary,
    load_chunking_config,
    load_llm_config,
    make_test_config,
)
from vocabflow.core.exceptions import ConfigurationError

CHUNKING_ENV_VARS = [
    'ENABLE_CONCURRENT_CHUNK_PROCESSING', 'CHUNK_TARGET_SIZE', 'CHUNK_MAX_SIZE',
    'CHUNK_MIN_SIZE', 'CHUNK_OVERLAP_SIZE', 'MAX_CONCURRENT_CHUNKS', 'CHUNK_TIMEOUT_MS',
    'MAX_WORDS_PER_CHUNK', 'CHUNK_PROCESSING_WARNING_MS', 'TOKEN_USAGE_WARNING_THRESHOLD',
    'TOTAL_TOKEN_WARNING_THRESHOLD',
]

LLM_ENV_VARS = [
    'LLM_API_URL', 'LLM_API_KEY', 'LLM_MODEL', 'LLM_MAX_TOKENS', 'LLM_TEMPERATURE',
    'LLM_TIMEOUT_MS', 'LLM_MAX_RETRIES', 'LLM_BASE_DELAY_MS', 'LLM_MAX_DELAY_MS',
    'LLM_BACKOFF_MULTIPLIER',
]


@pytest.fixture
def clean_env(monkeypatch):
    for name in CHUNKING_ENV_VARS + LLM_ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestChunkingConfigValidation:
    """Cross-field validation on construction"""

    def test_defaults_are_valid(self):
        config = ChunkingConfig()
        assert config.target_size == 8000
        assert config.max_size == 10000
        assert config.min_size == 2000
        assert config.overlap_size == 200
        assert config.max_concurrent_chunks == 3
        assert config.chunk_timeout_ms == 30000
        assert config.max_words_per_chunk == 50

    def test_target_above_max_rejected(self):
        with pytest.raises(ConfigurationError) as exc_info:
            ChunkingConfig(target_size=12000, max_size=10000)
        assert len(exc_info.value.errors) == 1
        assert "target_size" in exc_info.value.errors[0]

    def test_all_violations_reported_together(self):
        """Every broken rule is listed, not just the first"""
        with pytest.raises(ConfigurationError) as exc_info:
            ChunkingConfig(
                target_size=20000,
                max_size=10000,
                overlap_size=5000,
                max_words_per_chunk=5,
            )
        errors = exc_info.value.errors
        assert len(errors) == 3
        assert any("overlap_size" in e for e in errors)
        assert any("max_words_per_chunk" in e for e in errors)

    def test_timeout_minimum(self):
        with pytest.raises(ConfigurationError):
            ChunkingConfig(chunk_timeout_ms=1000)

    def test_concurrency_minimum(self):
        with pytest.raises(ConfigurationError):
            ChunkingConfig(max_concurrent_chunks=0)

    def test_config_is_frozen(self):
        config = ChunkingConfig()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.target_size = 5000

    def test_effective_concurrency_when_disabled(self):
        config = ChunkingConfig(enable_concurrent_processing=False, max_concurrent_chunks=5)
        assert config.effective_max_concurrent_chunks == 1

    def test_effective_concurrency_when_enabled(self):
        config = ChunkingConfig(max_concurrent_chunks=5)
        assert config.effective_max_concurrent_chunks == 5

    def test_to_dict_round_trips_fields(self):
        config = ChunkingConfig()
        assert ChunkingConfig(**config.to_dict()) == config


class TestLoadChunkingConfig:
    """Environment loading with clamping"""

    def test_defaults_without_env(self, clean_env):
        assert load_chunking_config() == ChunkingConfig()

    def test_values_read_from_env(self, clean_env):
        clean_env.setenv('CHUNK_TARGET_SIZE', '6000')
        clean_env.setenv('MAX_WORDS_PER_CHUNK', '30')
        config = load_chunking_config()
        assert config.target_size == 6000
        assert config.max_words_per_chunk == 30

    def test_out_of_range_value_clamped(self, clean_env):
        clean_env.setenv('MAX_CONCURRENT_CHUNKS', '50')
        assert load_chunking_config().max_concurrent_chunks == 10

    def test_below_range_value_clamped(self, clean_env):
        clean_env.setenv('CHUNK_TIMEOUT_MS', '10')
        assert load_chunking_config().chunk_timeout_ms == 5000

    def test_unparseable_value_uses_default(self, clean_env):
        clean_env.setenv('CHUNK_TIMEOUT_MS', 'abc')
        assert load_chunking_config().chunk_timeout_ms == 30000

    def test_concurrency_flag(self, clean_env):
        clean_env.setenv('ENABLE_CONCURRENT_CHUNK_PROCESSING', 'false')
        config = load_chunking_config()
        assert config.enable_concurrent_processing is False
        assert config.effective_max_concurrent_chunks == 1

    def test_inconsistent_env_raises(self, clean_env):
        clean_env.setenv('CHUNK_TARGET_SIZE', '20000')
        with pytest.raises(ConfigurationError):
            load_chunking_config()


class TestMakeTestConfig:
    """Test helper that bypasses environment and clamps"""

    def test_sizes_below_production_minimums(self):
        config = make_test_config(target_size=100, max_size=200, min_size=50, overlap_size=10)
        assert config.target_size == 100
        assert config.max_size == 200

    def test_validation_still_applies(self):
        with pytest.raises(ConfigurationError):
            make_test_config(target_size=300, max_size=200)

    def test_unknown_field_rejected(self):
        with pytest.raises(TypeError):
            make_test_config(no_such_field=1)


class TestConfigSummary:

    def test_summary_lists_sizes(self):
        summary = get_config_summary(ChunkingConfig())
        assert "Target Size: 8000 chars" in summary
        assert "Max Concurrent: 3 chunks" in summary

    def test_summary_reflects_disabled_concurrency(self):
        summary = get_config_summary(ChunkingConfig(enable_concurrent_processing=False))
        assert "Concurrent Processing: disabled" in summary
        assert "Max Concurrent: 1 chunks" in summary


class TestLoadLLMConfig:

    def test_defaults(self, clean_env):
        assert load_llm_config() == LLMConfig()

    def test_env_overrides(self, clean_env):
        clean_env.setenv('LLM_MODEL', 'mistral-small')
        clean_env.setenv('LLM_API_KEY', 'sk-test')
        clean_env.setenv('LLM_TIMEOUT_MS', '30000')
        clean_env.setenv('LLM_MAX_RETRIES', '5')
        config = load_llm_config()
        assert config.model == 'mistral-small'
        assert config.api_key == 'sk-test'
        assert config.timeout_seconds == 30.0
        assert config.max_retries == 5

    def test_negative_retries_clamped(self, clean_env):
        clean_env.setenv('LLM_MAX_RETRIES', '-2')
        assert load_llm_config().max_retries == 0
