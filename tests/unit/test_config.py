"""Tests for config.py: defaults and __post_init__ validation."""

from __future__ import annotations

import pytest

from catalogmedia.config import (
    DEFAULT_ALLOWED_MIME_PREFIXES,
    DEFAULT_RETRYABLE_STATUSES,
    UploaderConfig,
)


class TestDefaults:
    def test_storefront_defaults(self):
        cfg = UploaderConfig()
        assert cfg.base_url == "http://localhost:5000"
        assert cfg.upload_path == "/api/upload"
        assert cfg.upload_field == "files"
        assert cfg.max_file_size_bytes == 20 * 1024 * 1024
        assert cfg.max_number_of_files == 1
        assert cfg.allowed_mime_prefixes == ["image/", "video/"]
        assert cfg.max_dimension == 2048
        assert cfg.initial_quality == 0.85
        assert cfg.quality_floor == 0.5
        assert cfg.target_size_bytes == 300 * 1024
        assert cfg.retry_max_attempts == 3
        assert cfg.retry_base_delay == 1.0
        assert cfg.retryable_statuses == frozenset({503, 504, 544})
        assert cfg.max_concurrent_files == 1
        assert cfg.metrics is None

    def test_prefix_list_is_not_shared(self):
        cfg = UploaderConfig()
        cfg.allowed_mime_prefixes.append("application/pdf")
        assert DEFAULT_ALLOWED_MIME_PREFIXES == ["image/", "video/"]
        assert UploaderConfig().allowed_mime_prefixes == ["image/", "video/"]

    def test_statuses_coerced_to_frozenset(self):
        cfg = UploaderConfig(retryable_statuses={500, 503})
        assert isinstance(cfg.retryable_statuses, frozenset)
        assert DEFAULT_RETRYABLE_STATUSES == frozenset({503, 504, 544})


class TestValidation:
    @pytest.mark.parametrize(
        "overrides",
        [
            {"upload_path": "api/upload"},
            {"upload_field": ""},
            {"max_file_size_bytes": 0},
            {"max_number_of_files": 0},
            {"allowed_mime_prefixes": []},
            {"max_dimension": 0},
            {"initial_quality": 0},
            {"initial_quality": 1.5},
            {"quality_floor": 0.9},
            {"quality_floor": 0},
            {"quality_step": -0.1},
            {"target_size_bytes": 0},
            {"retry_max_attempts": 0},
            {"retry_base_delay": -1},
            {"max_concurrent_files": 0},
            {"timeout_seconds": 0},
        ],
    )
    def test_invalid_values_raise(self, overrides):
        with pytest.raises(ValueError):
            UploaderConfig(**overrides)

    def test_single_attempt_is_valid(self):
        assert UploaderConfig(retry_max_attempts=1).retry_max_attempts == 1

    def test_zero_delay_is_valid(self):
        assert UploaderConfig(retry_base_delay=0).retry_base_delay == 0
