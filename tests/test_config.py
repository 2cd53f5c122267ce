"""Tests for RuntimeConfig."""

import pytest

from formflow.core.config import RuntimeConfig


class TestDefaults:
    def test_defaults(self):
        config = RuntimeConfig()
        assert config.async_debounce_seconds == 0.3
        assert config.async_timeout_seconds == 10.0
        assert config.step_tolerance == 1e-9
        assert config.enforce_options is True
        assert config.include_unanswered is True
        assert config.strip_whitespace is True
        assert config.draft_dir is None
        assert config.log_level == "INFO"


class TestValidation:
    @pytest.mark.parametrize(
        "kwargs, message",
        [
            ({"async_debounce_seconds": -1}, "async_debounce_seconds"),
            ({"async_timeout_seconds": 0}, "async_timeout_seconds"),
            ({"step_tolerance": 1.5}, "step_tolerance"),
            ({"log_level": "LOUD"}, "log_level"),
        ],
    )
    def test_bad_values_raise(self, kwargs, message):
        with pytest.raises(ValueError, match=message):
            RuntimeConfig(**kwargs)

    def test_log_level_case_insensitive(self):
        assert RuntimeConfig(log_level="debug").log_level == "debug"


class TestPresets:
    def test_development(self):
        config = RuntimeConfig.for_development()
        assert config.log_level == "DEBUG"
        assert config.async_debounce_seconds < RuntimeConfig().async_debounce_seconds

    def test_production(self):
        config = RuntimeConfig.for_production()
        assert config.log_level == "WARNING"
        assert config.async_timeout_seconds == 5.0

    def test_testing_has_no_debounce(self):
        assert RuntimeConfig.for_testing().async_debounce_seconds == 0.0


class TestFromEnv:
    def test_reads_prefixed_variables(self, monkeypatch):
        monkeypatch.setenv("FORMFLOW_ASYNC_DEBOUNCE_SECONDS", "0.05")
        monkeypatch.setenv("FORMFLOW_ENFORCE_OPTIONS", "false")
        monkeypatch.setenv("FORMFLOW_INCLUDE_UNANSWERED", "YES")
        monkeypatch.setenv("FORMFLOW_DRAFT_DIR", "/tmp/drafts")

        config = RuntimeConfig.from_env()

        assert config.async_debounce_seconds == 0.05
        assert config.enforce_options is False
        assert config.include_unanswered is True
        assert config.draft_dir == "/tmp/drafts"
        assert config.async_timeout_seconds == 10.0

    def test_custom_prefix(self, monkeypatch):
        monkeypatch.setenv("APP_LOG_LEVEL", "ERROR")
        assert RuntimeConfig.from_env(prefix="APP_").log_level == "ERROR"

    def test_invalid_value_raises(self, monkeypatch):
        monkeypatch.setenv("FORMFLOW_ASYNC_TIMEOUT_SECONDS", "-2")
        with pytest.raises(ValueError):
            RuntimeConfig.from_env()
