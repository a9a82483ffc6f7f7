"""Unit tests for configuration, retry helpers and logging setup."""

import logging
from unittest.mock import Mock, patch

import pytest

from utils.config import load_config, validate_config
from utils.retry import APIRateLimitError, NetworkError, classify_api_error, retry_api_call


@pytest.mark.unit
class TestLoadConfig:
    def test_defaults(self, monkeypatch):
        """Test configuration defaults."""
        for name in (
            "GEMINI_MODEL",
            "DEMO_MODE",
            "CHARACTER_VISUAL_CONCURRENCY",
            "STORYBOARD_CONCURRENCY",
            "VIDEO_POLL_INTERVAL",
        ):
            monkeypatch.delenv(name, raising=False)

        config = load_config()

        assert config["gemini_model"] == "gemini-2.5-flash"
        assert config["demo_mode"] is False
        assert config["character_visual_concurrency"] == 1
        assert config["storyboard_concurrency"] == 1
        assert config["video_poll_interval"] == 10.0

    def test_env_overrides(self, monkeypatch):
        """Test that environment variables override defaults."""
        monkeypatch.setenv("DEMO_MODE", "true")
        monkeypatch.setenv("STORYBOARD_CONCURRENCY", "3")

        config = load_config()

        assert config["demo_mode"] is True
        assert config["storyboard_concurrency"] == 3


@pytest.mark.unit
class TestValidateConfig:
    def test_valid(self, sample_config):
        """Test that a complete config validates."""
        assert validate_config(sample_config) == []

    def test_missing_key_outside_demo_mode(self, sample_config):
        """Test that a missing API key is reported outside demo mode."""
        sample_config["gemini_api_key"] = None

        errors = validate_config(sample_config)

        assert any("GEMINI_API_KEY" in e for e in errors)

    def test_missing_key_allowed_in_demo_mode(self, sample_config):
        """Test that demo mode does not need an API key."""
        sample_config["gemini_api_key"] = None
        sample_config["demo_mode"] = True

        assert validate_config(sample_config) == []

    def test_concurrency_must_be_positive(self, sample_config):
        """Test that concurrency below one is rejected."""
        sample_config["character_visual_concurrency"] = 0

        errors = validate_config(sample_config)

        assert errors == ["CHARACTER_VISUAL_CONCURRENCY must be at least 1"]


@pytest.mark.unit
class TestRetry:
    @pytest.mark.parametrize(
        "message,expected",
        [
            ("429 Too Many Requests", APIRateLimitError),
            ("Quota exceeded for model", APIRateLimitError),
            ("Connection reset by peer", NetworkError),
            ("Request timed out", NetworkError),
        ],
    )
    def test_classify_transient_errors(self, message, expected):
        """Test classification of transient API errors."""
        assert isinstance(classify_api_error(RuntimeError(message)), expected)

    def test_classify_keeps_other_errors(self):
        """Test that other errors are returned unchanged."""
        error = ValueError("bad request")

        assert classify_api_error(error) is error

    def test_non_retryable_error_raised_immediately(self):
        """Test that non-retryable errors are not retried."""
        func = Mock(side_effect=ValueError("bad"))
        wrapped = retry_api_call(max_retries=3)(func)

        with pytest.raises(ValueError):
            wrapped()

        assert func.call_count == 1

    def test_retries_then_succeeds(self):
        """Test retrying until a call succeeds."""
        func = Mock(side_effect=[NetworkError("down"), NetworkError("down"), "ok"])
        func.__name__ = "fetch"
        wrapped = retry_api_call(max_retries=3, base_delay=0.5)(func)

        with patch("utils.retry.time.sleep") as sleep:
            assert wrapped() == "ok"

        assert func.call_count == 3
        assert sleep.call_count == 2


@pytest.mark.unit
def test_structured_logging_includes_run_id(capsys):
    """Test that JSON logs carry the current run id."""
    from utils.logging import clear_run_context, set_run_context, setup_logging

    setup_logging("INFO", json_output=True)
    set_run_context("run-123")
    try:
        logging.getLogger("moviemaker.test").info("hello")
    finally:
        clear_run_context()
        logging.getLogger().handlers.clear()

    captured = capsys.readouterr()
    assert '"run_id": "run-123"' in captured.err
    assert '"event": "hello"' in captured.err
