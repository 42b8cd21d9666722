"""
Logging Configuration Tests

LOG_LEVEL environment variable control for the loguru console sink.
"""

import os
from unittest.mock import patch

from meeting_approval.logging_config import (
    DEFAULT_LOG_LEVEL,
    VALID_LOG_LEVELS,
    configure_logging,
    get_log_level,
)


class TestLogLevelConfiguration:
    """Tests for LOG_LEVEL environment variable configuration."""

    def test_log_level_default_is_info(self) -> None:
        # given
        with patch.dict(os.environ, {}, clear=False):
            os.environ.pop("LOG_LEVEL", None)

            # when
            level = get_log_level()

        # then
        assert level == "INFO"
        assert level == DEFAULT_LOG_LEVEL

    def test_every_valid_level_is_accepted(self) -> None:
        for expected in VALID_LOG_LEVELS:
            with patch.dict(os.environ, {"LOG_LEVEL": expected}):
                assert get_log_level() == expected

    def test_invalid_log_level_falls_back_to_info(self) -> None:
        # given / when
        with patch.dict(os.environ, {"LOG_LEVEL": "CHATTY"}):
            level = get_log_level()

        # then
        assert level == "INFO"

    def test_log_level_is_case_insensitive(self) -> None:
        # given / when
        with patch.dict(os.environ, {"LOG_LEVEL": "warning"}):
            level = get_log_level()

        # then
        assert level == "WARNING"


class TestConfigureLogging:
    def test_configure_replaces_default_sink(self) -> None:
        # given
        with (
            patch.dict(os.environ, {"LOG_LEVEL": "ERROR"}),
            patch("meeting_approval.logging_config.logger") as mock_logger,
        ):
            # when
            configure_logging()

        # then
        mock_logger.remove.assert_called_once_with()
        _, kwargs = mock_logger.add.call_args
        assert kwargs["level"] == "ERROR"
