import uuid
from unittest.mock import patch

import pytest

from app.core.config import get_settings
from app.core.logging import (
    add_correlation_id,
    add_request_context,
    add_service_context,
    correlation_context,
    correlation_id_var,
    get_correlation_id,
    get_logger,
    log_business_event,
    role_var,
    set_caller_context,
    user_id_var,
)


class TestStructuredLogging:
    """Test suite for structured logging helpers"""

    @pytest.fixture
    def logger(self):
        """Create a logger instance for testing"""
        return get_logger("test_logger")

    def test_logger_initialization(self, logger):
        assert logger is not None
        assert hasattr(logger, 'info')
        assert hasattr(logger, 'warning')

    def test_correlation_context(self):
        """Test correlation ID context manager"""
        correlation_id = str(uuid.uuid4())

        with correlation_context(correlation_id):
            assert get_correlation_id() == correlation_id

    def test_correlation_context_nested(self):
        """Test nested correlation ID contexts"""
        with correlation_context("outer", user_id="U1"):
            with correlation_context("inner", user_id="U2"):
                assert correlation_id_var.get() == "inner"
                assert user_id_var.get() == "U2"

            assert correlation_id_var.get() == "outer"
            assert user_id_var.get() == "U1"

    def test_caller_context_reset_on_exit(self):
        """Caller context bound inside a request does not leak out of it"""
        with correlation_context("req-1"):
            set_caller_context("U9", "admin")
            assert role_var.get() == "admin"

        assert user_id_var.get() != "U9"
        assert role_var.get() != "admin"

    def test_processors_add_context(self):
        with correlation_context("req-2"):
            set_caller_context("U3", "collector")
            event = add_correlation_id(None, "info", {})
            event = add_request_context(None, "info", event)
            event = add_service_context(None, "info", event)

        assert event["correlation_id"] == "req-2"
        assert event["user_id"] == "U3"
        assert event["role"] == "collector"
        assert event["service"] == get_settings().service_name

    def test_log_business_event(self):
        with patch("app.core.logging.get_business_logger") as mock_get_logger:
            log_business_event("payment_request_decided", request_id="pr-1", status="approved")

        mock_get_logger.return_value.info.assert_called_once_with(
            "Business event",
            event_type="payment_request_decided",
            request_id="pr-1",
            status="approved",
        )
