"""
Unit tests for correlation module.
"""

import logging
import uuid

import pytest

from berth_recon.utils.correlation import (
    CorrelationContext,
    attach_correlation_id_to_envelope,
    clear_correlation_id,
    correlation_id_filter,
    generate_correlation_id,
    get_correlation_id,
    get_or_create_correlation_id,
    set_correlation_id,
    setup_correlation_logging,
)


class TestCorrelationIdGeneration:
    """Test correlation ID generation functions."""

    def test_generate_correlation_id_returns_valid_uuid(self):
        """Test that generated correlation ID is a valid UUID."""
        correlation_id = generate_correlation_id()

        assert isinstance(correlation_id, str)
        assert str(uuid.UUID(correlation_id)) == correlation_id

    def test_generate_correlation_id_returns_unique_values(self):
        """Test that multiple generated IDs are unique."""
        assert len({generate_correlation_id() for _ in range(3)}) == 3


class TestCorrelationIdContext:
    """Test correlation ID context management."""

    def setup_method(self):
        """Clear correlation ID before each test."""
        clear_correlation_id()

    def teardown_method(self):
        """Clear correlation ID after each test."""
        clear_correlation_id()

    def test_get_correlation_id_returns_none_when_not_set(self):
        assert get_correlation_id() is None

    def test_set_and_get_correlation_id(self):
        set_correlation_id("run-123")

        assert get_correlation_id() == "run-123"

    @pytest.mark.parametrize("value", ["", None, 12345])
    def test_set_correlation_id_rejects_invalid_values(self, value):
        """Test that empty or non-string IDs raise ValueError."""
        with pytest.raises(ValueError, match="non-empty string"):
            set_correlation_id(value)

    def test_get_or_create_correlation_id(self):
        """Test an ID is created once and then reused."""
        created = get_or_create_correlation_id()

        assert get_or_create_correlation_id() == created


class TestCorrelationContext:
    """Test CorrelationContext context manager."""

    def setup_method(self):
        clear_correlation_id()

    def teardown_method(self):
        clear_correlation_id()

    def test_context_creates_new_id(self):
        with CorrelationContext() as correlation_id:
            assert get_correlation_id() == correlation_id

        assert get_correlation_id() is None

    def test_context_uses_provided_id(self):
        with CorrelationContext("run-abc") as correlation_id:
            assert correlation_id == "run-abc"

    def test_context_restores_previous_id(self):
        set_correlation_id("outer")

        with CorrelationContext("inner"):
            assert get_correlation_id() == "inner"

        assert get_correlation_id() == "outer"

    def test_context_clears_on_exception(self):
        with pytest.raises(RuntimeError):
            with CorrelationContext("failing"):
                raise RuntimeError("boom")

        assert get_correlation_id() is None


class TestEnvelopeCorrelation:
    """Test attaching correlation IDs to response envelopes."""

    def setup_method(self):
        clear_correlation_id()

    def teardown_method(self):
        clear_correlation_id()

    def test_attach_uses_current_id(self):
        with CorrelationContext("run-42"):
            envelope = attach_correlation_id_to_envelope({"success": True, "data": None, "message": ""})

        assert envelope["meta"] == {"correlation_id": "run-42"}
        assert envelope["success"] is True

    def test_attach_creates_id_when_not_set(self):
        envelope = attach_correlation_id_to_envelope({})

        assert envelope["meta"]["correlation_id"] == get_correlation_id()

    def test_attach_preserves_existing_meta(self):
        envelope = attach_correlation_id_to_envelope({"meta": {"source": "cli"}})

        assert envelope["meta"]["source"] == "cli"
        assert "correlation_id" in envelope["meta"]

    def test_attach_to_non_dict_raises_error(self):
        with pytest.raises(ValueError, match="dictionary"):
            attach_correlation_id_to_envelope(["not", "a", "dict"])


class TestCorrelationLogging:
    """Test the logging filter."""

    def setup_method(self):
        clear_correlation_id()

    def teardown_method(self):
        clear_correlation_id()

    def _record(self):
        return logging.LogRecord("test", logging.INFO, __file__, 1, "message", None, None)

    def test_filter_when_no_id(self):
        record = self._record()

        assert correlation_id_filter(record) is True
        assert record.correlation_id == "N/A"

    def test_filter_with_id(self):
        record = self._record()

        with CorrelationContext("run-7"):
            correlation_id_filter(record)

        assert record.correlation_id == "run-7"

    def test_setup_correlation_logging(self):
        handler = logging.StreamHandler()

        setup_correlation_logging(handler)

        assert correlation_id_filter in handler.filters
