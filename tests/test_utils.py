"""
Tests for utility modules: logging, validation, retry.

Run with: pytest tests/test_utils.py -v
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import Mock

import pytest
import requests

from portfolio_advisor.utils import (
    AdvisorFormatter,
    RetryConfig,
    ValidationError,
    get_logger,
    retry_with_backoff,
    setup_logging,
    validate_construction_year,
    validate_latitude,
    validate_longitude,
    validate_cost,
    validate_energy_class,
    validate_floor_area,
    validate_number_of_floors,
)
from portfolio_advisor.utils.retry import RetryableRequest, calculate_delay, should_retry_exception
from portfolio_advisor.utils.validation import parse_float


class TestLogging:
    """Tests for logging configuration."""

    def test_get_logger(self):
        logger = get_logger("test_module")
        assert logger.name == "test_module"

    def test_setup_adds_handler(self):
        root = logging.getLogger()
        saved = list(root.handlers)
        try:
            setup_logging("DEBUG")
            assert len(root.handlers) == 1
            assert isinstance(root.handlers[0].formatter, AdvisorFormatter)
        finally:
            root.handlers[:] = saved

    def test_formatter_appends_context(self):
        formatter = AdvisorFormatter(use_colors=False)
        record = logging.LogRecord("portfolio_advisor", logging.INFO, __file__, 1, "settled", None, None)
        record.building_id = "b-1"
        record.stage = "estimate"

        assert formatter.format(record).endswith("settled [building_id=b-1, stage=estimate]")


class TestCoordinateValidation:
    """Tests for coordinate validation."""

    def test_valid_coordinates(self):
        assert validate_latitude("45.07") == 45.07
        assert validate_longitude(7.68) == 7.68

    def test_invalid_latitude(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_latitude(100.0)
        assert exc_info.value.field == "lat"

    def test_invalid_longitude(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_longitude(200.0)
        assert exc_info.value.field == "lng"


class TestNumericValidation:
    """Tests for numeric field validation."""

    @pytest.mark.parametrize("value", ["", "  ", None, "nan", "inf", True, "12a"])
    def test_parse_float_rejects(self, value):
        with pytest.raises(ValidationError):
            parse_float(value, "x")

    def test_construction_year_bounds(self):
        assert validate_construction_year("1800") == 1800
        assert validate_construction_year(2030) == 2030
        with pytest.raises(ValidationError, match="too old"):
            validate_construction_year(1799)
        with pytest.raises(ValidationError, match="future"):
            validate_construction_year(2031)

    def test_floor_area_positive(self):
        assert validate_floor_area("85.5") == 85.5
        with pytest.raises(ValidationError):
            validate_floor_area(0)

    def test_number_of_floors(self):
        assert validate_number_of_floors("1") == 1
        with pytest.raises(ValidationError):
            validate_number_of_floors("2.5")

    def test_cost_absent_zero_and_negative(self):
        assert validate_cost("", "capex") is None
        assert validate_cost(None, "capex") is None
        assert validate_cost("0", "capex") == 0.0
        with pytest.raises(ValidationError):
            validate_cost("-10", "capex")


class TestEnergyClassValidation:
    def test_normalizes_case(self):
        assert validate_energy_class(" a+ ") == "A+"

    def test_invalid_class_has_suggestions(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_energy_class("H")
        assert exc_info.value.suggestions


class TestRetry:
    """Tests for retry_with_backoff."""

    def test_retries_transient_errors(self):
        calls = Mock(side_effect=[requests.ConnectionError("down"), requests.Timeout("slow"), "ok"])
        sleeps = []

        @retry_with_backoff(config=RetryConfig(max_retries=3, jitter=False), sleep=sleeps.append)
        def fetch():
            return calls()

        assert fetch() == "ok"
        assert calls.call_count == 3
        assert sleeps == [1.0, 2.0]

    def test_gives_up_after_max_retries(self):
        calls = Mock(side_effect=requests.ConnectionError("down"))

        @retry_with_backoff(max_retries=2, sleep=lambda _: None)
        def fetch():
            return calls()

        with pytest.raises(requests.ConnectionError):
            fetch()
        assert calls.call_count == 3

    def test_non_retryable_raises_immediately(self):
        calls = Mock(side_effect=ValueError("bad payload"))

        @retry_with_backoff(sleep=lambda _: None)
        def fetch():
            return calls()

        with pytest.raises(ValueError):
            fetch()
        assert calls.call_count == 1

    def test_http_status_decides(self):
        config = RetryConfig()
        for status, expected in [(503, True), (429, True), (400, False), (404, False)]:
            response = Mock(status_code=status)
            assert should_retry_exception(requests.HTTPError(response=response), config) is expected

    def test_delay_capped(self):
        config = RetryConfig(base_delay=1.0, max_delay=5.0, jitter=False)
        assert calculate_delay(0, config) == 1.0
        assert calculate_delay(10, config) == 5.0


class TestRetryableRequest:
    """Tests for the shared HTTP session."""

    def test_session_created_up_front(self):
        api = RetryableRequest("http://api.test/")
        try:
            assert isinstance(api.session, requests.Session)
            assert api.base_url == "http://api.test"
        finally:
            api.close()

    def test_concurrent_calls_share_one_session(self):
        """Calls from several executor threads all go through the same session."""
        session = Mock(spec=requests.Session)
        session.post.return_value = Mock(status_code=200, json=Mock(return_value={"ok": True}))
        api = RetryableRequest("http://api.test", session=session, token="secret")

        with ThreadPoolExecutor(max_workers=4) as pool:
            replies = list(pool.map(lambda i: api.post_json("/x", {"i": i}), range(8)))

        assert replies == [{"ok": True}] * 8
        assert api.session is session
        assert session.post.call_count == 8
        headers = session.post.call_args.kwargs["headers"]
        assert headers["Authorization"] == "Bearer secret"

    def test_close_closes_session(self):
        session = Mock(spec=requests.Session)
        with RetryableRequest("http://api.test", session=session):
            pass
        session.close.assert_called_once()
