"""Tests for logging setup helpers."""

import logging

from loguru import logger

from shopfloor.core.logging import InterceptHandler, quiet_paths_filter


class TestQuietPathsFilter:
    """Tests for quiet_paths_filter."""

    def test_health_hidden_above_debug(self):
        record = {"message": '127.0.0.1 - "GET /health HTTP/1.1" 200', "level": logger.level("INFO")}

        assert quiet_paths_filter(record) is False

    def test_health_shown_at_debug(self):
        record = {"message": '127.0.0.1 - "GET /health HTTP/1.1" 200', "level": logger.level("DEBUG")}

        assert quiet_paths_filter(record) is True

    def test_other_paths_pass(self):
        record = {"message": '"POST /api/processes/start HTTP/1.1" 200', "level": logger.level("INFO")}

        assert quiet_paths_filter(record) is True


class TestInterceptHandler:
    """Tests for stdlib forwarding."""

    def test_stdlib_records_reach_loguru(self):
        records = []
        sink_id = logger.add(lambda message: records.append(message.record), level="DEBUG")
        stdlib_logger = logging.getLogger("shopfloor.tests.intercept")
        stdlib_logger.handlers = [InterceptHandler()]
        stdlib_logger.propagate = False
        stdlib_logger.setLevel(logging.INFO)
        try:
            stdlib_logger.warning("pool exhausted")
        finally:
            logger.remove(sink_id)

        assert records[-1]["message"] == "pool exhausted"
        assert records[-1]["level"].name == "WARNING"
        assert records[-1]["extra"]["name"] == "shopfloor.tests.intercept"
