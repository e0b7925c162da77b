"""Tests for the logging bootstrap."""

import io
import json
import logging

from clientip.configs.system import LoggingConfig
from clientip.infra.logging import setup_logging


class TestSetupLogging:
    def test_json_lines(self):
        handler = setup_logging(LoggingConfig(level="debug", json_output=True))
        stream = io.StringIO()
        handler.setStream(stream)

        logging.getLogger("clientip.test").info("resolved %s", "8.8.8.8")

        record = json.loads(stream.getvalue().strip())
        assert record["message"] == "resolved 8.8.8.8"
        assert record["level"] == "INFO"
        assert record["logger"] == "clientip.test"
        assert record["trace_id"] == ""
        assert record["span_id"] == ""

    def test_dev_format(self):
        handler = setup_logging(LoggingConfig(json_output=False))
        stream = io.StringIO()
        handler.setStream(stream)

        logging.getLogger("clientip.test").warning("dropped literal")

        assert "clientip.test" in stream.getvalue()
        assert "dropped literal" in stream.getvalue()

    def test_level_and_handlers(self):
        handler = setup_logging(LoggingConfig(level="warning"))
        root = logging.getLogger()

        assert root.level == logging.WARNING
        assert root.handlers == [handler]
        assert logging.getLogger("uvicorn").handlers == [handler]
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_defaults_when_no_config(self):
        setup_logging()
        assert logging.getLogger().level == logging.INFO
