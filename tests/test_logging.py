"""structlog configuration."""

import json
import logging

import structlog

from cartflow import configure_logging


class TestConfigureLogging:
    def test_json_lines_with_context(self, capsys):
        try:
            configure_logging("DEBUG", json=True)
            structlog.get_logger("cartflow.cart").info("Added to cart", product_id=1, quantity=2)

            line = capsys.readouterr().out.strip().splitlines()[-1]
            record = json.loads(line)
        finally:
            structlog.reset_defaults()
            logging.getLogger().handlers.clear()

        assert record["event"] == "Added to cart"
        assert record["product_id"] == 1
        assert record["level"] == "info"
        assert record["logger"] == "cartflow.cart"
        assert "timestamp" in record

    def test_quiets_database_loggers(self):
        try:
            configure_logging("DEBUG")
            assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
            assert logging.getLogger("aiosqlite").level == logging.WARNING
        finally:
            structlog.reset_defaults()
            logging.getLogger().handlers.clear()
