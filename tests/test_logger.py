import logging

from pacstatus import config
from pacstatus.logger import NOTIFY_FORMAT, get_log_handlers


def test_no_handler_without_token(monkeypatch):
    monkeypatch.setattr(config, "TELEGRAM_TOKEN", None)
    logger = logging.getLogger("pacstatus.test.none")

    assert get_log_handlers(logger) == []
    assert logger.handlers == []


def test_handler_uses_configured_level(monkeypatch):
    monkeypatch.setattr(config, "TELEGRAM_TOKEN", "123:abc")
    monkeypatch.setattr(config, "TELEGRAM_CHAT_ID", "42")
    monkeypatch.setattr(config, "TELEGRAM_LEVEL", logging.ERROR)
    logger = logging.getLogger("pacstatus.test.telegram")

    handlers = get_log_handlers(logger)
    try:
        assert len(handlers) == 1
        handler = handlers[0]
        assert handler in logger.handlers
        assert handler.level == logging.ERROR
        assert handler.formatter._fmt == NOTIFY_FORMAT
    finally:
        for handler in handlers:
            logger.removeHandler(handler)
