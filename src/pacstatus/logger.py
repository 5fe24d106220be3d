import logging
from typing import List

import notifiers.logging

from pacstatus import config

NOTIFY_FORMAT = "pac-status %(levelname)s [%(name)s] %(message)s"


def get_log_handlers(logger: logging.Logger) -> List[logging.Handler]:
    """Forward records at ``TELEGRAM_LEVEL`` and above to Telegram, if configured."""
    if config.TELEGRAM_TOKEN is None:
        return []
    handler = notifiers.logging.NotificationHandler(
        "telegram",
        defaults={
            "token": config.TELEGRAM_TOKEN,
            "chat_id": config.TELEGRAM_CHAT_ID,
        },
    )
    handler.setLevel(config.TELEGRAM_LEVEL)
    handler.setFormatter(logging.Formatter(NOTIFY_FORMAT))
    logger.addHandler(handler)
    return [handler]
