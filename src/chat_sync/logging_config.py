"""Logging setup for chat-sync."""

import logging

from chat_sync.config import get_settings


def configure_logging(level: str | None = None) -> None:
    """Apply the process-wide logging format.

    Args:
        level: Log level name; defaults to the configured ``log_level``
    """
    logging.basicConfig(
        level=(level or get_settings().log_level).upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
