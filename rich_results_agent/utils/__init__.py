"""Utility modules for the Rich Results automation."""

from .logger_config import configure_logger, set_log_level
from .notification import NotificationManager
from .message_types import MessageType

__all__ = [
    "configure_logger",
    "set_log_level",
    "NotificationManager",
    "MessageType",
]
