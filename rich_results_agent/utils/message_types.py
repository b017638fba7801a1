from enum import Enum


class MessageType(Enum):
    """Progress event types emitted while a task runs."""
    INFO = "info"
    STATE_CHANGE = "state_change"
    RETRY = "retry"
    RECOVERY = "recovery"
    WARNING = "warning"
    ERROR = "error"
    SUCCESS = "success"
