"""Alert message templates."""

from chartalerts.messages.template import (
    AVAILABLE_PLACEHOLDERS,
    format_value,
    get_default_message_template,
    process_alert_message,
)

__all__ = [
    "AVAILABLE_PLACEHOLDERS",
    "format_value",
    "get_default_message_template",
    "process_alert_message",
]
