"""
Failure reports for the backend handlers.

Each report is a plain-text file named after the failing handler, so a
directory listing shows at a glance which handler broke and when.
"""

import os
import sys
import traceback
from datetime import datetime
from typing import Any

DEFAULT_LOG_DIR = os.path.join(os.path.dirname(os.path.dirname(__file__)), "logs")


def format_error_report(
    error_type: str,
    error_message: str,
    context: dict[str, Any] | None = None,
    trace: str | None = None,
) -> str:
    """Render the report body written by log_handler_error()."""
    lines = [
        f"Handler Error Report - {datetime.now()}",
        "=" * 60,
        "",
        f"Handler: {error_type}",
        f"Error Message: {error_message}",
        "",
    ]

    if context:
        lines += ["Context:", "-" * 60]
        lines += [f"{key}: {value}" for key, value in context.items()]
        lines.append("")

    if trace:
        lines += ["Traceback:", "-" * 60, trace.rstrip(), ""]

    return "\n".join(lines)


def log_handler_error(
    error_type: str, error_message: str, context: dict[str, Any] | None = None
) -> str:
    """
    Write a failure report for a handler.

    Called from inside an ``except`` block, the active traceback is included.

    Args:
        error_type: Failing handler (e.g., 'scheduler', 'delivery', 'stripe_webhook')
        error_message: The error message
        context: Optional identifiers for the failed request (notification_id, event_type, ...)

    Returns:
        Path to the report file
    """
    log_dir = os.getenv("ERROR_LOG_DIR", DEFAULT_LOG_DIR)
    os.makedirs(log_dir, exist_ok=True)

    # Microseconds keep reports from the same second apart
    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
    filename = os.path.join(log_dir, f"{error_type}_error_{timestamp}.txt")

    trace = traceback.format_exc() if sys.exc_info()[0] is not None else None

    with open(filename, "w", encoding="utf-8") as f:
        f.write(format_error_report(error_type, error_message, context, trace))

    return filename
