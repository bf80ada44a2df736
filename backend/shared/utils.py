from datetime import datetime, timezone
from dateutil import parser as date_parser


def parse_date_string(date_str: str) -> str | None:
    """Parse various date formats into ISO format."""
    if not date_str:
        return None
    try:
        dt = date_parser.parse(date_str, fuzzy=True)
        return str(dt.isoformat())  # Explicit cast to satisfy mypy
    except (ValueError, OverflowError, TypeError):
        return None


def utc_now_iso() -> str:
    """Current UTC time in ISO format."""
    return datetime.now(timezone.utc).isoformat()


def unix_to_iso(seconds: int | float | None) -> str | None:
    """Convert a Unix timestamp (seconds) from a provider payload to ISO format."""
    if seconds is None:
        return None
    return datetime.fromtimestamp(seconds, tz=timezone.utc).isoformat()


def print_summary(title: str, stats: dict[str, int]) -> None:
    """Print a run summary block."""
    print(f"\n{'=' * 60}")
    print(f"[{datetime.now()}] {title}")
    print(f"{'=' * 60}")
    for label, value in stats.items():
        print(f"{label.replace('_', ' ').capitalize() + ':':<24}{value}")
    print(f"{'=' * 60}\n")
