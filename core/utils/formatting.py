"""Formatting utilities."""

import secrets
import string
import time
from datetime import datetime, timezone
from typing import Optional

_BASE36 = string.digits + string.ascii_lowercase


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(_BASE36[remainder])
    return "".join(reversed(digits))


def generate_id() -> str:
    """
    Generate a collision-resistant, roughly time-ordered identifier.
    
    Returns:
        25 character string: "c" + 8 chars of millisecond timestamp
        + 16 random base-36 chars
    """
    timestamp = _to_base36(int(time.time() * 1000)).rjust(8, "0")[-8:]
    random_part = "".join(secrets.choice(_BASE36) for _ in range(16))
    return f"c{timestamp}{random_part}"


def format_datetime(dt: Optional[datetime]) -> Optional[str]:
    """
    Serialize a datetime as ISO-8601, passing None through.

    Naive values (SQLite drops the offset) are stored in UTC and are
    labelled as such.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.isoformat()


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in human-readable format.
    
    Args:
        size_bytes: File size in bytes
        
    Returns:
        Formatted file size (e.g., "1.5 MB")
    """
    size = float(size_bytes)
    for unit in ['B', 'KB', 'MB', 'GB']:
        if size < 1024.0:
            return f"{size:.1f} {unit}" if unit != 'B' else f"{int(size)} B"
        size /= 1024.0
    return f"{size:.1f} TB"
