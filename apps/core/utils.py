# apps/core/utils.py

"""
Small helpers shared by the media and API apps.

Identifier parsing for query-string ids, lookups into Cloudinary's nested
add-on payloads, and the human-readable sizes/durations shown next to
each asset.
"""

from typing import Any, Mapping, Optional, Tuple
from uuid import UUID

SIZE_UNITS = ('B', 'KB', 'MB', 'GB', 'TB')


def parse_uuid(value: Any, field_name: str = "id") -> Tuple[Optional[UUID], Optional[str]]:
    """
    Parse ``value`` as a UUID.

    Returns ``(uuid, None)`` on success and ``(None, message)`` otherwise,
    with ``field_name`` in the message so it can go straight into a 400.
    """
    if isinstance(value, UUID):
        return value, None
    if value is None or value == "":
        return None, f"{field_name} is required"
    try:
        return UUID(str(value)), None
    except ValueError:
        return None, f"Invalid UUID format for {field_name}: '{value}'"


def format_duration(seconds: float) -> str:
    """``3725`` -> ``"1h 2m 5s"``; images (duration 0) render as ``"0s"``."""
    if not seconds or seconds < 0:
        return "0s"

    minutes, secs = divmod(int(seconds), 60)
    hours, minutes = divmod(minutes, 60)

    if hours:
        return f"{hours}h {minutes}m {secs}s"
    if minutes:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


def format_file_size(size_bytes: int) -> str:
    """``10485760`` -> ``"10.00 MB"``; whole bytes are shown without decimals."""
    if not size_bytes or size_bytes < 0:
        return "0 B"

    size = float(size_bytes)
    for unit in SIZE_UNITS[:-1]:
        if size < 1024:
            break
        size /= 1024
    else:
        unit = SIZE_UNITS[-1]

    if unit == 'B':
        return f"{int(size)} B"
    return f"{size:.2f} {unit}"


def get_nested_value(data: Optional[Mapping[str, Any]], path: str, default: Any = None) -> Any:
    """
    Follow a dotted ``path`` through nested dicts.

    Cloudinary reports add-on results deep inside ``info`` (for example
    ``info.ocr.adv_ocr.data``) and omits branches that have not run yet,
    so any missing or non-dict step yields ``default``.
    """
    if not path:
        return default

    current: Any = data
    for key in path.split("."):
        if not isinstance(current, Mapping) or key not in current:
            return default
        current = current[key]
    return current
