import html
import re
from typing import Any, Optional

CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")


def sanitize_string(value: Optional[str]) -> Optional[str]:
    """
    Trim a plain-text value, drop control characters and escape HTML markup.
    Returns None if input is None.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        return value
    value = CONTROL_CHARS.sub("", value.strip())
    return html.escape(value, quote=False)


def sanitize_dict(data: Optional[dict[str, Any]], fields: Optional[list[str]] = None) -> Optional[dict[str, Any]]:
    """
    Sanitize string values of a JSON sub-document (nested dicts and lists included).
    If fields is None, sanitizes all string values.
    """
    if not data:
        return data

    sanitized = {}
    for key, value in data.items():
        if fields is None or key in fields:
            sanitized[key] = _sanitize_value(value, fields)
        else:
            sanitized[key] = value
    return sanitized


def _sanitize_value(value: Any, fields: Optional[list[str]]) -> Any:
    if isinstance(value, str):
        return sanitize_string(value)
    if isinstance(value, dict):
        return sanitize_dict(value, fields)
    if isinstance(value, list):
        return [_sanitize_value(item, fields) for item in value]
    return value


def sanitize_list(values: Optional[list[str]]) -> list[str]:
    """Sanitize a list of short strings (tags, symptoms), dropping empties"""
    if not values:
        return []
    cleaned = (sanitize_string(v) for v in values if isinstance(v, str))
    return [v for v in cleaned if v]
