import html
import re
from typing import Optional

_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B\x0C\x0E-\x1F\x7F]")


def sanitize_string(value: Optional[str]) -> Optional[str]:
    """
    Escape HTML special characters and strip control characters from free text.
    Returns None if input is None.
    """
    if value is None:
        return None
    if not isinstance(value, str):
        return value
    value = _CONTROL_CHARS.sub("", value.strip())
    return html.escape(value, quote=True)


def validate_and_sanitize_input(value: Optional[str], max_length: int = 2000) -> Optional[str]:
    """
    Sanitize user input and enforce a maximum length.

    Raises:
        ValueError: If input exceeds max_length
    """
    if value is None:
        return None

    value = str(value).strip()
    if len(value) > max_length:
        raise ValueError(f"Input exceeds maximum length of {max_length} characters")

    return sanitize_string(value)
