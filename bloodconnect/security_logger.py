"""
Security event logging

Security-relevant events (failed authentication, rate limit hits, authorization
denials, oversized payloads) go to the "bloodconnect.security" logger with a
severity level so they can be routed to a separate handler in production.
"""

import logging
from typing import Any

logger = logging.getLogger("bloodconnect.security")

SENSITIVE_KEYS = {"password", "token", "authorization", "secret", "api_key", "id_token"}

EVENT_SEVERITY = {
    "auth_failed": "MEDIUM",
    "token_expired": "LOW",
    "invalid_token": "HIGH",
    "unknown_user": "MEDIUM",
    "forbidden": "MEDIUM",
    "admin_required": "HIGH",
    "rate_limit_exceeded": "MEDIUM",
    "payload_too_large": "MEDIUM",
    "registration_failed": "LOW",
    "login_failed": "MEDIUM",
}

_LEVELS = {
    "LOW": logging.INFO,
    "MEDIUM": logging.WARNING,
    "HIGH": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def mask_value(value: Any) -> str:
    text = str(value)
    if len(text) <= 8:
        return "****"
    return f"{text[:4]}****{text[-2:]}"


def sanitize_details(details: dict[str, Any]) -> dict[str, Any]:
    """Mask values whose key looks sensitive"""
    sanitized = {}
    for key, value in details.items():
        if any(marker in key.lower() for marker in SENSITIVE_KEYS):
            sanitized[key] = mask_value(value)
        elif isinstance(value, dict):
            sanitized[key] = sanitize_details(value)
        else:
            sanitized[key] = value
    return sanitized


def get_severity(event: str) -> str:
    return EVENT_SEVERITY.get(event, "LOW")


def log_security_event(event: str, **details: Any) -> str:
    """Log a security event and return its severity"""
    severity = get_severity(event)
    safe_details = sanitize_details(details)

    if severity in ("HIGH", "CRITICAL"):
        logger.log(_LEVELS[severity], f"🚨 SECURITY ALERT [{severity}] {event}: {safe_details}")
    else:
        logger.log(_LEVELS[severity], f"🔐 [{severity}] {event}: {safe_details}")
    return severity
