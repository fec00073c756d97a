"""Redaction of secrets before request/response data reaches a logger.

Usernames, passwords, SSO request-state handles, assertions and tokens are
replaced with a placeholder. Nothing in this package logs a request or
response body without passing it through here first.
"""
import json
from typing import Any

PLACEHOLDER = "***"

SENSITIVE_KEYS = frozenset({
    "username",
    "password",
    "requeststate",
    "request_state",
    "authntoken",
    "authn_token",
    "assertion",
    "access_token",
    "refresh_token",
    "id_token",
    "client_secret",
})


def redact(value: Any) -> Any:
    """Return a copy of a JSON-like structure with sensitive values masked.

    Keys are matched case-insensitively at any depth.
    """
    if isinstance(value, dict):
        return {
            k: PLACEHOLDER if str(k).lower() in SENSITIVE_KEYS else redact(v)
            for k, v in value.items()
        }
    if isinstance(value, list):
        return [redact(item) for item in value]
    return value


def redact_text(text: str) -> str:
    """Redact a raw response body for logging.

    JSON bodies are parsed, masked and re-serialised. Anything else is
    summarised by length only, since it cannot be masked reliably.
    """
    try:
        parsed = json.loads(text)
    except ValueError:
        return f"<{len(text)} bytes, not JSON>"
    return json.dumps(redact(parsed))


def redact_authorization(header_value: str) -> str:
    """Render an Authorization header as ``<scheme> *****``."""
    scheme, _, _ = header_value.partition(" ")
    return f"{scheme} *****"
