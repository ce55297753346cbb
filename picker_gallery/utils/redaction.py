"""Redaction helpers for logs that may carry OAuth or CDN secrets."""

from __future__ import annotations

import re

_URL_USERINFO_RE = re.compile(r"([a-z][a-z0-9+.-]*://)([^@/\s]+)@", re.IGNORECASE)
_QUERY_SECRET_RE = re.compile(
    r"(?i)(token|secret|password|api_key|apikey|access_token|refresh_token|client_secret|signature)=([^&\s]+)"
)
_JSON_SECRET_RE = re.compile(
    r"(?i)(['\"](?:access_token|refresh_token|client_secret|id_token|api_secret)['\"]\s*:\s*['\"])([^'\"]+)(['\"])"
)
_BEARER_RE = re.compile(r"(?i)(bearer\s+)([A-Za-z0-9._~+/=-]+)")


def redact_secrets(text: str) -> str:
    """Redact bearer tokens, credential query params, JSON token fields and URL userinfo."""
    if not text:
        return text
    redacted = _URL_USERINFO_RE.sub(r"\1***@", text)
    redacted = _QUERY_SECRET_RE.sub(r"\1=***", redacted)
    redacted = _JSON_SECRET_RE.sub(r"\1***\3", redacted)
    redacted = _BEARER_RE.sub(r"\1***", redacted)
    return redacted
