"""Secret redaction utilities.

This module removes the personal access token and credential-looking
strings from text before it is logged or put into an exception message.
Matches are replaced with ``"<REDACTED>"``.
"""

from __future__ import annotations

import re
from collections.abc import Iterable

_TOKEN_PATTERNS = [
    # Basic/Bearer authorization header values
    re.compile(r"(Basic|Bearer)\s+[A-Za-z0-9\-\._~\+/]+=*", re.IGNORECASE),
    # Classic Azure DevOps personal access tokens (52 base32 characters)
    re.compile(r"\b[a-z2-7]{52}\b"),
    # Newer Azure DevOps tokens (84 characters)
    re.compile(r"\b[A-Za-z0-9]{84}\b"),
]


def redact_secrets(text: str, secrets: Iterable[str]) -> str:
    """Return ``text`` with ``secrets`` and token-like strings replaced.

    :param text: arbitrary text that may contain secrets
    :param secrets: iterable of secret strings to redact
    :return: redacted text
    """
    redacted = text or ""
    for secret in secrets:
        if secret:
            redacted = redacted.replace(secret, "<REDACTED>")
    for pattern in _TOKEN_PATTERNS:
        redacted = pattern.sub("<REDACTED>", redacted)
    return redacted
