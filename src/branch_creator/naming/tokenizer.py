"""Template token extraction."""

from __future__ import annotations

import re

_TOKEN_PATTERN = re.compile(r"\$\{[^{}]+\}")


def get_tokens(template: str) -> list[str]:
    """Return every ``${Identifier}`` placeholder in ``template``.

    Tokens are returned left to right and duplicates are kept, so a token
    used twice is substituted twice.
    """
    return _TOKEN_PATTERN.findall(template)


def token_name(token: str) -> str:
    """Strip the ``${`` and ``}`` delimiters from a token."""
    return token[2:-1]
