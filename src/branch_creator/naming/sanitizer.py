"""Ref-safe text normalization."""

from __future__ import annotations

import re

_NON_ALPHANUMERIC = re.compile(r"[^A-Za-z0-9]")


def sanitize(value: str, replacement: str) -> str:
    """Replace every character outside ``[A-Za-z0-9]`` with ``replacement``.

    Runs are not collapsed, so a single character replacement keeps the
    length of ``value`` unchanged.  Case is left alone.
    """
    return _NON_ALPHANUMERIC.sub(lambda _match: replacement, value)
