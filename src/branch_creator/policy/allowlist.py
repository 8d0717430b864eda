"""Allowlist enforcement for projects and work item types.

Branches are only created for work items of an allowed type (by default
Task and Bug) whose parent, when they have one, is of an allowed type (by
default User Story and Vulnerability).  Projects can be restricted with
`ALLOWED_PROJECTS`.  A ``*`` entry allows everything.
"""

from __future__ import annotations

from collections.abc import Iterable

from ..models import BranchDetails
from ..naming.sanitizer import sanitize


def _normalized(values: Iterable[str]) -> set[str]:
    return {v.lower().strip() for v in values}


def is_project_allowed(project: str, allowed: Iterable[str]) -> bool:
    """Return ``True`` if ``project`` (case‑insensitive) is in the allowlist."""
    allowed_normalized = _normalized(allowed)
    return "*" in allowed_normalized or project.lower().strip() in allowed_normalized


def is_work_item_type_allowed(work_item_type: str, allowed: Iterable[str]) -> bool:
    """Return ``True`` if branches may be created for ``work_item_type``."""
    allowed_normalized = _normalized(allowed)
    return "*" in allowed_normalized or work_item_type.lower().strip() in allowed_normalized


def is_parent_type_allowed(parent_type: str, allowed: Iterable[str], replacement: str) -> bool:
    """Check a parent type against the allowlist.

    ``parent_type`` comes from ``ParentDetails`` and is already sanitized
    and lowercased, so the allowlist entries are normalized the same way
    (``User Story`` matches ``user-story``).
    """
    allowed_list = list(allowed)
    if "*" in _normalized(allowed_list):
        return True
    allowed_normalized = {sanitize(entry.strip().lower(), replacement) for entry in allowed_list}
    return parent_type in allowed_normalized


def check_branch_policy(
    details: BranchDetails,
    allowed_work_item_types: Iterable[str],
    allowed_parent_types: Iterable[str],
    replacement: str,
) -> str | None:
    """Return a user-facing rejection message, or ``None`` if allowed."""
    allowed_work_item_types = list(allowed_work_item_types)
    allowed_parent_types = list(allowed_parent_types)
    if not is_work_item_type_allowed(details.work_item_type, allowed_work_item_types):
        return (
            f"Kindly create a {'/'.join(allowed_work_item_types)} and create branch for that "
            f"instead of directly working on this {details.work_item_type}."
        )
    if details.has_parent and not is_parent_type_allowed(
        details.parent_details.type, allowed_parent_types, replacement
    ):
        return (
            f"Kindly create branch on an item that is under a {'/'.join(allowed_parent_types)}. "
            f"Parent: {details.parent_details.type}"
        )
    return None
