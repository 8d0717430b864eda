"""Policy utilities for the branch creator."""

from .allowlist import (
    check_branch_policy,
    is_parent_type_allowed,
    is_project_allowed,
    is_work_item_type_allowed,
)
from .redaction import redact_secrets

__all__ = [
    "check_branch_policy",
    "is_parent_type_allowed",
    "is_project_allowed",
    "is_work_item_type_allowed",
    "redact_secrets",
]
