"""Backend interfaces consumed by the naming engine and the orchestrator.

The Azure DevOps implementations live in ``branch_creator.devops``.  For
testing, in-memory fakes are available in tests/conftest.py.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

from .models import Branch, GitRefUpdate, Repository

EXPAND_RELATIONS = "Relations"
EXPAND_FIELDS = "Fields"


class GitService(Protocol):
    """Interface for the Git ref backend."""

    def get_repository(self, repository_id: str, project: str) -> Repository:
        ...

    def get_repositories(self, project: str) -> list[Repository]:
        ...

    def get_branches(self, repository_id: str, project: str) -> list[Branch]:
        ...

    def get_refs(self, repository_id: str, project: str, filter: str) -> list[str]:
        """Return the full names (``refs/heads/...``) of refs matching ``filter``."""
        ...

    def update_refs(self, ref_updates: Sequence[GitRefUpdate], repository_id: str) -> None:
        """Apply ``ref_updates``; raises ``RefUpdateError`` for a rejected update."""
        ...


class WorkItemService(Protocol):
    """Interface for the work item tracking backend."""

    def get_work_item(self, work_item_id: int, project: str, expand: str | None = None) -> dict[str, object]:
        ...

    def update_work_item(self, patch_operations: list[dict[str, object]], work_item_id: int) -> dict[str, object]:
        ...
