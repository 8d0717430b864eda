"""Pytest configuration and fixtures for the branch creator tests.

This module provides in-memory fakes of the Git and work item backends so
the orchestration can be tested without Azure DevOps.  Both fakes append to
a shared call log, which lets tests assert on the order of backend calls.

IMPORTANT: Environment variables must be set BEFORE importing branch_creator
modules, as the state module loads configuration on first import.
"""

from __future__ import annotations

import os

# Set environment variables BEFORE any branch_creator imports
os.environ.setdefault("AZURE_DEVOPS_ORG_URL", "https://dev.azure.com/contoso")
os.environ.setdefault("AZURE_DEVOPS_PAT", "test-pat")
os.environ.setdefault("ALLOWED_PROJECTS", "*")

from collections.abc import Sequence

import pytest

from branch_creator.constants import PARENT_RELATION, REFS_HEADS
from branch_creator.errors import DevOpsApiError, RefUpdateError
from branch_creator.models import Branch, GitRefUpdate, ProjectInfo, Repository
from branch_creator.notify import LoggingNotifier
from branch_creator.settings import SettingsDocument

ORG_URL = "https://dev.azure.com/contoso"


def work_item_payload(
    work_item_id: int,
    work_item_type: str,
    title: str,
    parent_id: int | None = None,
    **extra_fields: object,
) -> dict[str, object]:
    """Build a work item payload shaped like the REST API response."""
    fields: dict[str, object] = {
        "System.Id": work_item_id,
        "System.WorkItemType": work_item_type,
        "System.Title": title,
        "System.State": "New",
    }
    fields.update(extra_fields)
    relations = []
    if parent_id is not None:
        relations.append(
            {
                "rel": PARENT_RELATION,
                "url": f"{ORG_URL}/_apis/wit/workItems/{parent_id}",
            }
        )
    return {"id": work_item_id, "fields": fields, "relations": relations}


class FakeWorkItemService:
    """In-memory work item backend."""

    def __init__(self, calls: list[tuple]) -> None:
        self.calls = calls
        self.items: dict[int, dict[str, object]] = {}
        self.fail_updates_for: set[tuple[int, str]] = set()

    def add(self, payload: dict[str, object]) -> None:
        self.items[int(payload["id"])] = payload

    def get_work_item(self, work_item_id: int, project: str, expand: str | None = None) -> dict[str, object]:
        self.calls.append(("get_work_item", work_item_id, expand))
        if work_item_id not in self.items:
            raise DevOpsApiError(f"Work item {work_item_id} not found", status_code=404)
        payload = self.items[work_item_id]
        if expand == "Relations":
            return payload
        return {"id": payload["id"], "fields": payload["fields"]}

    def update_work_item(self, patch_operations: list[dict[str, object]], work_item_id: int) -> dict[str, object]:
        path = patch_operations[0]["path"]
        self.calls.append(("update_work_item", work_item_id, path))
        if (work_item_id, path) in self.fail_updates_for:
            raise DevOpsApiError("The field 'State' contains the value 'Active' that is not in the list", 400)
        payload = self.items[work_item_id]
        for op in patch_operations:
            if op["path"] == "/relations/-":
                payload.setdefault("relations", []).append(op["value"])
            elif op["path"].startswith("/fields/"):
                payload["fields"][op["path"][len("/fields/"):]] = op["value"]
        return payload

    def relations_of(self, work_item_id: int, rel: str = "ArtifactLink") -> list[dict[str, object]]:
        return [r for r in self.items[work_item_id].get("relations", []) if r["rel"] == rel]


class FakeGitService:
    """In-memory Git backend with a single repository."""

    def __init__(self, calls: list[tuple], repository: Repository) -> None:
        self.calls = calls
        self.repository = repository
        self.branches: dict[str, Branch] = {}
        self.reject_updates: set[str] = set()

    def add_branch(self, name: str, commit_id: str, is_base_version: bool = False) -> None:
        self.branches[name] = Branch(name=name, commit_id=commit_id, is_base_version=is_base_version)

    def get_repository(self, repository_id: str, project: str) -> Repository:
        self.calls.append(("get_repository", repository_id))
        return self.repository

    def get_repositories(self, project: str) -> list[Repository]:
        return [self.repository]

    def get_branches(self, repository_id: str, project: str) -> list[Branch]:
        self.calls.append(("get_branches", repository_id))
        return list(self.branches.values())

    def get_refs(self, repository_id: str, project: str, filter: str) -> list[str]:
        self.calls.append(("get_refs", filter))
        prefix = filter.removeprefix("heads/")
        return [f"{REFS_HEADS}{name}" for name in self.branches if name.startswith(prefix)]

    def update_refs(self, ref_updates: Sequence[GitRefUpdate], repository_id: str) -> None:
        for update in ref_updates:
            self.calls.append(("update_refs", update.branch_name, update.new_object_id))
            if update.branch_name in self.reject_updates or update.branch_name in self.branches:
                raise RefUpdateError(update.name, "staleOldObjectId")
            self.add_branch(update.branch_name, update.new_object_id)


@pytest.fixture
def calls() -> list[tuple]:
    return []


@pytest.fixture
def repository() -> Repository:
    return Repository(id="repo-1", name="Contoso")


@pytest.fixture
def project() -> ProjectInfo:
    return ProjectInfo(id="project-1", name="Contoso")


@pytest.fixture
def work_items(calls) -> FakeWorkItemService:
    return FakeWorkItemService(calls)


@pytest.fixture
def git(calls, repository) -> FakeGitService:
    service = FakeGitService(calls, repository)
    service.add_branch("main", "a" * 40, is_base_version=True)
    return service


@pytest.fixture
def notifier() -> LoggingNotifier:
    return LoggingNotifier()


@pytest.fixture
def settings() -> SettingsDocument:
    return SettingsDocument(
        default_branch_name_template="${System.WorkItemType}/${System.Id}-${System.Title}",
        non_alphanumeric_characters_replacement="-",
        lowercase_branch_name=True,
    )


@pytest.fixture
def make_work_item():
    """Return the ``work_item_payload`` builder."""
    return work_item_payload
