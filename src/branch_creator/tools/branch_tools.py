"""Branch tool implementations.

Wraps the branch creator for MCP clients: choosing a repository, previewing
the branch names of a set of work items and creating the branches.  The
Azure DevOps services are built from the shared configuration and the
naming settings are loaded once per tool call.

All tools enforce the project allowlist.
"""

from __future__ import annotations

import logging

from ..devops import AzureGitService, AzureWorkItemService, get_project
from ..notify import LoggingNotifier
from ..orchestrator import BranchCreator
from ..policy.allowlist import is_project_allowed
from ..settings import load_settings
from ..state import CONFIG

logger = logging.getLogger(__name__)


def _enforce_project_allowed(project: str) -> None:
    """Raise PermissionError if project is not in the allowlist."""
    if not is_project_allowed(project, CONFIG.allowed_projects):
        raise PermissionError(f"Project '{project}' is not in the allowlist")


def _build_creator(notifier: LoggingNotifier) -> BranchCreator:
    return BranchCreator(
        AzureGitService(CONFIG),
        AzureWorkItemService(CONFIG),
        notifier,
        load_settings(CONFIG.settings_path),
        allowed_work_item_types=CONFIG.allowed_work_item_types,
        allowed_parent_types=CONFIG.allowed_parent_types,
    )


def list_repositories(project: str) -> dict[str, object]:
    """List the Git repositories of a project.

    The repository named after the project is suggested as the default
    target; when there is none, a message says so.
    """
    _enforce_project_allowed(project)
    repositories = AzureGitService(CONFIG).get_repositories(project)
    suggested = next((repo for repo in repositories if repo.name == project), None)
    result: dict[str, object] = {
        "repositories": [{"id": repo.id, "name": repo.name} for repo in repositories],
        "suggested_repository_id": suggested.id if suggested else None,
    }
    if repositories and suggested is None:
        result["message"] = f"Project does not have a repository named: {project}."
    return result


def preview_branch_names(
    work_item_ids: list[int],
    project: str,
    source_branch_name: str | None = None,
) -> dict[str, object]:
    """Resolve the branch names the work items would get, without creating anything.

    Each entry also reports the parent branch the new branch would be based
    on and whether the work item passes the type policy.
    """
    _enforce_project_allowed(project)
    creator = _build_creator(LoggingNotifier())
    previews = []
    for work_item_id in work_item_ids:
        details = creator.get_branch_details(work_item_id, project, source_branch_name)
        rejection = creator.check_policy(details)
        previews.append(
            {
                "work_item_id": work_item_id,
                "branch_name": details.branch_name,
                "work_item_type": details.work_item_type,
                "parent_branch_name": details.parent_details.branch_name if details.has_parent else None,
                "allowed": rejection is None,
                "rejection": rejection,
            }
        )
    return {"branches": previews}


def create_branches(
    work_item_ids: list[int],
    repository_id: str,
    project: str,
    source_branch_name: str | None = None,
) -> dict[str, object]:
    """Create a branch for each work item in the given repository.

    Work items are processed one after the other.  Returns the outcome of
    each creation together with the notifications and links that would be
    shown to the user.
    """
    _enforce_project_allowed(project)
    project_info = get_project(CONFIG, project)
    notifier = LoggingNotifier()
    creator = _build_creator(notifier)
    outcomes = creator.create_branches(
        work_item_ids,
        repository_id,
        project_info,
        CONFIG.git_base_url(project_info.name),
        source_branch_name,
    )
    logger.info(
        "Processed %d work item(s): %s",
        len(outcomes),
        ", ".join(f"{o.work_item_id}={o.status}" for o in outcomes),
    )
    return {
        "outcomes": [outcome.to_dict() for outcome in outcomes],
        "notifications": [n.to_dict() for n in notifier.notifications],
        "opened_links": list(notifier.opened_links),
    }
