"""Branch creation orchestration.

``BranchCreator.create_branch`` walks a work item through these steps:

1. resolve the branch name and apply the work item type policy,
2. stop if the branch already exists,
3. make sure the parent work item's branch exists, creating it from the
   repository's default branch when needed,
4. pick the commit to branch from (source branch, parent branch or
   default branch),
5. create the branch, link it to the work item and move the work item to
   its configured state.

Each step is a sequential backend call.  Creating and linking refs must
succeed; backend errors propagate to the caller.  State transitions are
best effort and reported in the outcome.  A parent branch created before a
later failure is left in place.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from urllib.parse import quote

from .constants import ARTIFACT_LINK_RELATION, FIELD_STATE, REFS_HEADS
from .models import Branch, BranchDetails, GitRefUpdate, ParentDetails, ProjectInfo, Repository, WorkItem
from .naming.branch_name import BranchNameResolver
from .notify import Notification, Notifier
from .policy.allowlist import check_branch_policy
from .services import GitService, WorkItemService
from .settings import SettingsDocument

logger = logging.getLogger(__name__)

# Outcome statuses
CREATED = "created"
ALREADY_EXISTS = "already_exists"
REJECTED = "rejected"
ABORTED = "aborted"

# State transition statuses
TRANSITION_APPLIED = "applied"
TRANSITION_SKIPPED = "skipped"
TRANSITION_FAILED = "failed"

# Characters encodeURI leaves alone, besides the ones quote() never touches.
_URI_SAFE = ";,/?:@&=+$!*'()#"
# Characters encodeURIComponent leaves alone.
_URI_COMPONENT_SAFE = "!*'()"


@dataclass(frozen=True)
class StateTransition:
    """Result of the best-effort work item state update."""

    work_item_id: int
    status: str
    state: str | None = None
    error: str | None = None


@dataclass
class BranchCreationOutcome:
    """What one ``create_branch`` call did."""

    work_item_id: int
    status: str
    message: str
    branch_name: str | None = None
    branch_url: str | None = None
    parent_branch_name: str | None = None
    parent_created: bool | None = None
    state_transitions: list[StateTransition] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return self.status == CREATED

    def to_dict(self) -> dict[str, object]:
        return {
            "work_item_id": self.work_item_id,
            "status": self.status,
            "message": self.message,
            "branch_name": self.branch_name,
            "branch_url": self.branch_url,
            "parent_branch_name": self.parent_branch_name,
            "parent_created": self.parent_created,
            "state_transitions": [
                {
                    "work_item_id": t.work_item_id,
                    "status": t.status,
                    "state": t.state,
                    "error": t.error,
                }
                for t in self.state_transitions
            ],
        }


def build_branch_url(git_base_url: str, repository_name: str, branch_name: str) -> str:
    return f"{git_base_url}/{quote(repository_name)}?version=GB{quote(branch_name, safe=_URI_SAFE)}"


def build_artifact_link(project_id: str, repository_id: str, branch_name: str) -> str:
    branch_ref = f"{project_id}/{repository_id}/GB{branch_name}"
    return f"vstfs:///Git/Ref/{quote(branch_ref, safe=_URI_COMPONENT_SAFE)}"


class BranchCreator:
    """Create work item branches against a Git and a work item backend."""

    def __init__(
        self,
        git: GitService,
        work_items: WorkItemService,
        notifier: Notifier,
        settings: SettingsDocument,
        *,
        allowed_work_item_types: Iterable[str] = ("Task", "Bug"),
        allowed_parent_types: Iterable[str] = ("User Story", "Vulnerability"),
    ) -> None:
        self.git = git
        self.work_items = work_items
        self.notifier = notifier
        self.settings = settings
        self.allowed_work_item_types = list(allowed_work_item_types)
        self.allowed_parent_types = list(allowed_parent_types)
        self.names = BranchNameResolver(work_items)

    def get_branch_details(
        self, work_item_id: int, project: str, source_branch_name: str | None = None
    ) -> BranchDetails:
        return self.names.resolve(work_item_id, project, self.settings, source_branch_name)

    def check_policy(self, details: BranchDetails) -> str | None:
        """Return the rejection message for ``details``, or ``None``."""
        return check_branch_policy(
            details,
            self.allowed_work_item_types,
            self.allowed_parent_types,
            self.settings.non_alphanumeric_characters_replacement,
        )

    def create_branches(
        self,
        work_item_ids: Iterable[int],
        repository_id: str,
        project: ProjectInfo,
        git_base_url: str,
        source_branch_name: str | None = None,
    ) -> list[BranchCreationOutcome]:
        """Run ``create_branch`` for each work item, one after the other."""
        return [
            self.create_branch(work_item_id, repository_id, project, git_base_url, source_branch_name)
            for work_item_id in work_item_ids
        ]

    def create_branch(
        self,
        work_item_id: int,
        repository_id: str,
        project: ProjectInfo,
        git_base_url: str,
        source_branch_name: str | None = None,
    ) -> BranchCreationOutcome:
        """Create the branch for ``work_item_id`` in ``repository_id``.

        When ``source_branch_name`` is given the branch is based on that
        branch's tip, otherwise on the parent branch or the default branch.
        """
        repository = self.git.get_repository(repository_id, project.name)

        # Resolving
        details = self.get_branch_details(work_item_id, project.name, source_branch_name)
        branch_name = details.branch_name
        rejection = self.check_policy(details)
        if rejection:
            logger.info("Branch for work item %s rejected: %s", work_item_id, rejection)
            self.notifier.notify(Notification(message=rejection, level="dialog"))
            return BranchCreationOutcome(
                work_item_id=work_item_id,
                status=REJECTED,
                message=rejection,
                branch_name=branch_name,
            )

        branch_url = build_branch_url(git_base_url, repository.name, branch_name)

        # CheckingTarget
        if self._branch_exists(repository.id, project.name, branch_name):
            message = f"Branch {branch_name} already exists"
            logger.info("Branch %s already exists in repository %s", branch_name, repository.name)
            self.notifier.notify(Notification(message=message, call_to_action="Open branch", link=branch_url))
            return BranchCreationOutcome(
                work_item_id=work_item_id,
                status=ALREADY_EXISTS,
                message=message,
                branch_name=branch_name,
                branch_url=branch_url,
            )

        transitions: list[StateTransition] = []
        parent_message = ""
        parent_created: bool | None = None
        parent = details.parent_details if details.has_parent else None

        # NeedsParent
        if parent is not None:
            if self._branch_exists(repository.id, project.name, parent.branch_name):
                parent_message = "Parent branch exists."
                parent_created = False
            else:
                default_branch = self._find_branch(repository.id, project.name, lambda b: b.is_base_version)
                if default_branch is None:
                    return self._abort(work_item_id, "Default branch not found", branch_name)
                # CreatingParent
                self._create_ref(repository, default_branch.commit_id, parent.branch_name)
                self.link_branch_to_work_item(project.id, repository.id, parent.id, parent.branch_name)
                transitions.append(self.update_work_item_state(project, parent.id))
                logger.info("Branch %s created in repository %s", parent.branch_name, repository.name)
                parent_message = "Parent branch created."
                parent_created = True

        # CreatingChild
        base_branch = self._find_base_branch(repository, project, parent, source_branch_name)
        if isinstance(base_branch, str):
            outcome = self._abort(work_item_id, f"{parent_message} {base_branch}".strip(), branch_name)
            outcome.parent_branch_name = parent.branch_name if parent else None
            outcome.parent_created = parent_created
            outcome.state_transitions = transitions
            return outcome

        self._create_ref(repository, base_branch.commit_id, branch_name)
        self.link_branch_to_work_item(project.id, repository.id, work_item_id, branch_name)
        transitions.append(self.update_work_item_state(project, work_item_id))
        logger.info("Branch %s created in repository %s", branch_name, repository.name)

        # Done
        message = f"{parent_message} Branch {branch_name} created.".strip()
        self.notifier.notify(Notification(message=message))
        self.notifier.open_link(branch_url)
        return BranchCreationOutcome(
            work_item_id=work_item_id,
            status=CREATED,
            message=message,
            branch_name=branch_name,
            branch_url=branch_url,
            parent_branch_name=parent.branch_name if parent else None,
            parent_created=parent_created,
            state_transitions=transitions,
        )

    def _find_base_branch(
        self,
        repository: Repository,
        project: ProjectInfo,
        parent: ParentDetails | None,
        source_branch_name: str | None,
    ) -> Branch | str:
        """Return the branch to base the new branch on, or why there is none."""
        if source_branch_name:
            name = source_branch_name.removeprefix(REFS_HEADS)
            found = self._find_branch(repository.id, project.name, lambda b: b.name == name)
            return found or f"Branch {name} not found"
        if parent is not None:
            found = self._find_branch(repository.id, project.name, lambda b: b.name == parent.branch_name)
            return found or f"Branch {parent.branch_name} not found"
        found = self._find_branch(repository.id, project.name, lambda b: b.is_base_version)
        return found or "Default branch not found"

    def _abort(self, work_item_id: int, reason: str, branch_name: str | None) -> BranchCreationOutcome:
        logger.warning("%s; branch for work item %s not created", reason, work_item_id)
        self.notifier.notify(Notification(message=reason, level="warning"))
        return BranchCreationOutcome(
            work_item_id=work_item_id,
            status=ABORTED,
            message=reason,
            branch_name=branch_name,
        )

    def _branch_exists(self, repository_id: str, project: str, branch_name: str) -> bool:
        refs = self.git.get_refs(repository_id, project, f"heads/{branch_name}")
        return f"{REFS_HEADS}{branch_name}" in refs

    def _find_branch(
        self, repository_id: str, project: str, predicate: Callable[[Branch], bool]
    ) -> Branch | None:
        for branch in self.git.get_branches(repository_id, project):
            if predicate(branch):
                return branch
        return None

    def _create_ref(self, repository: Repository, commit_id: str, branch_name: str) -> None:
        update = GitRefUpdate(branch_name=branch_name, repository_id=repository.id, new_object_id=commit_id)
        self.git.update_refs([update], repository.id)

    def link_branch_to_work_item(
        self, project_id: str, repository_id: str, work_item_id: int, branch_name: str
    ) -> None:
        """Add an ``ArtifactLink`` relation from the work item to the branch."""
        document = [
            {
                "op": "add",
                "path": "/relations/-",
                "value": {
                    "rel": ARTIFACT_LINK_RELATION,
                    "url": build_artifact_link(project_id, repository_id, branch_name),
                    "attributes": {"name": "Branch"},
                },
            }
        ]
        self.work_items.update_work_item(document, work_item_id)

    def update_work_item_state(self, project: ProjectInfo, work_item_id: int) -> StateTransition:
        """Move the work item to its configured state.

        Never raises: failures are logged and returned as a ``failed``
        transition so the branch that was already created stays reported.
        """
        if not self.settings.update_work_item_state:
            return StateTransition(work_item_id=work_item_id, status=TRANSITION_SKIPPED)
        try:
            work_item = WorkItem.from_api(self.work_items.get_work_item(work_item_id, project.id))
            new_state = self.settings.state_for(work_item.type)
            if new_state is None:
                return StateTransition(work_item_id=work_item_id, status=TRANSITION_SKIPPED)
            document = [{"op": "add", "path": f"/fields/{FIELD_STATE}", "value": new_state}]
            self.work_items.update_work_item(document, work_item_id)
        except Exception as exc:
            logger.warning("Update work item %s state failed: %s", work_item_id, exc)
            return StateTransition(work_item_id=work_item_id, status=TRANSITION_FAILED, error=str(exc))
        return StateTransition(work_item_id=work_item_id, status=TRANSITION_APPLIED, state=new_state)
