"""Data types shared by the naming engine and the orchestrator."""

from __future__ import annotations

from dataclasses import dataclass, field

from .constants import FIELD_TITLE, FIELD_WORK_ITEM_TYPE, PARENT_RELATION, REFS_HEADS, ZERO_OBJECT_ID


@dataclass(frozen=True)
class FieldLookup:
    """Result of reading a field from a work item.

    ``present`` is ``False`` when the work item does not carry the field at
    all, which lets callers tell an absent field from an empty one.
    """

    name: str
    present: bool
    value: object = None


@dataclass(frozen=True)
class WorkItem:
    """Immutable snapshot of a work item as returned by the REST API."""

    id: int
    fields: dict[str, object] = field(default_factory=dict)
    relations: list[dict[str, object]] = field(default_factory=list)

    @classmethod
    def from_api(cls, payload: dict[str, object]) -> WorkItem:
        return cls(
            id=int(payload["id"]),
            fields=dict(payload.get("fields") or {}),
            relations=list(payload.get("relations") or []),
        )

    @property
    def type(self) -> str:
        return str(self.fields.get(FIELD_WORK_ITEM_TYPE, ""))

    @property
    def title(self) -> str:
        return str(self.fields.get(FIELD_TITLE, ""))

    @property
    def parent_link(self) -> dict[str, object] | None:
        """Return the hierarchy-reverse relation pointing at the parent, if any."""
        for relation in self.relations:
            if relation.get("rel") == PARENT_RELATION:
                return relation
        return None

    def lookup(self, name: str) -> FieldLookup:
        """Read ``name`` from the work item's fields.

        ``id`` and ``System.Id`` always resolve to the work item id, even when
        the fields were fetched without it.
        """
        if name in ("id", "System.Id"):
            return FieldLookup(name=name, present=True, value=self.id)
        if name in self.fields:
            return FieldLookup(name=name, present=True, value=self.fields[name])
        return FieldLookup(name=name, present=False)


@dataclass(frozen=True)
class ParentDetails:
    """Nearest hierarchical ancestor of a work item.

    ``id == 0`` marks the sentinel used when there is no parent.
    """

    id: int
    type: str
    title: str

    @property
    def branch_name(self) -> str:
        return f"{self.type}/{self.id}-{self.title}"

    @property
    def suffix(self) -> str:
        return f"{self.type}/{self.id}/"

    @property
    def is_sentinel(self) -> bool:
        return self.id == 0

    @classmethod
    def sentinel(cls) -> ParentDetails:
        return cls(id=0, type="unknown", title="unknown")


@dataclass(frozen=True)
class BranchDetails:
    """Resolved target of one branch-creation attempt."""

    parent_details: ParentDetails | None
    branch_name: str
    work_item_type: str

    @property
    def has_parent(self) -> bool:
        return self.parent_details is not None and not self.parent_details.is_sentinel


@dataclass(frozen=True)
class ProjectInfo:
    id: str
    name: str


@dataclass(frozen=True)
class Repository:
    id: str
    name: str


@dataclass(frozen=True)
class Branch:
    """Branch statistics entry; ``name`` has no ``refs/heads/`` prefix."""

    name: str
    commit_id: str
    is_base_version: bool = False

    @classmethod
    def from_api(cls, payload: dict[str, object]) -> Branch:
        commit = payload.get("commit") or {}
        return cls(
            name=str(payload["name"]),
            commit_id=str(commit.get("commitId", "")),
            is_base_version=bool(payload.get("isBaseVersion", False)),
        )


@dataclass(frozen=True)
class GitRefUpdate:
    """Request to create ``refs/heads/<branch_name>`` pointing at a commit."""

    branch_name: str
    repository_id: str
    new_object_id: str
    old_object_id: str = ZERO_OBJECT_ID
    is_locked: bool = False

    @property
    def name(self) -> str:
        return f"{REFS_HEADS}{self.branch_name}"

    def to_api(self) -> dict[str, object]:
        return {
            "name": self.name,
            "repositoryId": self.repository_id,
            "newObjectId": self.new_object_id,
            "oldObjectId": self.old_object_id,
            "isLocked": self.is_locked,
        }
