"""Branch name resolution from work item fields and naming templates.

A template such as ``feature/${System.WorkItemType}/${System.Id}-${System.Title}``
is resolved token by token:

* ``${SourceBranchName}`` is the branch the new branch is based on,
* ``${SourceBranchNameTail}`` is the part of it after the last ``/``,
* any other token names a work item field (``${id}`` is the work item id).

Numbers are used as they are.  Identity fields resolve to their display
name, and every other value is sanitized with the configured replacement
character.
When the work item has a real parent, the parent's ``<type>/<id>/`` suffix
is prepended to the resolved name.  Lowercasing, when enabled, is applied
last to the whole name.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from ..constants import REFS_HEADS
from ..errors import BranchNameError, TemplateFieldError
from ..models import BranchDetails, FieldLookup, WorkItem
from ..services import EXPAND_FIELDS, WorkItemService
from ..settings import MISSING_FIELD_ERROR, SettingsDocument
from .parent import ParentResolver
from .sanitizer import sanitize
from .tokenizer import get_tokens, token_name

logger = logging.getLogger(__name__)

SOURCE_BRANCH_NAME = "SourceBranchName"
SOURCE_BRANCH_NAME_TAIL = "SourceBranchNameTail"


def _source_branch_lookup(name: str, source_branch_name: str | None) -> FieldLookup:
    if source_branch_name is None:
        return FieldLookup(name=name, present=False)
    if source_branch_name.startswith(REFS_HEADS):
        source_branch_name = source_branch_name[len(REFS_HEADS):]
    if name == SOURCE_BRANCH_NAME_TAIL:
        return FieldLookup(name=name, present=True, value=source_branch_name.rsplit("/", 1)[-1])
    return FieldLookup(name=name, present=True, value=source_branch_name)


class BranchNameResolver:
    """Compute the branch a work item should get."""

    def __init__(self, work_items: WorkItemService) -> None:
        self.work_items = work_items

    def resolve(
        self,
        work_item_id: int,
        project: str,
        settings: SettingsDocument,
        source_branch_name: str | None = None,
    ) -> BranchDetails:
        replacement = settings.non_alphanumeric_characters_replacement
        parent = ParentResolver(self.work_items, replacement).resolve(work_item_id, project)
        work_item = WorkItem.from_api(self.work_items.get_work_item(work_item_id, project, expand=EXPAND_FIELDS))

        template = settings.template_for(work_item.type)
        branch_name = template
        for token in get_tokens(template):
            value = self._token_value(token_name(token), work_item, settings, source_branch_name)
            branch_name = branch_name.replace(token, value, 1)

        if not parent.is_sentinel:
            branch_name = parent.suffix + branch_name
        if settings.lowercase_branch_name:
            branch_name = branch_name.lower()

        if not branch_name.strip("/"):
            raise BranchNameError(f"Template {template!r} resolved to an empty branch name for work item {work_item_id}")
        if "" in branch_name.split("/"):
            raise BranchNameError(
                f"Branch name {branch_name!r} for work item {work_item_id} has an empty path segment"
            )

        return BranchDetails(
            parent_details=parent,
            branch_name=branch_name,
            work_item_type=work_item.type,
        )

    def _token_value(
        self,
        name: str,
        work_item: WorkItem,
        settings: SettingsDocument,
        source_branch_name: str | None,
    ) -> str:
        if name in (SOURCE_BRANCH_NAME, SOURCE_BRANCH_NAME_TAIL):
            lookup = _source_branch_lookup(name, source_branch_name)
        else:
            lookup = work_item.lookup(name)

        if not lookup.present:
            if settings.missing_field_policy == MISSING_FIELD_ERROR:
                raise TemplateFieldError(name, work_item.id)
            logger.warning("Work item %s has no field '%s'; substituting an empty value", work_item.id, name)
            return ""

        if lookup.value is None:
            return ""
        value = lookup.value
        # Numbers are used as they are.
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        # Identity fields such as System.AssignedTo come back as objects.
        if isinstance(value, Mapping):
            value = value.get("displayName") or ""
        return sanitize(str(value), settings.non_alphanumeric_characters_replacement)
