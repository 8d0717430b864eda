"""Hierarchical parent discovery."""

from __future__ import annotations

import logging

from ..models import ParentDetails, WorkItem
from ..services import EXPAND_FIELDS, EXPAND_RELATIONS, WorkItemService
from .sanitizer import sanitize

logger = logging.getLogger(__name__)


def parse_parent_id(url: str) -> int | None:
    """Return the numeric id at the end of a relation URL, or ``None``."""
    tail = url.rstrip("/").rsplit("/", 1)[-1] if url else ""
    if not tail.isdigit():
        return None
    parent_id = int(tail)
    return parent_id or None


class ParentResolver:
    """Resolve the nearest hierarchical ancestor of a work item."""

    def __init__(self, work_items: WorkItemService, replacement: str) -> None:
        self.work_items = work_items
        self.replacement = replacement

    def resolve(self, work_item_id: int, project: str) -> ParentDetails:
        """Return the parent descriptor, or the sentinel when there is none.

        A relation URL whose trailing segment is not a positive integer is
        treated as "no parent".  Backend failures propagate.
        """
        payload = self.work_items.get_work_item(work_item_id, project, expand=EXPAND_RELATIONS)
        link = WorkItem.from_api(payload).parent_link
        if link is None:
            return ParentDetails.sentinel()

        parent_id = parse_parent_id(str(link.get("url", "")))
        if parent_id is None:
            logger.debug("Work item %s has a parent link without a usable id: %s", work_item_id, link.get("url"))
            return ParentDetails.sentinel()

        parent = WorkItem.from_api(self.work_items.get_work_item(parent_id, project, expand=EXPAND_FIELDS))
        return ParentDetails(
            id=parent.id,
            type=sanitize(parent.type.lower(), self.replacement),
            title=sanitize(parent.title.lower(), self.replacement),
        )
