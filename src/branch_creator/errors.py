"""Exception types raised by the branch creator."""

from __future__ import annotations


class DevOpsApiError(RuntimeError):
    """An Azure DevOps REST call failed or returned an error status."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RefUpdateError(DevOpsApiError):
    """The backend rejected a ref creation, e.g. because the ref already exists."""

    def __init__(self, ref_name: str, update_status: str) -> None:
        super().__init__(f"Ref update for '{ref_name}' was rejected: {update_status}")
        self.ref_name = ref_name
        self.update_status = update_status


class BranchNameError(ValueError):
    """A branch name could not be resolved to a usable value."""


class TemplateFieldError(BranchNameError):
    """A template references a field the work item does not carry."""

    def __init__(self, field_name: str, work_item_id: int) -> None:
        super().__init__(f"Work item {work_item_id} has no field '{field_name}' required by the branch name template")
        self.field_name = field_name
        self.work_item_id = work_item_id
