"""Branch naming settings.

The settings document is read once per invocation and treated as read-only
configuration.  It is stored as JSON using the camelCase keys of the Azure
DevOps extension settings, e.g.::

    {
        "defaultBranchNameTemplate": "${System.WorkItemType}/${System.Id}-${System.Title}",
        "branchNameTemplates": {"Bug": {"isActive": true, "value": "bugfix/${System.Id}"}},
        "nonAlphanumericCharactersReplacement": "-",
        "lowercaseBranchName": true,
        "updateWorkItemState": true,
        "workItemState": {"Task": {"isActive": true, "value": "Active"}},
        "missingFieldPolicy": "empty"
    }
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_BRANCH_NAME_TEMPLATE = "${System.WorkItemType}/${System.Id}-${System.Title}"

MISSING_FIELD_EMPTY = "empty"
MISSING_FIELD_ERROR = "error"
_MISSING_FIELD_POLICIES = {MISSING_FIELD_EMPTY, MISSING_FIELD_ERROR}


@dataclass(frozen=True)
class TypedSetting:
    """A per work item type value that can be switched off."""

    is_active: bool
    value: str


@dataclass(frozen=True)
class SettingsDocument:
    default_branch_name_template: str = DEFAULT_BRANCH_NAME_TEMPLATE
    branch_name_templates: dict[str, TypedSetting] = field(default_factory=dict)
    non_alphanumeric_characters_replacement: str = "-"
    lowercase_branch_name: bool = True
    update_work_item_state: bool = False
    work_item_state: dict[str, TypedSetting] = field(default_factory=dict)
    missing_field_policy: str = MISSING_FIELD_EMPTY

    def __post_init__(self) -> None:
        if len(self.non_alphanumeric_characters_replacement) != 1:
            raise ValueError(
                "nonAlphanumericCharactersReplacement must be a single character, got "
                f"{self.non_alphanumeric_characters_replacement!r}"
            )
        if not self.default_branch_name_template.strip():
            raise ValueError("defaultBranchNameTemplate must not be empty")
        if self.missing_field_policy not in _MISSING_FIELD_POLICIES:
            raise ValueError(
                f"missingFieldPolicy must be one of {sorted(_MISSING_FIELD_POLICIES)}, "
                f"got {self.missing_field_policy!r}"
            )

    def template_for(self, work_item_type: str) -> str:
        """Return the active template for ``work_item_type`` or the default one."""
        configured = self.branch_name_templates.get(work_item_type)
        if configured and configured.is_active and configured.value:
            return configured.value
        return self.default_branch_name_template

    def state_for(self, work_item_type: str) -> str | None:
        """Return the state a work item of this type moves to, if configured."""
        configured = self.work_item_state.get(work_item_type)
        if configured and configured.is_active and configured.value:
            return configured.value
        return None

    @classmethod
    def from_dict(cls, data: dict[str, object]) -> SettingsDocument:
        return cls(
            default_branch_name_template=str(
                data.get("defaultBranchNameTemplate") or DEFAULT_BRANCH_NAME_TEMPLATE
            ),
            branch_name_templates=_typed_settings(data.get("branchNameTemplates")),
            non_alphanumeric_characters_replacement=str(
                data.get("nonAlphanumericCharactersReplacement", "-")
            ),
            lowercase_branch_name=bool(data.get("lowercaseBranchName", True)),
            update_work_item_state=bool(data.get("updateWorkItemState", False)),
            work_item_state=_typed_settings(data.get("workItemState")),
            missing_field_policy=str(data.get("missingFieldPolicy", MISSING_FIELD_EMPTY)),
        )


def _typed_settings(raw: object) -> dict[str, TypedSetting]:
    if not raw:
        return {}
    if not isinstance(raw, dict):
        raise ValueError(f"Expected a mapping of work item types, got {type(raw).__name__}")
    return {
        str(work_item_type): TypedSetting(
            is_active=bool(entry.get("isActive", False)),
            value=str(entry.get("value", "")),
        )
        for work_item_type, entry in raw.items()
    }


def load_settings(path: str | Path | None) -> SettingsDocument:
    """Load the settings document from ``path``.

    Returns the built-in defaults when ``path`` is ``None``.  Raises
    ``ValueError`` for malformed documents and ``OSError`` for unreadable
    files.
    """
    if path is None:
        return SettingsDocument()
    settings_file = Path(path)
    with open(settings_file, encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Settings file {settings_file} is not valid JSON: {exc}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"Settings file {settings_file} must contain a JSON object")
    logger.debug("Loaded branch settings from %s", settings_file)
    return SettingsDocument.from_dict(data)
