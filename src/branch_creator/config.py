"""Configuration loading for the branch creator.

This module loads environment variables from a `.env` file using
`python-dotenv` and populates a `Config` object.

Required variables:
- AZURE_DEVOPS_ORG_URL (e.g. https://dev.azure.com/contoso)
- AZURE_DEVOPS_PAT

Optional variables with defaults:
- BRANCH_SETTINGS_PATH (default: unset, built-in naming settings are used)
- ALLOWED_PROJECTS (default: '*')
- ALLOWED_WORK_ITEM_TYPES (default: 'Task,Bug')
- ALLOWED_PARENT_TYPES (default: 'User Story,Vulnerability')
- LOG_LEVEL (default: 'INFO')
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from urllib.parse import quote

from dotenv import load_dotenv


def _split_list(raw: str | None, default: list[str]) -> list[str]:
    if not raw:
        return list(default)
    return [item.strip() for item in raw.split(",") if item.strip()]


@dataclass
class Config:
    """Configuration values loaded from the environment."""

    organization_url: str
    personal_access_token: str
    settings_path: str | None
    allowed_projects: list[str]
    allowed_work_item_types: list[str]
    allowed_parent_types: list[str]
    log_level: str

    def git_base_url(self, project: str) -> str:
        """Return the web URL under which the project's repositories live."""
        return f"{self.organization_url}/{quote(project)}/_git"

    @classmethod
    def load_from_env(cls) -> Config:
        """Load configuration from environment variables.

        The `.env` file is loaded if present.  Raises `RuntimeError` if
        required variables are missing.
        """
        load_dotenv()
        missing = []

        organization_url = os.getenv("AZURE_DEVOPS_ORG_URL")
        if not organization_url:
            missing.append("AZURE_DEVOPS_ORG_URL")

        personal_access_token = os.getenv("AZURE_DEVOPS_PAT")
        if not personal_access_token:
            missing.append("AZURE_DEVOPS_PAT")

        if missing:
            raise RuntimeError(f"Missing required environment variables: {', '.join(missing)}")

        return cls(
            organization_url=organization_url.rstrip("/"),
            personal_access_token=personal_access_token,
            settings_path=os.getenv("BRANCH_SETTINGS_PATH") or None,
            allowed_projects=_split_list(os.getenv("ALLOWED_PROJECTS"), ["*"]),
            allowed_work_item_types=_split_list(os.getenv("ALLOWED_WORK_ITEM_TYPES"), ["Task", "Bug"]),
            allowed_parent_types=_split_list(
                os.getenv("ALLOWED_PARENT_TYPES"), ["User Story", "Vulnerability"]
            ),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
        )
