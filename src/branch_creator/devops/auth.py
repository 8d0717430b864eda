"""Authentication helpers for the Azure DevOps REST API."""

from __future__ import annotations

import httpx

from ..config import Config
from ..constants import REQUEST_TIMEOUT_S


def get_devops_client(config: Config) -> httpx.Client:
    """Return an httpx client authenticated with the personal access token."""
    return httpx.Client(
        auth=httpx.BasicAuth("", config.personal_access_token),
        headers={
            "Accept": "application/json",
            "User-Agent": "branch-creator/0.1",
        },
        timeout=REQUEST_TIMEOUT_S,
    )
