"""Azure DevOps REST API wrapper."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from urllib.parse import quote

import httpx

from ..config import Config
from ..constants import API_VERSION
from ..errors import DevOpsApiError, RefUpdateError
from ..models import Branch, GitRefUpdate, ProjectInfo, Repository
from ..policy.redaction import redact_secrets
from .auth import get_devops_client

logger = logging.getLogger(__name__)

JSON_PATCH_CONTENT_TYPE = "application/json-patch+json"


def _devops_request(
    config: Config,
    method: str,
    url: str,
    *,
    params: dict[str, object] | None = None,
    json: object | None = None,
    headers: dict[str, str] | None = None,
    allow_404: bool = False,
) -> object | None:
    """Perform an HTTP request against the Azure DevOps API.

    This helper wraps ``httpx`` to add the ``api-version`` parameter, the
    credentials and basic error handling.  If the request returns a non-2xx
    response (other than 404 when ``allow_404=True``), a ``DevOpsApiError``
    is raised.

    Requests only go to the configured organization URL.
    """
    if not url.startswith(f"{config.organization_url}/"):
        raise ValueError(f"Invalid Azure DevOps API URL: {url}")

    query = {"api-version": API_VERSION, **(params or {})}
    try:
        with get_devops_client(config) as client:
            resp = client.request(method, url, params=query, json=json, headers=headers)
    except httpx.HTTPError as exc:
        detail = redact_secrets(str(exc), [config.personal_access_token])
        logger.error("Azure DevOps API request failed: %s", detail)
        raise DevOpsApiError(f"Azure DevOps API request failed: {detail}") from exc

    if allow_404 and resp.status_code == 404:
        return None

    if 200 <= resp.status_code < 300:
        try:
            return resp.json()
        except ValueError:
            return resp.text

    detail = redact_secrets(resp.text, [config.personal_access_token])
    logger.error("Azure DevOps API error %s: %s", resp.status_code, detail)
    raise DevOpsApiError(f"Azure DevOps API error {resp.status_code}: {detail}", status_code=resp.status_code)


def _values(data: object) -> list[dict[str, object]]:
    """Return the ``value`` array of a collection response."""
    if isinstance(data, dict):
        return list(data.get("value") or [])
    return []


def get_project(config: Config, project: str) -> ProjectInfo:
    """Retrieve a team project by name or id."""
    url = f"{config.organization_url}/_apis/projects/{quote(project)}"
    data = _devops_request(config, "GET", url, allow_404=True)
    if data is None:
        raise DevOpsApiError(f"Project '{project}' not found", status_code=404)
    return ProjectInfo(id=str(data["id"]), name=str(data["name"]))


class AzureGitService:
    """Git ref backend talking to the Azure DevOps Git REST API."""

    def __init__(self, config: Config) -> None:
        self.config = config

    def _repositories_url(self, project: str | None = None) -> str:
        if project is None:
            return f"{self.config.organization_url}/_apis/git/repositories"
        return f"{self.config.organization_url}/{quote(project)}/_apis/git/repositories"

    def get_repository(self, repository_id: str, project: str) -> Repository:
        data = _devops_request(self.config, "GET", f"{self._repositories_url(project)}/{quote(repository_id)}")
        return Repository(id=str(data["id"]), name=str(data["name"]))

    def get_repositories(self, project: str) -> list[Repository]:
        data = _devops_request(self.config, "GET", self._repositories_url(project))
        return [Repository(id=str(repo["id"]), name=str(repo["name"])) for repo in _values(data)]

    def get_branches(self, repository_id: str, project: str) -> list[Branch]:
        url = f"{self._repositories_url(project)}/{quote(repository_id)}/stats/branches"
        data = _devops_request(self.config, "GET", url)
        return [Branch.from_api(branch) for branch in _values(data)]

    def get_refs(self, repository_id: str, project: str, filter: str) -> list[str]:
        url = f"{self._repositories_url(project)}/{quote(repository_id)}/refs"
        data = _devops_request(self.config, "GET", url, params={"filter": filter})
        return [str(ref["name"]) for ref in _values(data)]

    def update_refs(self, ref_updates: Sequence[GitRefUpdate], repository_id: str) -> None:
        """Create or move refs.

        The endpoint answers 200 even when individual updates are rejected,
        so every returned entry is checked.  A create whose old object id no
        longer matches (``staleOldObjectId``) means the ref was created by
        someone else after our existence check.
        """
        url = f"{self._repositories_url()}/{quote(repository_id)}/refs"
        data = _devops_request(self.config, "POST", url, json=[update.to_api() for update in ref_updates])
        for result in _values(data):
            if not result.get("success", False):
                raise RefUpdateError(str(result.get("name", "")), str(result.get("updateStatus", "unknown")))


class AzureWorkItemService:
    """Work item backend talking to the Azure DevOps work item tracking API."""

    def __init__(self, config: Config) -> None:
        self.config = config

    def get_work_item(self, work_item_id: int, project: str, expand: str | None = None) -> dict[str, object]:
        url = f"{self.config.organization_url}/{quote(project)}/_apis/wit/workitems/{int(work_item_id)}"
        params = {"$expand": expand} if expand else None
        return _devops_request(self.config, "GET", url, params=params)

    def update_work_item(self, patch_operations: list[dict[str, object]], work_item_id: int) -> dict[str, object]:
        url = f"{self.config.organization_url}/_apis/wit/workitems/{int(work_item_id)}"
        return _devops_request(
            self.config,
            "PATCH",
            url,
            json=patch_operations,
            headers={"Content-Type": JSON_PATCH_CONTENT_TYPE},
        )
