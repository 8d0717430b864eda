"""Tests for the Azure DevOps REST wrapper with a mocked httpx client."""

from __future__ import annotations

import httpx
import pytest

from branch_creator.config import Config
from branch_creator.devops.api import AzureGitService, AzureWorkItemService, get_project
from branch_creator.errors import DevOpsApiError, RefUpdateError
from branch_creator.models import GitRefUpdate

ORG = "https://dev.azure.com/contoso"


@pytest.fixture
def config() -> Config:
    return Config(
        organization_url=ORG,
        personal_access_token="pat",
        settings_path=None,
        allowed_projects=["*"],
        allowed_work_item_types=["Task", "Bug"],
        allowed_parent_types=["User Story"],
        log_level="INFO",
    )


@pytest.fixture
def mock_client(mocker):
    client = mocker.MagicMock()
    client.__enter__ = mocker.MagicMock(return_value=client)
    client.__exit__ = mocker.MagicMock(return_value=False)
    mocker.patch("branch_creator.devops.api.get_devops_client", return_value=client)
    return client


def _response(mocker, status_code: int, payload: object = None, text: str = ""):
    response = mocker.MagicMock()
    response.status_code = status_code
    response.json.return_value = payload
    response.text = text
    return response


def test_get_branches_parses_stats(mocker, mock_client, config) -> None:
    mock_client.request.return_value = _response(
        mocker,
        200,
        {
            "count": 2,
            "value": [
                {"name": "main", "isBaseVersion": True, "commit": {"commitId": "abc"}},
                {"name": "feature/x", "isBaseVersion": False, "commit": {"commitId": "def"}},
            ],
        },
    )

    branches = AzureGitService(config).get_branches("repo-1", "Contoso")

    assert [(b.name, b.commit_id, b.is_base_version) for b in branches] == [
        ("main", "abc", True),
        ("feature/x", "def", False),
    ]
    method, url = mock_client.request.call_args.args
    assert method == "GET"
    assert url == f"{ORG}/Contoso/_apis/git/repositories/repo-1/stats/branches"
    assert mock_client.request.call_args.kwargs["params"]["api-version"] == "7.1"


def test_get_refs_passes_filter(mocker, mock_client, config) -> None:
    mock_client.request.return_value = _response(
        mocker, 200, {"value": [{"name": "refs/heads/task/1-x", "objectId": "abc"}]}
    )

    refs = AzureGitService(config).get_refs("repo-1", "Contoso", "heads/task/1-x")

    assert refs == ["refs/heads/task/1-x"]
    assert mock_client.request.call_args.kwargs["params"]["filter"] == "heads/task/1-x"


def test_update_refs_sends_zero_old_object_id(mocker, mock_client, config) -> None:
    mock_client.request.return_value = _response(
        mocker, 200, {"value": [{"name": "refs/heads/task/1-x", "success": True, "updateStatus": "succeeded"}]}
    )

    AzureGitService(config).update_refs(
        [GitRefUpdate(branch_name="task/1-x", repository_id="repo-1", new_object_id="abc")], "repo-1"
    )

    method, url = mock_client.request.call_args.args
    assert method == "POST"
    assert url == f"{ORG}/_apis/git/repositories/repo-1/refs"
    assert mock_client.request.call_args.kwargs["json"] == [
        {
            "name": "refs/heads/task/1-x",
            "repositoryId": "repo-1",
            "newObjectId": "abc",
            "oldObjectId": "0" * 40,
            "isLocked": False,
        }
    ]


def test_update_refs_raises_on_rejected_update(mocker, mock_client, config) -> None:
    mock_client.request.return_value = _response(
        mocker,
        200,
        {"value": [{"name": "refs/heads/task/1-x", "success": False, "updateStatus": "staleOldObjectId"}]},
    )

    with pytest.raises(RefUpdateError, match="staleOldObjectId") as excinfo:
        AzureGitService(config).update_refs(
            [GitRefUpdate(branch_name="task/1-x", repository_id="repo-1", new_object_id="abc")], "repo-1"
        )
    assert excinfo.value.ref_name == "refs/heads/task/1-x"


def test_get_work_item_expands_relations(mocker, mock_client, config) -> None:
    mock_client.request.return_value = _response(mocker, 200, {"id": 5, "fields": {}, "relations": []})

    payload = AzureWorkItemService(config).get_work_item(5, "Contoso", expand="Relations")

    assert payload["id"] == 5
    method, url = mock_client.request.call_args.args
    assert url == f"{ORG}/Contoso/_apis/wit/workitems/5"
    assert mock_client.request.call_args.kwargs["params"]["$expand"] == "Relations"


def test_update_work_item_uses_json_patch(mocker, mock_client, config) -> None:
    mock_client.request.return_value = _response(mocker, 200, {"id": 5})
    document = [{"op": "add", "path": "/fields/System.State", "value": "Active"}]

    AzureWorkItemService(config).update_work_item(document, 5)

    method, url = mock_client.request.call_args.args
    assert method == "PATCH"
    assert url == f"{ORG}/_apis/wit/workitems/5"
    assert mock_client.request.call_args.kwargs["headers"] == {"Content-Type": "application/json-patch+json"}
    assert mock_client.request.call_args.kwargs["json"] == document


def test_error_status_raises(mocker, mock_client, config) -> None:
    mock_client.request.return_value = _response(mocker, 401, text="Unauthorized")

    with pytest.raises(DevOpsApiError, match="401") as excinfo:
        AzureGitService(config).get_repository("repo-1", "Contoso")
    assert excinfo.value.status_code == 401


def test_transport_error_is_wrapped(mock_client, config) -> None:
    mock_client.request.side_effect = httpx.ConnectError("connection refused")

    with pytest.raises(DevOpsApiError, match="request failed"):
        AzureGitService(config).get_repositories("Contoso")


def test_get_project_not_found(mocker, mock_client, config) -> None:
    mock_client.request.return_value = _response(mocker, 404, text="not found")

    with pytest.raises(DevOpsApiError, match="not found"):
        get_project(config, "Missing")


def test_get_project(mocker, mock_client, config) -> None:
    mock_client.request.return_value = _response(mocker, 200, {"id": "p-1", "name": "Contoso"})

    project = get_project(config, "Contoso")

    assert project.id == "p-1"
    assert project.name == "Contoso"


def test_requests_outside_organization_are_refused(config) -> None:
    from branch_creator.devops.api import _devops_request

    with pytest.raises(ValueError, match="Invalid Azure DevOps API URL"):
        _devops_request(config, "GET", "https://evil.example.com/_apis/projects")


def test_error_body_is_redacted(mocker, mock_client, config) -> None:
    mock_client.request.return_value = _response(mocker, 400, text="Invalid credentials 'pat' supplied")

    with pytest.raises(DevOpsApiError) as excinfo:
        AzureGitService(config).get_repositories("Contoso")
    assert "'pat'" not in str(excinfo.value)
    assert "<REDACTED>" in str(excinfo.value)
