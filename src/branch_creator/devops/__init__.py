"""Azure DevOps REST API integration."""

from .api import AzureGitService, AzureWorkItemService, get_project
from .auth import get_devops_client

__all__ = [
    "get_devops_client",
    "get_project",
    "AzureGitService",
    "AzureWorkItemService",
]
