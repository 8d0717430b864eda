"""Global constants for the branch creator.

These values serve as defaults for the Azure DevOps client and the
notifications raised while creating branches.  Override the environment
variables rather than editing the values here.
"""

import os

# Azure DevOps REST
API_VERSION = os.environ.get("AZURE_DEVOPS_API_VERSION", "7.1")
REQUEST_TIMEOUT_S = float(os.environ.get("REQUEST_TIMEOUT_S", 10))

# Notifications
TOAST_DURATION_MS = int(os.environ.get("TOAST_DURATION_MS", 3000))

# Git wire format
ZERO_OBJECT_ID = "0" * 40
REFS_HEADS = "refs/heads/"

# Work item relations and fields
PARENT_RELATION = "System.LinkTypes.Hierarchy-Reverse"
ARTIFACT_LINK_RELATION = "ArtifactLink"
FIELD_WORK_ITEM_TYPE = "System.WorkItemType"
FIELD_TITLE = "System.Title"
FIELD_STATE = "System.State"
