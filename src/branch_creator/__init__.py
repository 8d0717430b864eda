"""Top‑level package for the work-item branch creator.

This package creates Git branches in Azure DevOps repositories from work
item metadata: it names the branch from a configurable template, makes sure
the parent work item's branch exists, creates the ref and links it back to
the work item.
"""

__all__ = ["__version__"]
__version__ = "0.1.0"
