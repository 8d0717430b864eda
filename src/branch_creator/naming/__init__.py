"""Branch naming: template tokens, sanitization and parent resolution."""

from .branch_name import BranchNameResolver
from .parent import ParentResolver
from .sanitizer import sanitize
from .tokenizer import get_tokens

__all__ = [
    "get_tokens",
    "sanitize",
    "ParentResolver",
    "BranchNameResolver",
]
