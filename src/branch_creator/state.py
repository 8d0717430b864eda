"""Shared state module for the branch creator.

This module provides the single shared configuration instance used across
all tool modules.  Tool modules should import CONFIG from here instead of
loading their own copy.
"""

from __future__ import annotations

from .config import Config

# Single shared configuration loaded once at import time
CONFIG: Config = Config.load_from_env()
