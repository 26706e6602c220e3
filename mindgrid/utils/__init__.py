"""
Utility functions package for the MindGrid backend.

This package contains the environment-gated debug print helpers used for
logging across the application.
"""

# Debug utilities
from .debug import (
    print__ai_debug,
    print__canvas_debug,
    print__db_debug,
    print__debug,
    print__migration_debug,
    print__pages_debug,
    print__startup_debug,
    print__storage_debug,
    print__token_debug,
)

# Export all utilities for easy access
__all__ = [
    "print__ai_debug",
    "print__canvas_debug",
    "print__db_debug",
    "print__debug",
    "print__migration_debug",
    "print__pages_debug",
    "print__startup_debug",
    "print__storage_debug",
    "print__token_debug",
]
