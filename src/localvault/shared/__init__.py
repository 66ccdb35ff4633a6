"""LocalVault Shared Module.

This package contains constants, error types and logging helpers used across LocalVault.
"""

__all__ = ["constants", "errors", "logging"]
