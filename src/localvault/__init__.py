"""
LocalVault - write-through TTL caching, change notification and schema
migration for local key-value storage.
"""

from localvault.shared.constants import CLIDefaults

__version__ = CLIDefaults.VERSION
__author__ = "LocalVault Team"

__all__ = ["__version__"]
