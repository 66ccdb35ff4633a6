"""Command line interface for LocalVault."""

from localvault.cli.typer_app import app

__all__ = ["app"]
