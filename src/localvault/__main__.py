"""Entry point for ``python -m localvault``."""

from localvault.cli.typer_app import app

if __name__ == "__main__":
    app()
