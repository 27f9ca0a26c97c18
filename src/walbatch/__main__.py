"""
walbatch Package Main Entry Point

Runs the CLI when the package is executed with ``python -m walbatch``.
"""

from walbatch.cli.typer_app import app

if __name__ == "__main__":
    app()
