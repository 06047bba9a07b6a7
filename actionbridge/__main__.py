"""Entry point for running actionbridge as a module."""

from actionbridge.cli.commands import app

if __name__ == "__main__":
    app()
