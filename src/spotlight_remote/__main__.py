"""Entry point for running spotlight_remote as a module."""

from spotlight_remote.cli import app

if __name__ == "__main__":
    app()
