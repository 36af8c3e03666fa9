"""Entry-point for the singleton-registry command line."""
from __future__ import annotations

from cli.commands import app

if __name__ == "__main__":
    app()
