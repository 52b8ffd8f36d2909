"""merkle_drop.cli — the `merkle-drop` operator command line (typer + rich)."""

from .main import app

__all__ = ["app"]
