"""Command-line interface for Cornebuild using Typer."""

from cornebuild.cli.app import app, main


__all__ = ["app", "main"]
