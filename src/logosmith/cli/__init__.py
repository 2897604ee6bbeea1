"""
Command-line interface for logosmith.

Commands live in logosmith.cli.commands; this package exposes the click group
and the console-script entry point.
"""

from logosmith.cli.commands import cli, main

__all__ = ["cli", "main"]
