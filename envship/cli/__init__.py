"""envship CLI — Typer-based command-line interface.

Provides the ``envship`` command with subcommands for deploying,
validating configuration documents, showing resolved targets and
reporting artifact sizes.

All output uses Rich for formatted terminal display.
"""
