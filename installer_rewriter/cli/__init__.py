"""Installer rewriter CLI — Typer-based command-line interface.

Provides the ``installer-rewriter`` command with subcommands for full
rewrite runs, dry runs, backups and checksum refreshes. All output uses Rich.
"""
