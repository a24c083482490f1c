"""Command implementations registered on the Typer app."""
