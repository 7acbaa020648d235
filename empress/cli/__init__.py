"""Command-line surface: typer app, rich rendering and the interactive menu."""
