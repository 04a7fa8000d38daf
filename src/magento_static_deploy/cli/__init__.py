"""Command-line interface: typer command and rich rendering."""
