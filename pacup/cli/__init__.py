"""
Command-Line Interface Layer.

This package holds the Typer application and its Rich-based output helpers.
"""
