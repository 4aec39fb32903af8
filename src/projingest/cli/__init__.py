"""Command-line interface for projingest."""
