"""Command-line interface for vscreen."""
