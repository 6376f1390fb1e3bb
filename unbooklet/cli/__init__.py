"""Command-line entry points for unbooklet."""
