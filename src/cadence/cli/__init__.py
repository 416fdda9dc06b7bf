"""Command-line interface for Cadence."""
