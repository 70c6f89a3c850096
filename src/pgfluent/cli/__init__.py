"""Command-line interface for pgfluent."""
