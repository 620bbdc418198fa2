"""Command-line interface for superbridge."""
