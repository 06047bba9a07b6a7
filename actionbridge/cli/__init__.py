"""Command-line interface for actionbridge."""
