"""Command-line interface for browser-sessions."""
