"""Command-line utilities for the Blogger application."""
