"""HTTP API for the Blogger application."""
