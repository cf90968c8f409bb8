"""Blogger API: social blogging backend with a consistent engagement layer."""

__version__ = "0.1.0"
