"""Derive uptime monitor definitions from a Caddy server's routing config."""

__version__ = "0.1.0"
