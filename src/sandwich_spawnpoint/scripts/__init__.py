"""Operational entry points run outside the web process."""
