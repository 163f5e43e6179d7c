# src/sandwich_spawnpoint/services/__init__.py
"""Business services: tokens, bruteforce protection, config and sync."""
