"""Shared helpers: distances, colours and logging."""
