"""Persistence layer (Note Store)."""
