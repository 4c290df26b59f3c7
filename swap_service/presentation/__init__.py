"""Presentation layer (REST API + background workers)."""
