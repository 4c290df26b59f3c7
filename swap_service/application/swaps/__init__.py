"""Swaps application layer - use cases для rates, trades, validation."""
