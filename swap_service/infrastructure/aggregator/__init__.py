"""Aggregator client infrastructure (Trocador adapter + resilience)."""

from .adapters import TrocadorAdapter
from .factory import create_aggregator

__all__ = ["TrocadorAdapter", "create_aggregator"]
