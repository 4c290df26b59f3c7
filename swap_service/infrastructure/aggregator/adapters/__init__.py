"""Aggregator adapters (implement AggregatorPort)."""

from .trocador_adapter import TrocadorAdapter

__all__ = ["TrocadorAdapter"]
