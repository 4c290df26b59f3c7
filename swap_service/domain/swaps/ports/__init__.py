"""Ports (outbound interfaces) для Swaps bounded context."""

from .aggregator_port import AggregatorPort
from .quote_cache_port import QuoteCache

__all__ = ["AggregatorPort", "QuoteCache"]
