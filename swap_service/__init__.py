"""Swap orchestration service.

Quote → trade binding and trade lifecycle tracking over a liquidity aggregator.
"""

__version__ = "1.0.0"
