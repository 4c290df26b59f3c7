"""Infrastructure Layer - adapters для ports (DB, aggregator, cache, messaging)."""
