"""Application Layer - use cases (Commands, Queries, Handlers)."""
