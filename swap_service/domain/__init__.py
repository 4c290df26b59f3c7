"""Domain layer - pure business logic без infrastructure dependencies."""
