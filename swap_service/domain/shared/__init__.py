"""Shared Kernel - base classes для всієї domain layer.

- Entity: об'єкт з identity
- ValueObject: immutable об'єкт порівнюваний за значенням
- AggregateRoot: головний entity в aggregate, продукує domain events
- DomainEvent: подія що сталась в domain
- DomainException: порушення бізнес-правил
"""

from .aggregate_root import AggregateRoot
from .domain_event import DomainEvent
from .entity import Entity
from .exceptions import (
    AggregateNotFound,
    BusinessRuleViolation,
    DomainException,
)
from .value_object import ValueObject, validate_value_object

__all__ = [
    # Base classes
    "Entity",
    "ValueObject",
    "AggregateRoot",
    "DomainEvent",
    # Utilities
    "validate_value_object",
    # Exceptions
    "DomainException",
    "BusinessRuleViolation",
    "AggregateNotFound",
]
