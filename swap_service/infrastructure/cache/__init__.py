"""QuoteCache implementations (in-memory + Redis)."""

from .factory import create_quote_cache
from .memory_quote_cache import InMemoryQuoteCache
from .redis_quote_cache import RedisQuoteCache
from .serialization import quote_from_json, quote_to_json

__all__ = [
    "InMemoryQuoteCache",
    "RedisQuoteCache",
    "create_quote_cache",
    "quote_from_json",
    "quote_to_json",
]
