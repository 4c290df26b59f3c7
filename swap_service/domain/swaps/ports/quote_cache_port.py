"""QuoteCache Port - short-lived store quote tokens до consumption."""

from abc import ABC, abstractmethod

from ..value_objects import Quote


class QuoteCache(ABC):
    """Abstract quote cache.

    Guarantees:
    - consume() linearizable: для одного token рівно один caller отримує
      Quote, решта - QuoteAlreadyUsed
    - expiry lazy (перевіряється при lookup): expired quote дає
      QuoteExpired, не QuoteNotFound
    - consumed token evicted: peek() → QuoteNotFound,
      consume() → QuoteAlreadyUsed
    - consumed mark sticky: put() того самого token не відновлює quote
    """

    @abstractmethod
    async def put(self, quote: Quote) -> str:
        """Store quote. Returns its quote_token."""
        pass

    @abstractmethod
    async def peek(self, quote_token: str) -> Quote:
        """Read quote without consuming.

        Raises:
            QuoteNotFound: Unknown або вже consumed token.
            QuoteExpired: now > quote.expires_at.
        """
        pass

    @abstractmethod
    async def consume(self, quote_token: str) -> Quote:
        """Atomically fetch-and-remove quote.

        Raises:
            QuoteNotFound: Unknown token.
            QuoteExpired: now > quote.expires_at.
            QuoteAlreadyUsed: Token вже consumed.
        """
        pass

    @abstractmethod
    async def is_consumed(self, quote_token: str) -> bool:
        """True якщо token вже consumed (read-only)."""
        pass

    async def close(self) -> None:
        """Release backend connections (override якщо потрібно)."""
        return None
