"""Base Query class для CQRS pattern.

Query - запит на отримання даних (read operation).
"""

from abc import ABC
from dataclasses import dataclass


@dataclass(frozen=True)
class Query(ABC):
    """Base class для всіх queries.

    Example:
        >>> @dataclass(frozen=True)
        ... class GetTradeStatusQuery(Query):
        ...     trade_id: str

        >>> trade = await handler.handle(GetTradeStatusQuery(trade_id="7f3c..."))

    Note:
        GetTradeStatusQuery - виняток з "no side effects": stale trade
        перечитується з upstream і status persist-иться.
    """

    pass
