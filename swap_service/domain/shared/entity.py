"""Base Entity class for domain model.

Entity відрізняється від інших не атрибутами, а ID.
"""

from abc import ABC


class Entity(ABC):
    """Base class for all domain entities.

    Entities порівнюються за ID. Swap trades отримують string ID (uuid4)
    одразу при створенні, тому ID відомий ще до INSERT.

    Example:
        >>> a = SwapTrade(trade_id="7f3c...", ...)
        >>> b = repo_copy_of_same_row
        >>> a == b  # True (same trade_id)
    """

    def __init__(self, id: str | None = None) -> None:
        """Initialize entity with optional ID.

        Args:
            id: Unique identifier. None для entities без identity.
        """
        self._id = id

    @property
    def id(self) -> str | None:
        """Get entity ID."""
        return self._id

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Entity):
            return False

        # Два entities без ID рівні тільки якщо це той самий об'єкт
        if self._id is None and other._id is None:
            return self is other

        return self._id == other._id

    def __hash__(self) -> int:
        if self._id is None:
            return hash(id(self))
        return hash(self._id)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(id={self._id})"
