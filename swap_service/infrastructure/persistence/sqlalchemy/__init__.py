"""SQLAlchemy persistence layer."""

from .database import create_engine, create_session_factory
from .models import Base, SwapTradeModel
from .repositories import SQLAlchemyTradeRepository
from .unit_of_work import SQLAlchemyUnitOfWork, create_unit_of_work

__all__ = [
    # ORM Models
    "Base",
    "SwapTradeModel",
    # Repositories
    "SQLAlchemyTradeRepository",
    # Unit of Work
    "SQLAlchemyUnitOfWork",
    "create_unit_of_work",
    # Engine
    "create_engine",
    "create_session_factory",
]
