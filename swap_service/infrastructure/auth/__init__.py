"""Owner resolution from bearer tokens."""

from .jwt_manager import JWTManager, get_jwt_manager

__all__ = ["JWTManager", "get_jwt_manager"]
