"""JWT verification.

Сервіс не видає tokens (auth internals поза scope), тільки перевіряє їх
і дістає owner reference з "user_id" claim.
"""

from typing import Any

from jose import JWTError, jwt

from swap_service.config import get_settings


class JWTManager:
    """Verifies access tokens issued by the identity service."""

    def __init__(self, secret_key: str | None = None, algorithm: str | None = None):
        """
        Initialize JWT manager.

        Args:
            secret_key: Key tokens are verified with. If not provided,
                       uses the key from settings.
            algorithm: Signing algorithm (default: settings.jwt_algorithm).
        """
        settings = get_settings()
        self.secret_key = secret_key or settings.secret_key
        self.algorithm = algorithm or settings.jwt_algorithm

    def verify_token(self, token: str) -> dict[str, Any] | None:
        """
        Verify and decode a JWT token.

        Returns:
            Decoded token data or None if invalid
        """
        try:
            return jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError:
            return None

    def resolve_owner(self, token: str) -> str | None:
        """Owner reference з access token ("user_id" claim).

        Returns:
            str(user_id) або None якщо token invalid / без user_id.
        """
        payload = self.verify_token(token)
        if not payload or payload.get("type", "access") != "access":
            return None
        user_id = payload.get("user_id")
        if user_id is None or user_id == "":
            return None
        return str(user_id)


# Singleton instance
_jwt_manager: JWTManager | None = None


def get_jwt_manager() -> JWTManager:
    """Get or create the JWT manager singleton."""
    global _jwt_manager
    if _jwt_manager is None:
        _jwt_manager = JWTManager()
    return _jwt_manager
