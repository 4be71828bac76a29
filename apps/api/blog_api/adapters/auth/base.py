"""Authentication provider interfaces."""

from abc import ABC, abstractmethod

from blog_api.schemas.auth import AuthPrincipal


class AuthVerificationError(Exception):
    """Raised when a credential cannot be resolved to a live principal."""


class TokenVerifier(ABC):
    """Provider-neutral bearer token verification interface."""

    @abstractmethod
    def verify_token(self, token: str) -> AuthPrincipal:
        """Verify token and return the principal it is bound to."""


__all__ = ["AuthVerificationError", "TokenVerifier"]
