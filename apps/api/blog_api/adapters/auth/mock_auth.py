"""Mock auth verifier for local development and tests."""

from blog_api.adapters.auth.base import AuthVerificationError, TokenVerifier
from blog_api.schemas.auth import AuthPrincipal


class MockTokenVerifier(TokenVerifier):
    """Accepts deterministic test tokens only.

    Expected token format: ``test:<user_id>``. Ids listed in ``revoked_user_ids``
    are treated as principals that no longer exist.
    """

    def __init__(self, revoked_user_ids: frozenset[str] = frozenset()) -> None:
        self._revoked_user_ids = revoked_user_ids

    def verify_token(self, token: str) -> AuthPrincipal:
        scheme, _, user_id = token.partition(":")
        if scheme != "test" or ":" in user_id:
            raise AuthVerificationError("Invalid bearer token")

        user_id = user_id.strip()
        if not user_id:
            raise AuthVerificationError("Bearer token missing user identity")
        if user_id in self._revoked_user_ids:
            raise AuthVerificationError("Bearer token principal is no longer active")

        return AuthPrincipal(user_id=user_id)


__all__ = ["MockTokenVerifier"]
