"""Firebase Auth token verifier adapter."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from blog_api.adapters.auth.base import AuthVerificationError, TokenVerifier
from blog_api.schemas.auth import AuthPrincipal

FIREBASE_ISSUER_PREFIX = "https://securetoken.google.com/"


def principal_from_claims(
    claims: Mapping[str, Any],
    *,
    project_id: str | None,
    audience: str | None,
    revoked_user_ids: frozenset[str] = frozenset(),
) -> AuthPrincipal:
    """Map decoded ID token claims to the article owner they identify.

    The user id becomes ``owner_id`` on created articles, so a token without a
    stable subject, or one issued for another project, never resolves.
    """
    if audience and claims.get("aud") != audience:
        raise AuthVerificationError("Invalid bearer token audience")

    if project_id:
        if claims.get("iss") != f"{FIREBASE_ISSUER_PREFIX}{project_id}" or claims.get("aud") != project_id:
            raise AuthVerificationError("Invalid bearer token issuer")

    user_id = str(claims.get("uid") or claims.get("sub") or "").strip()
    if not user_id:
        raise AuthVerificationError("Bearer token missing user identity")
    if user_id in revoked_user_ids:
        raise AuthVerificationError("Bearer token principal is no longer active")

    return AuthPrincipal(user_id=user_id)


class FirebaseTokenVerifier(TokenVerifier):
    """Resolves Firebase ID tokens to article owners."""

    def __init__(
        self,
        project_id: str | None,
        audience: str | None,
        revoked_user_ids: frozenset[str] = frozenset(),
    ) -> None:
        self._project_id = project_id
        self._audience = audience
        self._revoked_user_ids = revoked_user_ids

    def verify_token(self, token: str) -> AuthPrincipal:
        try:
            import firebase_admin
            from firebase_admin import auth as firebase_auth
        except ImportError as exc:  # pragma: no cover - depends on optional package
            raise AuthVerificationError("Firebase auth verifier is unavailable") from exc

        if not firebase_admin._apps:
            firebase_admin.initialize_app()

        try:
            # check_revoked rejects tokens of disabled or signed-out users.
            decoded = firebase_auth.verify_id_token(token, check_revoked=True)
        except Exception as exc:  # pragma: no cover - provider exception surface
            raise AuthVerificationError("Invalid bearer token") from exc

        return self.principal_from_claims(decoded)

    def principal_from_claims(self, decoded: Mapping[str, Any]) -> AuthPrincipal:
        return principal_from_claims(
            decoded,
            project_id=self._project_id,
            audience=self._audience,
            revoked_user_ids=self._revoked_user_ids,
        )


__all__ = ["FirebaseTokenVerifier", "principal_from_claims"]
