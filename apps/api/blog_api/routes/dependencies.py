"""Dependency wiring for routes."""

from __future__ import annotations

import inspect
import logging
from collections.abc import Callable
from typing import Annotated, Any
from uuid import uuid4

from fastapi import Depends, Request, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from blog_api.adapters.auth import (
    AuthVerificationError,
    FirebaseTokenVerifier,
    MockTokenVerifier,
    TokenVerifier,
)
from blog_api.core.config import Settings, get_settings
from blog_api.core.logging_safety import safe_log_identifier
from blog_api.domain.api_version import negotiate_api_version
from blog_api.errors import ApiError, unauthenticated
from blog_api.repositories.base import ArticleRepository
from blog_api.schemas.auth import AuthPrincipal
from blog_api.services.articles import ArticleService

bearer_scheme = HTTPBearer(auto_error=False, scheme_name="bearerAuth")
logger = logging.getLogger(__name__)


def _request_correlation_id(request: Request) -> str:
    existing = getattr(request.state, "correlation_id", None)
    if isinstance(existing, str) and existing:
        return existing

    correlation_id = request.headers.get("X-Correlation-Id")
    if correlation_id:
        request.state.correlation_id = correlation_id
        return correlation_id

    generated = f"req-{uuid4()}"
    request.state.correlation_id = generated
    return generated


def get_request_correlation_id(request: Request) -> str:
    return _request_correlation_id(request)


def get_token_verifier(settings: Annotated[Settings, Depends(get_settings)]) -> TokenVerifier:
    """Resolve provider adapter from configuration."""
    if settings.auth_provider == "firebase":
        return FirebaseTokenVerifier(
            project_id=settings.firebase_project_id,
            audience=settings.firebase_audience,
            revoked_user_ids=settings.revoked_user_ids,
        )
    return MockTokenVerifier(revoked_user_ids=settings.revoked_user_ids)


def resolve_principal(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None,
    verifier: TokenVerifier,
) -> AuthPrincipal:
    """Turn request credentials into a principal or raise the 401 error."""
    safe_correlation_id = safe_log_identifier(_request_correlation_id(request), prefix="cid")
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        logger.warning(
            "auth.rejected correlation_id=%s method=%s path=%s reason=invalid_or_missing_bearer",
            safe_correlation_id,
            request.method,
            request.url.path,
        )
        raise unauthenticated("Invalid or missing bearer token")

    try:
        principal = verifier.verify_token(credentials.credentials)
    except AuthVerificationError as exc:
        logger.warning(
            "auth.rejected correlation_id=%s method=%s path=%s reason=token_verification_failed",
            safe_correlation_id,
            request.method,
            request.url.path,
        )
        raise unauthenticated(str(exc) or "Invalid bearer token") from exc

    logger.info(
        "auth.accepted correlation_id=%s method=%s path=%s principal_id=%s",
        safe_correlation_id,
        request.method,
        request.url.path,
        safe_log_identifier(principal.user_id, prefix="pid"),
    )
    request.state.auth_principal = principal
    return principal


async def get_authenticated_principal(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Security(bearer_scheme)],
    verifier: Annotated[TokenVerifier, Depends(get_token_verifier)],
) -> AuthPrincipal:
    """Validate bearer token and attach the principal to request context."""
    return resolve_principal(request, credentials, verifier)


def _resolve_dependency(request: Request, dependency: Callable[..., Any]) -> Callable[..., Any]:
    return request.app.dependency_overrides.get(dependency, dependency)


def request_settings(request: Request) -> Settings:
    """Settings as the routes see them, including an app-level override."""
    return _resolve_dependency(request, get_settings)()


async def authenticate_request(request: Request, settings: Settings) -> AuthPrincipal:
    """Resolve the principal outside of dependency injection.

    Used by exception handlers that answer before route dependencies ran.
    A ``get_token_verifier`` override is called the way the route would call
    it: with ``settings`` when it declares a parameter.
    """
    existing = getattr(request.state, "auth_principal", None)
    if isinstance(existing, AuthPrincipal):
        return existing

    verifier_factory = _resolve_dependency(request, get_token_verifier)
    if inspect.signature(verifier_factory).parameters:
        verifier = verifier_factory(settings)
    else:
        verifier = verifier_factory()
    credentials = await bearer_scheme(request)
    return resolve_principal(request, credentials, verifier)


def require_api_version(
    request: Request,
    settings: Annotated[Settings, Depends(get_settings)],
) -> str:
    """Negotiate the API version from the ``Accept`` header."""
    try:
        version = negotiate_api_version(
            request.headers.get("Accept"),
            vendor=settings.api_vendor,
            version=settings.api_version,
        )
    except ApiError:
        logger.warning(
            "api.version_rejected correlation_id=%s method=%s path=%s",
            safe_log_identifier(_request_correlation_id(request), prefix="cid"),
            request.method,
            request.url.path,
        )
        raise
    request.state.api_version = version
    return version


def get_store(request: Request) -> ArticleRepository:
    return request.app.state.store


def get_article_service(store: Annotated[ArticleRepository, Depends(get_store)]) -> ArticleService:
    return ArticleService(store)
