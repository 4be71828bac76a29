"""Article routes."""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Path, Response

from blog_api.domain.outcomes import OutcomeKind, status_for
from blog_api.routes.dependencies import (
    get_article_service,
    get_authenticated_principal,
    require_api_version,
)
from blog_api.schemas.article import Article
from blog_api.schemas.auth import AuthPrincipal
from blog_api.schemas.error import (
    NoLeakNotFoundError,
    UnauthorizedError,
    UnsupportedVersionError,
    ValidationFailedError,
)
from blog_api.services.articles import ArticleService

# Authentication is listed first so it runs before version negotiation.
router = APIRouter(
    prefix="/articles",
    tags=["Articles"],
    dependencies=[Depends(get_authenticated_principal), Depends(require_api_version)],
    responses={
        status_for(OutcomeKind.UNAUTHENTICATED): {"model": UnauthorizedError},
        status_for(OutcomeKind.UNSUPPORTED_VERSION): {"model": UnsupportedVersionError},
    },
)

_NOT_FOUND_RESPONSE = {status_for(OutcomeKind.NOT_FOUND_OR_FOREIGN): {"model": NoLeakNotFoundError}}
_VALIDATION_RESPONSE = {status_for(OutcomeKind.VALIDATION_FAILED): {"model": ValidationFailedError}}

# The write body is read leniently and validated by the service, after the
# ownership lookup.
ArticlePayload = Annotated[Any, Body()]


@router.get(
    "",
    response_model=list[Article],
    status_code=status_for(OutcomeKind.LISTED),
)
async def list_articles(
    principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
    service: Annotated[ArticleService, Depends(get_article_service)],
) -> list[Article]:
    return service.list_articles(owner_id=principal.user_id)


@router.post(
    "",
    response_model=Article,
    status_code=status_for(OutcomeKind.CREATED),
    responses=_VALIDATION_RESPONSE,
)
async def create_article(
    principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
    service: Annotated[ArticleService, Depends(get_article_service)],
    payload: ArticlePayload = None,
) -> Article:
    return service.create_article(owner_id=principal.user_id, payload=payload)


@router.get(
    "/{articleId}",
    response_model=Article,
    status_code=status_for(OutcomeKind.FETCHED),
    responses=_NOT_FOUND_RESPONSE,
)
async def get_article(
    article_id: Annotated[str, Path(alias="articleId")],
    principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
    service: Annotated[ArticleService, Depends(get_article_service)],
) -> Article:
    return service.get_article(owner_id=principal.user_id, article_id=article_id)


@router.patch(
    "/{articleId}",
    response_model=Article,
    status_code=status_for(OutcomeKind.UPDATED),
    responses={**_NOT_FOUND_RESPONSE, **_VALIDATION_RESPONSE},
)
async def update_article(
    article_id: Annotated[str, Path(alias="articleId")],
    principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
    service: Annotated[ArticleService, Depends(get_article_service)],
    payload: ArticlePayload = None,
) -> Article:
    return service.update_article(owner_id=principal.user_id, article_id=article_id, payload=payload)


@router.delete(
    "/{articleId}",
    status_code=status_for(OutcomeKind.DELETED),
    response_class=Response,
    responses=_NOT_FOUND_RESPONSE,
)
async def delete_article(
    article_id: Annotated[str, Path(alias="articleId")],
    principal: Annotated[AuthPrincipal, Depends(get_authenticated_principal)],
    service: Annotated[ArticleService, Depends(get_article_service)],
) -> Response:
    service.delete_article(owner_id=principal.user_id, article_id=article_id)
    return Response(status_code=status_for(OutcomeKind.DELETED))
