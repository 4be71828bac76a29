"""FastAPI application entrypoint."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse

from blog_api.core.logging_safety import safe_log_identifier
from blog_api.errors import ApiError, internal_error, validation_failed
from blog_api.repositories.memory import InMemoryStore
from blog_api.routes import articles_router
from blog_api.routes.articles import (
    create_article,
    delete_article,
    get_article,
    list_articles,
    update_article,
)
from blog_api.routes.dependencies import (
    authenticate_request,
    get_article_service,
    get_store,
    request_settings,
    require_api_version,
)
from blog_api.schemas.article import ArticleWriteRequest

logger = logging.getLogger(__name__)

API_PREFIX = "/api"

_OPENAPI_RESPONSE_CODES: dict[str, dict[str, set[str]]] = {
    "/api/articles": {
        "get": {"200", "401", "406"},
        "post": {"201", "401", "406", "422"},
    },
    "/api/articles/{articleId}": {
        "get": {"200", "401", "404", "406"},
        "patch": {"200", "401", "404", "406", "422"},
        "delete": {"204", "401", "404", "406"},
    },
}

_ARTICLE_WRITE_OPERATIONS: tuple[tuple[str, str], ...] = (
    ("/api/articles", "post"),
    ("/api/articles/{articleId}", "patch"),
)

# Matched by endpoint so the check does not depend on how the router prefix
# is reflected in the route path.
_ARTICLE_ENDPOINTS = frozenset({list_articles, create_article, get_article, update_article, delete_article})


class ApiJSONResponse(JSONResponse):
    media_type = "application/json; charset=utf-8"


def _api_error_response(exc: ApiError) -> ApiJSONResponse:
    return ApiJSONResponse(
        status_code=exc.status_code,
        content=exc.payload.model_dump(mode="json", exclude_none=True),
    )


def is_article_route(route: object) -> bool:
    return getattr(route, "endpoint", None) in _ARTICLE_ENDPOINTS


def _request_field_errors(exc: RequestValidationError) -> dict[str, list[str]]:
    field_errors: dict[str, list[str]] = {}
    for error in exc.errors():
        loc = error.get("loc") or ("request",)
        message = "is not valid JSON" if error.get("type") == "json_invalid" else str(error.get("msg", "is invalid"))
        field_errors.setdefault(str(loc[0]), []).append(message)
    return field_errors


async def _article_request_validation_response(request: Request, exc: RequestValidationError) -> ApiJSONResponse:
    """Answer a request FastAPI rejected before route dependencies ran.

    Malformed JSON is detected before authentication and the ownership lookup,
    so both are replayed here to keep the 401, 404, 422 ordering.
    """
    try:
        settings = request_settings(request)
        principal = await authenticate_request(request, settings)
        require_api_version(request, settings)
        article_id = request.path_params.get("articleId")
        if article_id is not None:
            service = get_article_service(get_store(request))
            service.get_article(owner_id=principal.user_id, article_id=article_id)
    except ApiError as error:
        return _api_error_response(error)

    return _api_error_response(validation_failed(_request_field_errors(exc), message="Request is invalid"))


def _apply_contract_response_codes(schema: dict) -> None:
    """Limit documented response codes to the article contract."""
    for path, methods in _OPENAPI_RESPONSE_CODES.items():
        path_item = schema.get("paths", {}).get(path)
        if not path_item:
            continue

        for method, allowed_codes in methods.items():
            operation = path_item.get(method)
            if not operation:
                continue

            responses = operation.setdefault("responses", {})
            for status_code in list(responses.keys()):
                if status_code not in allowed_codes:
                    responses.pop(status_code, None)

            for status_code in sorted(allowed_codes):
                responses.setdefault(status_code, {"description": "See API contract"})


def _apply_article_write_schema(schema: dict) -> None:
    """Document the ``{"article": {...}}`` envelope for write operations."""
    write_schema = ArticleWriteRequest.model_json_schema(ref_template="#/components/schemas/{model}")
    components = schema.setdefault("components", {}).setdefault("schemas", {})
    components.update(write_schema.pop("$defs", {}))
    components["ArticleWriteRequest"] = write_schema

    for path, method in _ARTICLE_WRITE_OPERATIONS:
        operation = schema.get("paths", {}).get(path, {}).get(method)
        if not operation:
            continue
        request_body = operation.setdefault("requestBody", {})
        request_body["required"] = True
        content = request_body.setdefault("content", {}).setdefault("application/json", {})
        content["schema"] = {"$ref": "#/components/schemas/ArticleWriteRequest"}


def create_app() -> FastAPI:
    app = FastAPI(title="Blog Articles API", version="1.0.0", default_response_class=ApiJSONResponse)
    app.state.store = InMemoryStore()

    @app.exception_handler(ApiError)
    async def handle_api_error(_, exc: ApiError) -> JSONResponse:
        return _api_error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        if is_article_route(request.scope.get("route")):
            return await _article_request_validation_response(request, exc)

        return await request_validation_exception_handler(request, exc)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(
            "api.internal_error correlation_id=%s method=%s path=%s error_type=%s",
            safe_log_identifier(getattr(request.state, "correlation_id", None), prefix="cid"),
            request.method,
            request.url.path,
            type(exc).__name__,
        )
        return _api_error_response(internal_error())

    app.include_router(articles_router, prefix=API_PREFIX)

    def custom_openapi() -> dict:
        if app.openapi_schema:
            return app.openapi_schema
        schema = get_openapi(
            title=app.title,
            version=app.version,
            description=app.description,
            routes=app.routes,
        )
        _apply_contract_response_codes(schema)
        _apply_article_write_schema(schema)
        app.openapi_schema = schema
        return app.openapi_schema

    app.openapi = custom_openapi

    return app


app = create_app()
