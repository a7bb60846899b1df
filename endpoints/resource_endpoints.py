from __future__ import annotations

import json
import logging
from typing import Any

from fastapi import APIRouter, Depends, Header, Request, Response
from fastapi.responses import JSONResponse

from persistence.errors import (
    BadRequest,
    ItemNotFound,
    JsonDeckError,
    ResourceNotFound,
    StorageMalformed,
    Unauthorized,
)
from persistence.interfaces import TokenVerifier
from persistence.repositories import AsyncResourceRepository
from security import bearer_token
from settings import AppConfig

logger = logging.getLogger(__name__)


def require_bearer_token(verifier: TokenVerifier):
    """
    Dependency factory: rejects the request before any Document access unless
    the Authorization header carries a token the verifier accepts.
    """

    async def _check(authorization: str | None = Header(default=None)) -> None:
        token = bearer_token(authorization)
        if token is None or not verifier.verify(token):
            raise Unauthorized("Unauthorized")

    return _check


def _reject_constant(token: str) -> Any:
    # NaN and Infinity are not JSON; they would be stored as null.
    raise BadRequest(f"Request body contains a non-JSON number: {token}")


async def _json_object(request: Request) -> dict[str, Any]:
    raw = await request.body()
    try:
        body = json.loads(raw, parse_constant=_reject_constant) if raw else None
    except ValueError as e:
        raise BadRequest("Request body is not valid JSON") from e
    if not isinstance(body, dict):
        raise BadRequest("Request body must be a JSON object")
    return body


def _read_error(name: str, exc: JsonDeckError) -> JSONResponse:
    # Read paths never answer non-2xx for lookup failures; clients rely on the error field.
    if isinstance(exc, ItemNotFound):
        message = "Error: Item not found."
    elif isinstance(exc, ResourceNotFound):
        message = "Error: Resource not found."
    elif isinstance(exc, StorageMalformed):
        message = "Error: Unable to find resources."
    else:
        message = f"Error: {exc.message}"
    logger.info("GET %s: %s", name, message)
    return JSONResponse({"error": message}, status_code=200)


def _add_resource_routes(
    router: APIRouter,
    name: str,
    repo: AsyncResourceRepository,
    dependencies: list[Any],
) -> None:
    collection = f"/{name}"
    member = f"/{name}/{{item_id}}"

    async def list_items():
        try:
            items = await repo.list_items(name)
        except JsonDeckError as e:
            return _read_error(name, e)
        return JSONResponse(items)

    async def get_item(item_id: str):
        try:
            item = await repo.get_item(name, item_id)
        except JsonDeckError as e:
            return _read_error(name, e)
        return JSONResponse(item)

    async def create_item(request: Request):
        body = await _json_object(request)
        return JSONResponse(await repo.create_item(name, body))

    async def replace_item(item_id: str, request: Request):
        body = await _json_object(request)
        return JSONResponse(await repo.replace_item(name, item_id, body))

    async def patch_item(item_id: str, request: Request):
        body = await _json_object(request)
        return JSONResponse(await repo.patch_item(name, item_id, body))

    async def delete_item(item_id: str):
        await repo.delete_item(name, item_id)
        return Response(status_code=200)

    async def clear_items():
        try:
            await repo.clear_items(name)
        except ResourceNotFound as e:
            raise ResourceNotFound(name, "Resource name not found", http_status=404) from e
        return Response(status_code=200)

    routes = [
        (collection, list_items, "GET", "list"),
        (member, get_item, "GET", "get"),
        (collection, create_item, "POST", "create"),
        (member, replace_item, "PUT", "replace"),
        (member, patch_item, "PATCH", "patch"),
        (member, delete_item, "DELETE", "delete"),
        (collection, clear_items, "DELETE", "clear"),
    ]
    for path, endpoint, method, verb in routes:
        router.add_api_route(
            path,
            endpoint,
            methods=[method],
            dependencies=dependencies,
            name=f"{verb}_{name}",
        )


def build_resource_router(
    config: AppConfig,
    repo: AsyncResourceRepository,
    verifier: TokenVerifier | None = None,
) -> APIRouter:
    """
    One route set per declared resource under /api/<apiVersion>.
    The bearer-token gate applies to every route when authorization is required.
    """
    if config.requires_authorization and verifier is None:
        raise ValueError("a token verifier is required when authorization is enabled")

    router = APIRouter(prefix=f"/api/{config.api_version}", tags=["resources"])
    dependencies = [Depends(require_bearer_token(verifier))] if config.requires_authorization else []
    for name in config.resource_names:
        _add_resource_routes(router, name, repo, dependencies)
        logger.debug("Registered routes for /api/%s/%s", config.api_version, name)
    return router
