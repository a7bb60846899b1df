from __future__ import annotations

import asyncio
import logging

from fastapi import APIRouter, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from persistence.errors import Unauthorized
from persistence.repositories import AsyncUserRepository
from security import TokenService, verify_password
from settings import AppConfig

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid username or password"


class Credentials(BaseModel):
    username: str
    password: str


def build_auth_router(
    config: AppConfig,
    users: AsyncUserRepository,
    tokens: TokenService | None = None,
) -> APIRouter:
    """
    /register is always exposed; it fails with 500 when the database was created without users.
    /login only exists when authorization is enabled.
    """
    router = APIRouter(tags=["auth"])

    if config.requires_authorization:
        if tokens is None:
            raise ValueError("a token service is required when authorization is enabled")

        @router.post("/login")
        async def login(body: Credentials) -> JSONResponse:
            user = await users.get_user(body.username)
            if user is None:
                logger.info("LOGIN: unknown user %s", body.username)
                raise Unauthorized(INVALID_CREDENTIALS)
            if not await asyncio.to_thread(verify_password, body.password, user.password):
                logger.info("LOGIN: bad password for %s", body.username)
                raise Unauthorized(INVALID_CREDENTIALS)
            return JSONResponse({"token": tokens.issue(user.username)})

    @router.post("/register")
    async def register(body: Credentials) -> Response:
        await users.add_user(body.username, body.password)
        return Response(status_code=200)

    return router
