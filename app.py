from __future__ import annotations

import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from dotenv import load_dotenv

from endpoints.auth_endpoints import build_auth_router
from endpoints.errors import register_error_handlers
from endpoints.file_endpoints import build_file_router
from endpoints.resource_endpoints import build_resource_router
from persistence.paths import bootstrap_workspace, public_dir, uploads_dir
from persistence.repositories import AsyncDiskResourceRepository, AsyncDiskUserRepository
from security import TokenService
from settings import AppConfig, get_settings, load_app_config

logger = logging.getLogger(__name__)


def create_app(config: AppConfig | None = None, *, base_dir: Path | None = None) -> FastAPI:
    """
    Build the server for one configuration.

    Folders and the database are resolved against base_dir (default: the working directory)
    and created on first run.
    """
    load_dotenv("local.env")
    settings = get_settings()

    base = (base_dir or Path.cwd()).resolve()
    if config is None:
        config_path = settings.config_path if settings.config_path.is_absolute() else base / settings.config_path
        config = load_app_config(config_path)

    store = bootstrap_workspace(config, base)

    tokens: TokenService | None = None
    if config.requires_authorization:
        tokens = TokenService(
            config.jwt_secret or "",
            algorithm=settings.jwt_alg,
            expires_in=config.jwt_expiration_time,
            debug_log_tokens=settings.debug_log_tokens,
        )

    app = FastAPI(title="jsondeck")
    app.state.config = config
    app.state.store = store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    if settings.debug_log_requests:

        @app.middleware("http")
        async def log_requests(request: Request, call_next):
            response = await call_next(request)
            logger.info("%s %s -> %s", request.method, request.url.path, response.status_code)
            return response

    app.include_router(build_auth_router(config, AsyncDiskUserRepository(store), tokens))

    uploads = uploads_dir(base, config)
    if uploads is not None:
        app.include_router(build_file_router(uploads))

    app.include_router(build_resource_router(config, AsyncDiskResourceRepository(store), tokens))

    # Static files last so API routes always win.
    public = public_dir(base, config)
    if public is not None:
        app.mount("/", StaticFiles(directory=public, html=True), name="public")

    return app
