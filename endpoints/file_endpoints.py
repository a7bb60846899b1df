from __future__ import annotations

import asyncio
import logging
import mimetypes
import uuid
from pathlib import Path

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import FileResponse, JSONResponse

logger = logging.getLogger(__name__)


def _extension_for(content_type: str | None) -> str:
    if not content_type:
        return ""
    return mimetypes.guess_extension(content_type.split(";", 1)[0].strip()) or ""


def build_file_router(uploads: Path) -> APIRouter:
    """
    Raw-body uploads stored under a generated name, and streaming them back by name.
    """
    router = APIRouter(tags=["files"])
    root = uploads.resolve()

    @router.post("/upload")
    async def upload(request: Request) -> JSONResponse:
        data = await request.body()
        filename = f"{uuid.uuid4().hex}{_extension_for(request.headers.get('content-type'))}"
        root.mkdir(parents=True, exist_ok=True)
        await asyncio.to_thread((root / filename).write_bytes, data)
        logger.info("UPLOAD: stored %s (%d bytes)", filename, len(data))
        return JSONResponse({"filename": filename})

    @router.get("/files/{filename}")
    async def get_file(filename: str) -> FileResponse:
        path = (root / filename).resolve()
        # Only plain files directly inside the uploads folder.
        if path.parent != root or not path.is_file():
            raise HTTPException(status_code=404, detail="File not found")
        return FileResponse(path)

    return router
