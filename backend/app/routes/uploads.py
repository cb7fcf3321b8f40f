"""
PetHaven Backend — Blob Upload Route Handlers
===============================================

What:  Raw file upload (POST /upload) and serving of stored files
       (GET /files/{path}).
Why:   The frontend uploads a photo first and sends the returned URL in the
       pet create/update body.
"""

import logging

from fastapi import APIRouter, File, UploadFile
from fastapi.responses import FileResponse

from app.schemas.common import ErrorResponse
from app.schemas.pet import UploadResponse
from app.services.file_service import EXTENSION_CONTENT_TYPES, file_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Uploads"])


@router.post(
    "/upload",
    status_code=201,
    response_model=UploadResponse,
    responses={400: {"description": "Unsupported type or too large", "model": ErrorResponse}},
    summary="Upload an image and get its URL",
)
async def upload_file(file: UploadFile = File(...)) -> UploadResponse:
    content = await file.read()
    logger.info(
        "Received upload: filename=%s, type=%s, size=%d bytes",
        file.filename or "unknown",
        file.content_type,
        len(content),
    )
    try:
        return await file_service.store_upload(
            filename=file.filename,
            content_type=file.content_type,
            content=content,
            content_length=file.size,
        )
    finally:
        await file.close()


@router.get(
    "/files/{file_path:path}",
    responses={
        200: {"description": "Stored image"},
        404: {"description": "File not found", "model": ErrorResponse},
    },
    summary="Serve a stored file",
)
async def serve_file(file_path: str) -> FileResponse:
    full_path = file_service.resolve(file_path)
    return FileResponse(
        path=str(full_path),
        media_type=EXTENSION_CONTENT_TYPES.get(full_path.suffix.lower(), "application/octet-stream"),
        headers={"Cache-Control": "public, max-age=86400"},
    )
