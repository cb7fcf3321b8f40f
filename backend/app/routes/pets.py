"""
PetHaven Backend — Pet Catalog Route Handlers
===============================================

Endpoints:
    GET    /pets?species=&status=     list
    GET    /pets/{id}                 detail
    POST   /pets                      create (201)
    PUT    /pets/{id}                 partial update
    DELETE /pets/{id}                 delete (also removes its stored image)
    POST   /pets/{id}/image           multipart image upload
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.schemas.common import ErrorResponse, MessageResponse
from app.schemas.pet import PetCreate, PetListResponse, PetResponse, PetUpdate
from app.services.pet_service import pet_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/pets", tags=["Pets"])


@router.get("", response_model=PetListResponse, summary="List pets")
async def list_pets(
    species: Optional[str] = Query(default=None, description="e.g. Dog, Cat"),
    status: Optional[int] = Query(default=None, ge=0, le=2, description="0 unlisted, 1 available, 2 reserved"),
    db: AsyncSession = Depends(get_db_session),
) -> PetListResponse:
    return await pet_service.list_pets(db, species=species, status=status)


@router.get(
    "/{pet_id}",
    response_model=PetResponse,
    responses={404: {"description": "Pet not found", "model": ErrorResponse}},
    summary="Get one pet",
)
async def get_pet(pet_id: int, db: AsyncSession = Depends(get_db_session)) -> PetResponse:
    return await pet_service.get_pet(db, pet_id)


@router.post(
    "",
    status_code=201,
    response_model=PetResponse,
    responses={400: {"description": "Invalid pet data", "model": ErrorResponse}},
    summary="Add a pet to the catalog",
)
async def create_pet(payload: PetCreate, db: AsyncSession = Depends(get_db_session)) -> PetResponse:
    return await pet_service.create_pet(db, payload)


@router.put(
    "/{pet_id}",
    response_model=PetResponse,
    responses={404: {"description": "Pet not found", "model": ErrorResponse}},
    summary="Update a pet",
)
async def update_pet(
    pet_id: int,
    payload: PetUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> PetResponse:
    return await pet_service.update_pet(db, pet_id, payload)


@router.delete(
    "/{pet_id}",
    response_model=MessageResponse,
    responses={404: {"description": "Pet not found", "model": ErrorResponse}},
    summary="Delete a pet",
)
async def delete_pet(pet_id: int, db: AsyncSession = Depends(get_db_session)) -> MessageResponse:
    await pet_service.delete_pet(db, pet_id)
    return MessageResponse(message="Pet deleted", id=pet_id)


@router.post(
    "/{pet_id}/image",
    response_model=PetResponse,
    responses={
        400: {"description": "Unsupported type or too large", "model": ErrorResponse},
        404: {"description": "Pet not found", "model": ErrorResponse},
    },
    summary="Upload a pet photo",
)
async def upload_pet_image(
    pet_id: int,
    file: UploadFile = File(..., description="PNG, JPEG or WebP image"),
    db: AsyncSession = Depends(get_db_session),
) -> PetResponse:
    content = await file.read()
    try:
        return await pet_service.attach_image(
            db,
            pet_id=pet_id,
            filename=file.filename,
            content_type=file.content_type,
            content=content,
            content_length=file.size,
        )
    finally:
        await file.close()
