"""
PetHaven Backend — Breed Lookup Route Handlers
================================================
"""

from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.models.pet import CAT, DOG
from app.schemas.common import ErrorResponse
from app.schemas.pet import BreedResponse
from app.services.breed_service import breed_service

router = APIRouter(prefix="/breeds", tags=["Breeds"])


@router.get(
    "",
    response_model=List[BreedResponse],
    responses={400: {"description": "Unknown species", "model": ErrorResponse}},
    summary="List breeds for a species",
)
async def list_breeds(
    species: str = Query(..., description="Dog or Cat"),
    db: AsyncSession = Depends(get_db_session),
) -> List[BreedResponse]:
    return await breed_service.list_breeds(db, species)


@router.get("/dogs", response_model=List[BreedResponse], summary="List dog breeds")
async def list_dog_breeds(db: AsyncSession = Depends(get_db_session)) -> List[BreedResponse]:
    return await breed_service.list_breeds(db, DOG)


@router.get("/cats", response_model=List[BreedResponse], summary="List cat breeds")
async def list_cat_breeds(db: AsyncSession = Depends(get_db_session)) -> List[BreedResponse]:
    return await breed_service.list_breeds(db, CAT)
