"""
PetHaven Backend — Pet Catalog and Breed Schemas
==================================================

What:  Request/response contracts for /pets, /breeds and /upload.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class PetCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1, max_length=120)
    species: str = Field(min_length=1, max_length=50)
    breed_id: Optional[int] = Field(default=None, alias="breedId")
    gender: Optional[str] = Field(default=None, max_length=20)
    age: Optional[int] = Field(default=None, ge=0, le=60)
    description: Optional[str] = None
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    status: int = Field(default=1, description="0 unlisted, 1 available, 2 reserved")

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: int) -> int:
        if v not in (0, 1, 2):
            raise ValueError("status must be one of 0 (unlisted), 1 (available), 2 (reserved)")
        return v


class PetUpdate(BaseModel):
    """Partial update: only fields present in the body are written."""

    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(default=None, min_length=1, max_length=120)
    species: Optional[str] = Field(default=None, min_length=1, max_length=50)
    breed_id: Optional[int] = Field(default=None, alias="breedId")
    gender: Optional[str] = Field(default=None, max_length=20)
    age: Optional[int] = Field(default=None, ge=0, le=60)
    description: Optional[str] = None
    image_url: Optional[str] = Field(default=None, alias="imageUrl")
    status: Optional[int] = None

    @field_validator("status")
    @classmethod
    def validate_status(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v not in (0, 1, 2):
            raise ValueError("status must be one of 0 (unlisted), 1 (available), 2 (reserved)")
        return v


class PetResponse(BaseModel):
    id: int
    name: str
    species: str
    breed_id: Optional[int] = None
    breed_name: Optional[str] = None
    gender: Optional[str] = None
    age: Optional[int] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    status: int
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PetListResponse(BaseModel):
    pets: List[PetResponse]
    total_count: int


class BreedResponse(BaseModel):
    id: int
    name: str

    model_config = ConfigDict(from_attributes=True)


class UploadResponse(BaseModel):
    """Durable location of a stored blob."""

    url: str
    path: str
    content_type: str
    size: int
