"""
PetHaven Backend — Adoption Application Schemas
=================================================

What:  Request/response contracts for the /application(s) endpoints.
Why:   The frontend posts camelCase keys (adoptionReason, petId, ...) while the
       database and responses use snake_case. Aliases bridge the two.

Why intake fields are Optional here:
    Required-field checking lives in ApplicationService so it applies to every
    caller (routes, scripts, tests) and reports ALL missing fields in one 400
    response instead of FastAPI's per-field 422.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class ApplicationCreate(BaseModel):
    """Body of POST /application."""

    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[int] = Field(default=None)
    pet_id: Optional[int] = Field(default=None)

    adoption_reason: Optional[str] = Field(default=None, alias="adoptionReason")
    living_situation: Optional[str] = Field(default=None, alias="livingSituation")
    experience: Optional[str] = Field(default=None)
    household_members: Optional[str] = Field(default=None, alias="householdMembers")
    work_schedule: Optional[str] = Field(default=None, alias="workSchedule")

    pet_types_cared_for: Optional[str] = Field(default=None, alias="petTypesCaredFor")
    travel_frequency: Optional[str] = Field(default=None, alias="travelFrequency")
    time_commitment: Optional[str] = Field(default=None, alias="timeCommitment")
    outdoor_space: Optional[str] = Field(default=None, alias="outdoorSpace")
    pet_allergies: Optional[str] = Field(default=None, alias="petAllergies")
    pet_training: Optional[str] = Field(default=None, alias="petTraining")


class StatusUpdate(BaseModel):
    """
    Body of PUT /applications/{id}/status.

    status: 1 approve, 0 back to pending, -1 reject (checked by the engine)
    petId:  optional; when given it must match the application's own pet
    """

    model_config = ConfigDict(populate_by_name=True)

    status: Optional[int] = Field(default=None)
    pet_id: Optional[int] = Field(default=None, alias="petId")


class ApplicationResponse(BaseModel):
    id: int
    user_id: int
    pet_id: int
    adoption_reason: str
    living_situation: str
    experience: str
    household_members: str
    work_schedule: str
    pet_types_cared_for: Optional[str] = None
    travel_frequency: Optional[str] = None
    time_commitment: Optional[str] = None
    outdoor_space: Optional[str] = None
    pet_allergies: Optional[str] = None
    pet_training: Optional[str] = None
    status: int = Field(description="0 pending, 1 approved, -1 rejected")
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ApplicationListItem(ApplicationResponse):
    """Application joined with the applicant's contact fields and the pet's display fields."""

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None
    pet_name: Optional[str] = None
    species: Optional[str] = None
    gender: Optional[str] = None
    age: Optional[int] = None
    breed_name: Optional[str] = Field(
        default=None,
        description="Dog or cat breed name; null for other species or unknown breed",
    )


class ApplicationListResponse(BaseModel):
    applications: List[ApplicationListItem]
    total_count: int


class StatusChangeResponse(BaseModel):
    """Result of a status transition: the application plus the pet status it left behind."""

    application: ApplicationResponse
    pet_id: int
    pet_status: int
