"""
PetHaven Backend — Adoption Application Route Handlers
========================================================

What:  HTTP surface of the adoption workflow.
How:   Thin handlers: parse the request, call ApplicationService or the
       status transition engine, return the schema. Errors are raised as
       PetHavenError subclasses and formatted by the global handlers.

Endpoints:
    POST   /application                  create (201)
    GET    /applications?id=<userId>     enriched list, optionally per user
    GET    /applications/{id}            single application
    PUT    /applications/{id}/status     approve / reject / back to pending
    DELETE /applications/{id}            remove (pet status untouched)
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.schemas.application import (
    ApplicationCreate,
    ApplicationListResponse,
    ApplicationResponse,
    StatusChangeResponse,
    StatusUpdate,
)
from app.schemas.common import ErrorResponse, MessageResponse
from app.services.application_service import application_service
from app.services.status_transition_service import status_transition_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Applications"])


@router.post(
    "/application",
    status_code=201,
    response_model=ApplicationResponse,
    responses={
        400: {"description": "Missing required field", "model": ErrorResponse},
        500: {"description": "Storage failure", "model": ErrorResponse},
    },
    summary="Submit an adoption application",
)
async def create_application(
    payload: ApplicationCreate,
    db: AsyncSession = Depends(get_db_session),
) -> ApplicationResponse:
    return await application_service.create_application(db, payload)


@router.get(
    "/applications",
    response_model=ApplicationListResponse,
    responses={500: {"description": "Storage failure", "model": ErrorResponse}},
    summary="List applications with applicant and pet details",
    description=(
        "Returns every application, or only those of one user when `id` is given. "
        "An empty list is a normal 200 response."
    ),
)
async def list_applications(
    user_id: Optional[int] = Query(default=None, alias="id", description="Filter by user id"),
    db: AsyncSession = Depends(get_db_session),
) -> ApplicationListResponse:
    return await application_service.list_applications(db, user_id=user_id)


@router.get(
    "/applications/{application_id}",
    response_model=ApplicationResponse,
    responses={404: {"description": "Application not found", "model": ErrorResponse}},
    summary="Get one application",
)
async def get_application(
    application_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> ApplicationResponse:
    return await application_service.get_application(db, application_id)


@router.put(
    "/applications/{application_id}/status",
    response_model=StatusChangeResponse,
    responses={
        400: {"description": "Invalid status or petId mismatch", "model": ErrorResponse},
        404: {"description": "Application not found", "model": ErrorResponse},
        409: {"description": "Pet already reserved; nothing changed", "model": ErrorResponse},
        503: {"description": "Database timed out", "model": ErrorResponse},
    },
    summary="Change an application's status",
    description=(
        "status 1 approves (pet becomes reserved), -1 rejects (pet becomes available), "
        "0 returns to pending (pet unchanged). The application and pet change together "
        "or not at all."
    ),
)
async def set_application_status(
    application_id: int,
    payload: StatusUpdate,
    db: AsyncSession = Depends(get_db_session),
) -> StatusChangeResponse:
    return await status_transition_service.set_application_status(
        db,
        application_id=application_id,
        target_status=payload.status,
        pet_id=payload.pet_id,
    )


@router.delete(
    "/applications/{application_id}",
    response_model=MessageResponse,
    responses={404: {"description": "Application not found", "model": ErrorResponse}},
    summary="Delete an application",
)
async def delete_application(
    application_id: int,
    db: AsyncSession = Depends(get_db_session),
) -> MessageResponse:
    await application_service.delete_application(db, application_id)
    return MessageResponse(message="Application deleted", id=application_id)
