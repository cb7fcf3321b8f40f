"""
PetHaven Backend — Signup/Login Route Handlers
================================================

Endpoints:
    POST /signup   register (password stored as bcrypt hash)
    POST /login    returns a JWT valid for JWT_EXPIRES_MINUTES
    GET  /me       profile of the bearer of the token
"""

from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.database import get_db_session
from app.exceptions import AuthenticationError
from app.schemas.common import ErrorResponse
from app.schemas.user import LoginRequest, LoginResponse, SignupRequest, SignupResponse, UserProfile
from app.services.user_service import decode_access_token, user_service

router = APIRouter(tags=["Auth"])

# auto_error=False: a missing header becomes our 401 payload instead of FastAPI's 403
bearer_scheme = HTTPBearer(auto_error=False)


async def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> int:
    """Dependency: user id from a valid `Authorization: Bearer <jwt>` header."""
    if credentials is None:
        raise AuthenticationError(message="Missing bearer token")
    payload = decode_access_token(credentials.credentials)
    return int(payload["id"])


@router.post(
    "/signup",
    response_model=SignupResponse,
    responses={409: {"description": "User already exists", "model": ErrorResponse}},
    summary="Register a new user",
)
async def signup(payload: SignupRequest, db: AsyncSession = Depends(get_db_session)) -> SignupResponse:
    return await user_service.signup(db, payload)


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={401: {"description": "Invalid email or password", "model": ErrorResponse}},
    summary="Log in and receive a token",
)
async def login(payload: LoginRequest, db: AsyncSession = Depends(get_db_session)) -> LoginResponse:
    return await user_service.login(db, payload.email, payload.password)


@router.get(
    "/me",
    response_model=UserProfile,
    responses={401: {"description": "Missing or invalid token", "model": ErrorResponse}},
    summary="Current user's profile",
)
async def me(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db_session),
) -> UserProfile:
    return await user_service.get_profile(db, user_id)
