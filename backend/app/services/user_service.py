"""
PetHaven Backend — User Service (Signup, Login, Tokens)
=========================================================

What:  Registers users, verifies credentials and issues/decodes JWTs.
How:   bcrypt for password hashes, PyJWT (HS256 by default) for tokens.
       Hashing is CPU-bound, so it runs in a worker thread to keep the
       event loop responsive.

Token payload:
    {"id": <user id>, "email": <email>, "iat": ..., "exp": iat + jwt_expires_minutes}
"""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import bcrypt
import jwt
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import bounded
from app.exceptions import AuthenticationError, ConflictError, NotFoundError, PersistenceError
from app.models.user import User
from app.schemas.user import LoginResponse, SignupRequest, SignupResponse, UserProfile, UserSummary

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def create_access_token(user_id: int, email: str) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "id": user_id,
        "email": email,
        "iat": now,
        "exp": now + timedelta(minutes=settings.jwt_expires_minutes),
    }
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Raises:
        AuthenticationError: expired, tampered or malformed token
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise AuthenticationError(message="Token has expired. Please log in again.")
    except jwt.InvalidTokenError:
        raise AuthenticationError(message="Invalid authentication token.")
    if "id" not in payload:
        raise AuthenticationError(message="Invalid authentication token.")
    return payload


class UserService:

    async def _find_by_email(self, db: AsyncSession, email: str):
        result = await bounded(
            db.execute(select(User).where(func.lower(User.email) == email.lower())),
            "users.find_by_email",
        )
        return result.scalar_one_or_none()

    async def signup(self, db: AsyncSession, payload: SignupRequest) -> SignupResponse:
        """
        Raises:
            ConflictError:    email already registered (→ 409)
            PersistenceError: insert failed (→ 500)
        """
        email = payload.email.strip().lower()
        if await self._find_by_email(db, email) is not None:
            raise ConflictError(message="User already exists", context={"email": email})

        hashed = await asyncio.to_thread(hash_password, payload.password)
        user = User(
            first_name=payload.first_name.strip(),
            last_name=payload.last_name.strip(),
            phone_number=payload.phone_number,
            email=email,
            password=hashed,
        )
        try:
            db.add(user)
            await bounded(db.flush(), "users.insert")
        except IntegrityError:
            # Lost a race with a concurrent signup for the same email
            raise ConflictError(message="User already exists", context={"email": email})
        except SQLAlchemyError as e:
            logger.error("Database error registering user: %s", str(e), exc_info=True)
            raise PersistenceError(message="Registration failed. Please try again.")

        logger.info("User %s registered", user.id)
        return SignupResponse(user=UserSummary.model_validate(user))

    async def login(self, db: AsyncSession, email: str, password: str) -> LoginResponse:
        """
        Raises:
            AuthenticationError: unknown email or wrong password (→ 401).
                                 Both cases share one message.
        """
        user = await self._find_by_email(db, email.strip())
        if user is None or not await asyncio.to_thread(verify_password, password, user.password):
            logger.info("Failed login for %s", email)
            raise AuthenticationError(message="Invalid email or password")

        token = create_access_token(user.id, user.email)
        return LoginResponse(token=token, user=UserSummary.model_validate(user))

    async def get_profile(self, db: AsyncSession, user_id: int) -> UserProfile:
        result = await bounded(db.execute(select(User).where(User.id == user_id)), "users.read")
        user = result.scalar_one_or_none()
        if user is None:
            raise NotFoundError(resource="user", resource_id=user_id)
        return UserProfile.model_validate(user)


user_service = UserService()
