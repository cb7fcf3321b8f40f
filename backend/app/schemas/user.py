"""
PetHaven Backend — Signup/Login Schemas
=========================================
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SignupRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    first_name: str = Field(min_length=1, max_length=100, alias="firstName")
    last_name: str = Field(min_length=1, max_length=100, alias="lastName")
    phone_number: Optional[str] = Field(default=None, max_length=30, alias="phoneNumber")
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(min_length=8, max_length=72)


class LoginRequest(BaseModel):
    email: str
    password: str


class UserSummary(BaseModel):
    id: int
    email: str

    model_config = ConfigDict(from_attributes=True)


class UserProfile(UserSummary):
    first_name: str
    last_name: str
    phone_number: Optional[str] = None


class SignupResponse(BaseModel):
    message: str = "User created successfully"
    user: UserSummary


class LoginResponse(BaseModel):
    token: str
    user: UserSummary
