"""
User Models
Known users and their login sessions

Usernames are unauthenticated labels; the login session is an expiry gate,
not a security boundary.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class User(BaseModel):
    name: str = Field(..., min_length=1, description="Unique user name")
    lastUsed: datetime = Field(..., description="Last login time")


class LoginSession(BaseModel):
    username: str
    loginTime: datetime
    expiresAt: datetime


class UserNameRequest(BaseModel):
    name: Optional[str] = Field(None, description="User name")


class UserResponse(BaseModel):
    success: bool = True
    user: User


class LoginResponse(BaseModel):
    success: bool = True
    user: User
    session: LoginSession


class SessionCheckResponse(BaseModel):
    valid: bool
