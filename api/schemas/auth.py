"""Authentication and admin profile schemas."""

from typing import Optional

from pydantic import EmailStr, Field

from api.schemas.common import CamelModel


class LoginBody(CamelModel):
    """Credentials for POST /auth/login."""

    email: EmailStr
    password: str = Field(min_length=6, description="Admin password")


class ChangePasswordBody(CamelModel):
    """Body for POST /auth/change-password."""

    current_password: str = Field(min_length=1, description="Current password")
    new_password: str = Field(min_length=6, description="New password")


class UpdateProfileBody(CamelModel):
    """Body for PUT /auth/profile; every field is optional."""

    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=6)
