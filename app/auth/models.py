# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data.
# =============================================================================

from enum import Enum
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, field_validator


class UserRole(str, Enum):
    """
    CRM roles, stored in public.users.role.

    - admin: everything, including deletes and trainer payments
    - closer: works the leads assigned to them
    - formateur: trainer, sees their own sessions
    """
    ADMIN = "admin"
    CLOSER = "closer"
    FORMATEUR = "formateur"


class AuthUser(BaseModel):
    """
    Authenticated user extracted from Supabase JWT.

    This is the minimal user info available from the token itself,
    without querying the database.
    """
    model_config = ConfigDict(frozen=True)

    id: UUID
    email: Optional[str] = None


class CRMUser(AuthUser):
    """Authenticated user with the role and name from public.users."""
    role: UserRole = UserRole.ADMIN
    full_name: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN


class UserResponse(BaseModel):
    """Profile returned by /auth/me."""
    id: UUID
    email: Optional[str] = None
    full_name: Optional[str] = None
    role: UserRole = UserRole.ADMIN


# =============================================================================
# Account Management (admin)
# =============================================================================

MIN_PASSWORD_LENGTH = 6


def _normalize_email(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    email = value.strip().lower()
    if "@" not in email:
        raise ValueError("A valid email is required")
    return email


class UserCreate(BaseModel):
    """
    New CRM account, created by an admin.

    The account is confirmed immediately; the admin hands over the password.
    """
    email: str
    password: str
    full_name: Optional[str] = None
    role: UserRole = UserRole.CLOSER

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return _normalize_email(value)

    @field_validator("password")
    @classmethod
    def check_password(cls, value: str) -> str:
        value = value.strip()
        if len(value) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        return value

    @field_validator("full_name")
    @classmethod
    def blank_name_is_none(cls, value: Optional[str]) -> Optional[str]:
        return (value or "").strip() or None


class UserUpdate(BaseModel):
    """
    Changes to an existing account.

    Omitted fields are left alone; an empty password keeps the current one.
    """
    email: Optional[str] = None
    full_name: Optional[str] = None
    password: Optional[str] = None
    role: Optional[UserRole] = None

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: Optional[str]) -> Optional[str]:
        return _normalize_email(value)

    @field_validator("full_name")
    @classmethod
    def blank_name_is_none(cls, value: Optional[str]) -> Optional[str]:
        return (value or "").strip() or None

    @field_validator("password")
    @classmethod
    def check_password(cls, value: Optional[str]) -> Optional[str]:
        value = (value or "").strip()
        if value and len(value) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        return value or None


class UserProfile(BaseModel):
    """Row of public.users as shown in the admin screens."""
    id: UUID
    email: Optional[str] = None
    full_name: Optional[str] = None
    role: Optional[str] = None
