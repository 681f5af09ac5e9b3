# =============================================================================
# app/routers/users.py - Account Administration
# =============================================================================
# Admin-only screens to list, create and edit CRM accounts (closers,
# trainers and admins).
# =============================================================================

from uuid import UUID

from fastapi import APIRouter, Depends, Query, status

from app.auth import CRMUser, UserRole, require_roles
from app.auth.models import UserCreate, UserProfile, UserUpdate
from core.services.user_service import UserService

router = APIRouter()


@router.get("", response_model=list[UserProfile])
async def list_users(
    role: UserRole | None = Query(None, description="Only accounts with this role"),
    user: CRMUser = Depends(require_roles(UserRole.ADMIN)),
):
    return UserService.list_users(role)


@router.post("", response_model=UserProfile, status_code=status.HTTP_201_CREATED)
async def create_user(
    request: UserCreate,
    user: CRMUser = Depends(require_roles(UserRole.ADMIN)),
):
    """
    Create an account. The role defaults to closer.

    409 when the email is already used.
    """
    return UserService.create_user(request)


@router.patch("/{user_id}", response_model=UserProfile)
async def update_user(
    user_id: UUID,
    request: UserUpdate,
    user: CRMUser = Depends(require_roles(UserRole.ADMIN)),
):
    """Change email, name, password or role of an account."""
    return UserService.update_user(user_id, request)
