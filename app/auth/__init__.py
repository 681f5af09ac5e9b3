# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# Provides JWT-based authentication using Supabase Auth, plus role checks
# against the CRM's public.users table.
#
# Usage:
#   from app.auth import require_roles, CRMUser, UserRole
#
#   @router.delete("/{lead_id}")
#   async def delete(user: CRMUser = Depends(require_roles(UserRole.ADMIN))):
#       ...
# =============================================================================

from app.auth.dependencies import (
    get_current_user,
    get_current_user_with_role,
    require_roles,
)
from app.auth.models import AuthUser, CRMUser, UserResponse, UserRole

__all__ = [
    "get_current_user",
    "get_current_user_with_role",
    "require_roles",
    "AuthUser",
    "CRMUser",
    "UserResponse",
    "UserRole",
]
