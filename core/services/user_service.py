# =============================================================================
# core/services/user_service.py - CRM Account Management
# =============================================================================
# Admins create and edit the accounts of closers, trainers and other admins,
# including their role.
# An account lives in two places:
# - Supabase Auth (email, password, user_metadata.full_name)
# - public.users (email, full_name, role) used for role checks
#
# Auth is written first; if the public.users write fails on creation the
# auth account is deleted again so the email can be reused.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from app.auth.models import UserCreate, UserRole, UserUpdate
from app.exceptions import UserAccountError, UserAlreadyExistsError, UserNotFoundError
from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid, utcnow_iso

logger = logging.getLogger(__name__)

USER_COLUMNS = "id, email, full_name, role"

# Fragments of Supabase Auth messages meaning the email is taken
_DUPLICATE_MARKERS = ("already registered", "already exists", "already been registered")


def _auth_error(e: Exception, email: str | None) -> Exception:
    message = str(e)
    if any(marker in message.lower() for marker in _DUPLICATE_MARKERS):
        return UserAlreadyExistsError(email)
    return UserAccountError(message)


class UserService:
    """Service for CRM accounts (Supabase Auth + public.users)."""

    @staticmethod
    def list_users(role: UserRole | None = None) -> list[dict[str, Any]]:
        """Accounts by name, optionally only one role."""
        client = SupabaseClient.get_client()
        query = client.table("users").select(USER_COLUMNS).order("full_name")
        if role:
            query = query.eq("role", UserRole(role).value)
        return query.execute().data or []

    @staticmethod
    def create_user(data: UserCreate) -> dict[str, Any]:
        """
        Create a confirmed auth account and its public.users row.

        Returns:
            {id, email, full_name, role}

        Raises:
            UserAlreadyExistsError: Email already used by another account
            UserAccountError: Supabase Auth refused the account
        """
        client = SupabaseClient.get_client()

        try:
            response = client.auth.admin.create_user({
                "email": data.email,
                "password": data.password,
                "email_confirm": True,
                "user_metadata": {"full_name": data.full_name or data.email},
            })
        except Exception as e:
            logger.warning(f"Auth refused account for {data.email}: {e}")
            raise _auth_error(e, data.email)

        user_id = str(response.user.id)
        profile = {
            "id": user_id,
            "email": data.email,
            "full_name": data.full_name,
            "role": data.role.value,
        }

        try:
            client.table("users").upsert(
                {**profile, "updated_at": utcnow_iso()},
                on_conflict="id",
            ).execute()
        except Exception as e:
            logger.error(f"Failed to write profile of {user_id}, deleting auth account: {e}")
            client.auth.admin.delete_user(user_id)
            raise

        logger.info(f"Created {data.role.value} account {user_id}")
        return profile

    @staticmethod
    def update_user(user_id: str | UUID, update: UserUpdate) -> dict[str, Any]:
        """
        Change an account's email, name and/or password.

        Returns:
            The updated public.users row

        Raises:
            UserNotFoundError: No public.users row with this id
            UserAlreadyExistsError: New email already used by another account
            UserAccountError: Supabase Auth refused the change
        """
        user_id_str = normalize_uuid(user_id)
        if not SupabaseClient.fetch_user(user_id_str):
            raise UserNotFoundError(user_id_str)

        fields = update.model_dump(exclude_unset=True)
        auth_changes: dict[str, Any] = {}
        if update.email:
            auth_changes["email"] = update.email
        if update.password:
            auth_changes["password"] = update.password
        if "full_name" in fields:
            auth_changes["user_metadata"] = {"full_name": update.full_name}

        client = SupabaseClient.get_client()
        if auth_changes:
            try:
                client.auth.admin.update_user_by_id(user_id_str, auth_changes)
            except Exception as e:
                logger.warning(f"Auth refused update of {user_id_str}: {e}")
                raise _auth_error(e, update.email)

        profile_changes: dict[str, Any] = {}
        if update.email:
            profile_changes["email"] = update.email
        if "full_name" in fields:
            profile_changes["full_name"] = update.full_name
        if update.role:
            profile_changes["role"] = update.role.value
        client.table("users").update(
            {**profile_changes, "updated_at": utcnow_iso()}
        ).eq("id", user_id_str).execute()

        logger.info(f"Updated account {user_id_str}: {sorted({*auth_changes, *profile_changes})}")
        return SupabaseClient.fetch_user(user_id_str) or {"id": user_id_str, **profile_changes}
