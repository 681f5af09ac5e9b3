# =============================================================================
# core/services/lead_service.py - Lead Business Logic
# =============================================================================
# Handles lead CRUD, favorites and change tracking.
# Separates HTTP concerns from database/business logic.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from app.exceptions import LeadNotFoundError
from core.models.lead import ActivityAction, LeadCreate, LeadStatus, LeadUpdate
from core.services.activity_service import ActivityService
from core.services.planning_service import PlanningService
from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid, utcnow_iso

logger = logging.getLogger(__name__)

# Child tables cleared before a lead is deleted (foreign keys)
LEAD_CHILD_TABLES = (
    "accounting_entries",
    "lead_payments",
    "lead_comments",
    "documents",
    "lead_favorites",
    "lead_activity_log",
)


class LeadService:
    """
    Service for lead management operations.

    Provides a clean interface between API routes and database.
    """

    @staticmethod
    def create_lead(data: LeadCreate) -> dict[str, Any]:
        """
        Create a lead from the public form.

        New leads always start in the "new" stage; the source defaults
        to "direct".

        Returns:
            Created lead dict
        """
        client = SupabaseClient.get_client()

        row = {
            "first_name": data.first_name,
            "last_name": data.last_name,
            "phone": data.phone,
            "email": data.email,
            "formation": data.formation.value if data.formation else None,
            "source": data.source or "direct",
            "status": LeadStatus.NEW.value,
        }

        try:
            response = client.table("leads").insert(row).execute()
            if response.data:
                lead = response.data[0]
                logger.info(f"Created lead: {lead['id']} (source: {row['source']})")
                return lead

            raise Exception("Insert returned no data")

        except Exception as e:
            logger.error(f"Failed to create lead: {e}")
            raise

    @staticmethod
    def get_lead(lead_id: str | UUID) -> dict[str, Any]:
        """
        Get a lead by ID.

        Raises:
            LeadNotFoundError: If lead doesn't exist
        """
        lead = SupabaseClient.fetch_lead(lead_id)
        if not lead:
            raise LeadNotFoundError(normalize_uuid(lead_id))
        return lead

    @staticmethod
    def list_leads(
        page: int = 1,
        page_size: int = 25,
        status: LeadStatus | None = None,
        closer_id: UUID | str | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        """
        List leads with pagination, newest first.

        Returns:
            Tuple of (leads list, total count)
        """
        client = SupabaseClient.get_client()

        query = client.table("leads").select("*", count="exact")
        if status:
            query = query.eq("status", status.value)
        if closer_id:
            query = query.eq("closer_id", normalize_uuid(closer_id))

        offset = (page - 1) * page_size
        query = query.order("created_at", desc=True).range(offset, offset + page_size - 1)

        try:
            response = query.execute()
            return response.data or [], response.count or 0
        except Exception as e:
            logger.error(f"Failed to list leads: {e}")
            raise

    @staticmethod
    def update_lead(
        lead_id: str | UUID,
        update: LeadUpdate,
        user_id: str | UUID | None = None,
    ) -> dict[str, Any]:
        """
        Apply a partial update and record each changed field in the history.

        Args:
            lead_id: The lead UUID
            update: Fields to change (unset fields are left alone)
            user_id: Who made the change (for the activity log)

        Returns:
            Updated lead dict

        Raises:
            LeadNotFoundError: If lead doesn't exist
        """
        lead = LeadService.get_lead(lead_id)
        lead_id_str = normalize_uuid(lead_id)

        changes = {
            key: value
            for key, value in update.changes().items()
            if lead.get(key) != value
        }
        if not changes:
            return lead

        now = utcnow_iso()
        client = SupabaseClient.get_client()

        try:
            response = (
                client.table("leads")
                .update({**changes, "updated_at": now, "last_action_at": now})
                .eq("id", lead_id_str)
                .execute()
            )
        except Exception as e:
            logger.error(f"Failed to update lead {lead_id_str}: {e}")
            raise

        for key, value in changes.items():
            if key == "status":
                action = ActivityAction.STATUS_CHANGED
            elif key == "closer_id":
                action = ActivityAction.CLOSER_ASSIGNED
            elif key == "comment":
                action = ActivityAction.COMMENT_ADDED
            else:
                action = ActivityAction.FIELD_UPDATED
            ActivityService.record(
                lead_id_str,
                action,
                user_id=user_id,
                field_name=key,
                old_value=lead.get(key),
                new_value=value,
            )

        logger.info(f"Updated lead {lead_id_str}: {', '.join(changes)}")
        return response.data[0] if response.data else {**lead, **changes}

    @staticmethod
    def delete_lead(lead_id: str | UUID) -> None:
        """
        Delete a lead and every row that references it.

        Sessions left without participants are deleted too.

        Raises:
            LeadNotFoundError: If lead doesn't exist
        """
        LeadService.get_lead(lead_id)
        lead_id_str = normalize_uuid(lead_id)
        client = SupabaseClient.get_client()

        PlanningService.remove_lead_from_sessions(lead_id_str)

        try:
            for table in LEAD_CHILD_TABLES:
                client.table(table).delete().eq("lead_id", lead_id_str).execute()
            client.table("leads").delete().eq("id", lead_id_str).execute()
        except Exception as e:
            logger.error(f"Failed to delete lead {lead_id_str}: {e}")
            raise

        logger.info(f"Deleted lead {lead_id_str}")

    # -------------------------------------------------------------------------
    # Favorites
    # -------------------------------------------------------------------------

    @staticmethod
    def is_favorite(lead_id: str | UUID, user_id: str | UUID) -> bool:
        client = SupabaseClient.get_client()
        response = (
            client.table("lead_favorites")
            .select("lead_id")
            .eq("user_id", normalize_uuid(user_id))
            .eq("lead_id", normalize_uuid(lead_id))
            .limit(1)
            .execute()
        )
        return bool(response.data)

    @staticmethod
    def toggle_favorite(lead_id: str | UUID, user_id: str | UUID) -> bool:
        """
        Star or unstar a lead for the current user.

        Returns:
            True if the lead is now a favorite
        """
        client = SupabaseClient.get_client()
        lead_id_str = normalize_uuid(lead_id)
        user_id_str = normalize_uuid(user_id)

        if LeadService.is_favorite(lead_id_str, user_id_str):
            (
                client.table("lead_favorites")
                .delete()
                .eq("user_id", user_id_str)
                .eq("lead_id", lead_id_str)
                .execute()
            )
            return False

        client.table("lead_favorites").insert(
            {"user_id": user_id_str, "lead_id": lead_id_str}
        ).execute()
        return True
