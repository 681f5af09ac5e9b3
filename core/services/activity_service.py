# =============================================================================
# core/services/activity_service.py - Lead Activity Log
# =============================================================================
# Records who did what on a lead (status changes, closer assignment, field
# edits, payments) in the lead_activity_log table.
#
# Recording is best-effort: a failed insert is logged and never breaks the
# request that triggered it.
# =============================================================================

import logging
from typing import Any
from uuid import UUID

from core.models.lead import ActivityAction
from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid

logger = logging.getLogger(__name__)

HISTORY_LIMIT = 50


def _as_text(value: Any) -> str | None:
    return None if value is None else str(value)


class ActivityService:
    """Read and append entries of a lead's history."""

    @staticmethod
    def record(
        lead_id: str | UUID,
        action: ActivityAction,
        user_id: str | UUID | None = None,
        field_name: str | None = None,
        old_value: Any = None,
        new_value: Any = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """
        Append an action to the lead's history.

        Old/new values are stored as text so any column can be tracked.
        """
        row = {
            "lead_id": normalize_uuid(lead_id),
            "user_id": normalize_uuid(user_id) if user_id else None,
            "action_type": ActivityAction(action).value,
            "field_name": field_name,
            "old_value": _as_text(old_value),
            "new_value": _as_text(new_value),
            "details": details,
        }

        try:
            client = SupabaseClient.get_client()
            client.table("lead_activity_log").insert(row).execute()
            logger.debug(f"Recorded {row['action_type']} on lead {row['lead_id']}")
        except Exception as e:
            logger.error(f"Failed to record activity on lead {row['lead_id']}: {e}")

    @staticmethod
    def list_for_lead(
        lead_id: str | UUID,
        limit: int = HISTORY_LIMIT,
    ) -> list[dict[str, Any]]:
        """Most recent actions first."""
        client = SupabaseClient.get_client()

        response = (
            client.table("lead_activity_log")
            .select("id, action_type, field_name, old_value, new_value, created_at, user_id")
            .eq("lead_id", normalize_uuid(lead_id))
            .order("created_at", desc=True)
            .limit(limit)
            .execute()
        )
        return response.data or []
