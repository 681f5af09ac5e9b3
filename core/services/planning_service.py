# =============================================================================
# core/services/planning_service.py - Training Session Business Logic
# =============================================================================
# Creates, edits and lists training sessions, and keeps a lead's session in
# line with the training format/day/start date stored on the lead.
#
# Tables:
# - planning:      one row per session (start_date, end_date, specific_dates)
# - planning_lead: participants (planning_id, lead_id)
#
# Date arithmetic lives in core.scheduling; this module only persists it.
# =============================================================================

import logging
from datetime import date
from typing import Any
from uuid import UUID
from zoneinfo import ZoneInfo

from app.config import settings
from app.exceptions import InvalidScheduleError, LeadNotFoundError, PlanningNotFoundError
from core.models.lead import PAYING_STATUSES
from core.models.planning import PlanningCreate, PlanningUpdate, TrainerSessionUpdate
from core.scheduling import (
    InvalidWeekday,
    SessionDates,
    TrainingFormat,
    Weekday,
    compute_session_dates,
    next_monday,
)
from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid, today_in

logger = logging.getLogger(__name__)

_SESSION_COLUMNS = "id, start_date, end_date, specific_dates, trainer_id, payment_status, payment_amount"


class PlanningService:
    """
    Service for training session operations.

    Provides a clean interface between API routes and database.
    """

    # -------------------------------------------------------------------------
    # Date Calculation
    # -------------------------------------------------------------------------

    @staticmethod
    def compute_dates(
        training_format: TrainingFormat | str,
        weekday: Weekday | str | None,
        anchor_date: date,
    ) -> SessionDates:
        """
        Compute session dates in the business timezone and hours.

        Raises:
            InvalidScheduleError: Unknown format, or monthly session on a
                day other than Saturday/Sunday
        """
        try:
            return compute_session_dates(
                training_format,
                weekday,
                anchor_date,
                tz=ZoneInfo(settings.TIMEZONE),
                start_hour=settings.SESSION_START_HOUR,
                end_hour=settings.SESSION_END_HOUR,
            )
        except InvalidWeekday as e:
            raise InvalidScheduleError(
                str(e),
                details={"format": str(training_format), "weekday": weekday},
            )
        except ValueError as e:
            raise InvalidScheduleError(
                f"Unknown training format: {training_format!r}",
                details={"error": str(e)},
            )

    @staticmethod
    def dates_for_lead(lead: dict[str, Any]) -> SessionDates | None:
        """
        Session dates from the training info stored on a lead.

        Returns None when the format or the start date is missing.
        """
        training_format = lead.get("formation_format")
        start = lead.get("formation_start_date")
        if not training_format or not start:
            return None

        anchor = date.fromisoformat(str(start)[:10])
        return PlanningService.compute_dates(training_format, lead.get("formation_day"), anchor)

    # -------------------------------------------------------------------------
    # Listing
    # -------------------------------------------------------------------------

    @staticmethod
    def list_sessions(trainer_id: str | UUID | None = None) -> list[dict[str, Any]]:
        """
        List sessions in chronological order, each with its participants.

        Args:
            trainer_id: Only sessions taught by this trainer

        Returns:
            Session dicts with a `participants` list of
            {id, first_name, last_name}
        """
        client = SupabaseClient.get_client()

        query = client.table("planning").select(_SESSION_COLUMNS).order("start_date")
        if trainer_id:
            query = query.eq("trainer_id", normalize_uuid(trainer_id))

        rows = query.execute().data or []
        return PlanningService._with_participants(rows)

    @staticmethod
    def get_session(planning_id: str | UUID) -> dict[str, Any]:
        """
        One session with its participants, shaped like `list_sessions` rows.

        Raises:
            PlanningNotFoundError: If session doesn't exist
        """
        planning_id_str = normalize_uuid(planning_id)
        row = SupabaseClient.fetch_planning(planning_id_str, _SESSION_COLUMNS)
        if not row:
            raise PlanningNotFoundError(planning_id_str)
        return PlanningService._with_participants([row])[0]

    @staticmethod
    def _with_participants(rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
        if not rows:
            return []

        client = SupabaseClient.get_client()
        planning_ids = [row["id"] for row in rows]
        links = (
            client.table("planning_lead")
            .select("planning_id, lead_id")
            .in_("planning_id", planning_ids)
            .execute()
            .data
            or []
        )

        lead_ids = sorted({link["lead_id"] for link in links})
        leads_by_id: dict[str, dict[str, Any]] = {}
        if lead_ids:
            leads = (
                client.table("leads")
                .select("id, first_name, last_name")
                .in_("id", lead_ids)
                .execute()
                .data
                or []
            )
            leads_by_id = {lead["id"]: lead for lead in leads}

        participants: dict[str, list[dict[str, Any]]] = {}
        for link in links:
            lead = leads_by_id.get(link["lead_id"])
            if lead:
                participants.setdefault(link["planning_id"], []).append(lead)

        return [
            {
                **row,
                "payment_status": row.get("payment_status") or "UNPAID",
                "payment_amount": (
                    row["payment_amount"]
                    if row.get("payment_amount") is not None
                    else settings.DEFAULT_TRAINER_FEE
                ),
                "participants": participants.get(row["id"], []),
            }
            for row in rows
        ]

    @staticmethod
    def list_trainers() -> list[dict[str, Any]]:
        """Users with the formateur role, by name."""
        client = SupabaseClient.get_client()
        response = (
            client.table("users")
            .select("id, full_name, email")
            .eq("role", "formateur")
            .order("full_name")
            .execute()
        )
        return response.data or []

    # -------------------------------------------------------------------------
    # Create / Update / Delete
    # -------------------------------------------------------------------------

    @staticmethod
    def _insert_session(
        lead_ids: list[str],
        row: dict[str, Any],
    ) -> dict[str, Any]:
        """
        Insert a planning row and link its participants.

        If the participants cannot be linked the session is removed again,
        so no session is left without participants.
        """
        client = SupabaseClient.get_client()

        response = client.table("planning").insert(row).execute()
        if not response.data:
            raise Exception("Insert returned no data")
        planning = response.data[0]

        try:
            client.table("planning_lead").insert(
                [{"planning_id": planning["id"], "lead_id": lead_id} for lead_id in lead_ids]
            ).execute()
        except Exception as e:
            logger.error(f"Failed to link leads to session {planning['id']}: {e}")
            client.table("planning").delete().eq("id", planning["id"]).execute()
            raise

        logger.info(f"Created session {planning['id']} for {len(lead_ids)} lead(s)")
        return planning

    @staticmethod
    def create_session(data: PlanningCreate) -> dict[str, Any]:
        """
        Create a session shared by one or more leads.

        Raises:
            LeadNotFoundError: If any lead doesn't exist
        """
        lead_ids = [normalize_uuid(lead_id) for lead_id in data.lead_ids]
        for lead_id in lead_ids:
            if not SupabaseClient.fetch_lead(lead_id, "id"):
                raise LeadNotFoundError(lead_id)

        row: dict[str, Any] = {
            "start_date": data.start_date.isoformat(),
            "end_date": data.end_date.isoformat(),
        }
        if data.specific_dates:
            row["specific_dates"] = data.specific_dates

        return PlanningService._insert_session(lead_ids, row)

    @staticmethod
    def update_session(
        planning_id: str | UUID,
        update: PlanningUpdate,
    ) -> dict[str, Any]:
        """
        Change a session's dates and/or replace its participants.

        Raises:
            PlanningNotFoundError: If session doesn't exist
            LeadNotFoundError: If a new participant doesn't exist
        """
        planning_id_str = normalize_uuid(planning_id)
        if not SupabaseClient.fetch_planning(planning_id_str):
            raise PlanningNotFoundError(planning_id_str)

        client = SupabaseClient.get_client()

        changes = update.date_changes()
        if changes:
            client.table("planning").update(changes).eq("id", planning_id_str).execute()

        if update.lead_ids is not None:
            lead_ids = [normalize_uuid(lead_id) for lead_id in update.lead_ids]
            for lead_id in lead_ids:
                if not SupabaseClient.fetch_lead(lead_id, "id"):
                    raise LeadNotFoundError(lead_id)

            client.table("planning_lead").delete().eq("planning_id", planning_id_str).execute()
            if lead_ids:
                client.table("planning_lead").insert(
                    [{"planning_id": planning_id_str, "lead_id": lead_id} for lead_id in lead_ids]
                ).execute()

        logger.info(f"Updated session {planning_id_str}")
        return SupabaseClient.fetch_planning(planning_id_str) or {"id": planning_id_str}

    @staticmethod
    def update_trainer_fields(
        planning_id: str | UUID,
        update: TrainerSessionUpdate,
    ) -> dict[str, Any]:
        """
        Assign the trainer and record what the session pays them.

        Returns:
            The session as `get_session` returns it

        Raises:
            PlanningNotFoundError: If session doesn't exist
        """
        planning_id_str = normalize_uuid(planning_id)
        if not SupabaseClient.fetch_planning(planning_id_str, "id"):
            raise PlanningNotFoundError(planning_id_str)

        changes = update.changes()
        if changes:
            client = SupabaseClient.get_client()
            client.table("planning").update(changes).eq("id", planning_id_str).execute()
            logger.info(f"Updated trainer fields of session {planning_id_str}: {sorted(changes)}")

        return PlanningService.get_session(planning_id_str)

    @staticmethod
    def delete_session(planning_id: str | UUID) -> None:
        """Delete a session and its participant links."""
        planning_id_str = normalize_uuid(planning_id)
        client = SupabaseClient.get_client()

        client.table("planning_lead").delete().eq("planning_id", planning_id_str).execute()
        client.table("planning").delete().eq("id", planning_id_str).execute()
        logger.info(f"Deleted session {planning_id_str}")

    # -------------------------------------------------------------------------
    # Lead Synchronisation
    # -------------------------------------------------------------------------

    @staticmethod
    def remove_lead_from_sessions(lead_id: str | UUID) -> int:
        """
        Unlink a lead from all its sessions.

        Sessions left without any participant are deleted.

        Returns:
            Number of sessions deleted
        """
        lead_id_str = normalize_uuid(lead_id)
        client = SupabaseClient.get_client()

        removed = (
            client.table("planning_lead")
            .delete()
            .eq("lead_id", lead_id_str)
            .execute()
            .data
            or []
        )
        affected = sorted({link["planning_id"] for link in removed})

        deleted = 0
        for planning_id in affected:
            remaining = (
                client.table("planning_lead")
                .select("lead_id")
                .eq("planning_id", planning_id)
                .limit(1)
                .execute()
                .data
            )
            if not remaining:
                client.table("planning").delete().eq("id", planning_id).execute()
                deleted += 1

        if deleted:
            logger.info(f"Deleted {deleted} empty session(s) after removing lead {lead_id_str}")
        return deleted

    @staticmethod
    def has_session(lead_id: str | UUID) -> bool:
        client = SupabaseClient.get_client()
        response = (
            client.table("planning_lead")
            .select("planning_id")
            .eq("lead_id", normalize_uuid(lead_id))
            .limit(1)
            .execute()
        )
        return bool(response.data)

    @staticmethod
    def create_session_for_lead(lead: dict[str, Any]) -> dict[str, Any] | None:
        """
        Create a session from the training info stored on a lead.

        Returns:
            The planning row, or None when the lead's training info is
            incomplete
        """
        dates = PlanningService.dates_for_lead(lead)
        if dates is None:
            return None
        return PlanningService._insert_session([normalize_uuid(lead["id"])], dates.as_iso())

    @staticmethod
    def ensure_session_for_lead(lead: dict[str, Any]) -> dict[str, Any] | None:
        """Create the lead's session unless it already has one."""
        if PlanningService.has_session(lead["id"]):
            return None
        return PlanningService.create_session_for_lead(lead)

    @staticmethod
    def sync_lead(lead_id: str | UUID) -> dict[str, Any]:
        """
        Rebuild a lead's session from its training info.

        1. Remove the lead from every session (empty sessions are deleted)
        2. A paying lead without training info defaults to a weekly
           session starting next Monday; the default is saved on the lead
        3. Create a new session when the training info is complete

        Returns:
            {"message": ..., "planning_id": ... or None}

        Raises:
            LeadNotFoundError: If lead doesn't exist
            InvalidScheduleError: If the stored format/day are inconsistent
        """
        lead_id_str = normalize_uuid(lead_id)
        lead = SupabaseClient.fetch_lead(
            lead_id_str,
            "id, status, formation_format, formation_day, formation_start_date",
        )
        if not lead:
            raise LeadNotFoundError(lead_id_str)

        PlanningService.remove_lead_from_sessions(lead_id_str)

        is_paying = lead.get("status") in {status.value for status in PAYING_STATUSES}
        incomplete = not lead.get("formation_format") or not lead.get("formation_start_date")

        if incomplete and is_paying:
            defaults = {
                "formation_format": TrainingFormat.WEEKLY.value,
                "formation_day": Weekday.MON.value,
                "formation_start_date": next_monday(today_in(settings.TIMEZONE)).isoformat(),
            }
            client = SupabaseClient.get_client()
            client.table("leads").update(defaults).eq("id", lead_id_str).execute()
            lead = {**lead, **defaults}
            logger.info(f"Defaulted lead {lead_id_str} to a weekly session on {defaults['formation_start_date']}")

        planning = PlanningService.create_session_for_lead(lead)
        if planning is None:
            return {
                "message": "Lead removed from planning (training info incomplete)",
                "planning_id": None,
            }

        return {
            "message": "Lead planning synchronised",
            "planning_id": planning["id"],
        }
