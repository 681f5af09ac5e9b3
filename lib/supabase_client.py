# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a typed wrapper for Supabase database operations.
# It implements the singleton pattern to reuse a single client connection
# and provides lookup helpers for the rows services read most:
# - Leads
# - Accounting entries
# - Planning sessions
# - User profiles (role lookup)
#
# Lookups return None when the row does not exist and raise
# SupabaseClientError for any other failure.
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   lead = SupabaseClient.fetch_lead(lead_id)
# =============================================================================

from __future__ import annotations

import logging
from typing import Any
from uuid import UUID

from supabase import create_client, Client

from app.config import settings

# Set up logging for this module
logger = logging.getLogger(__name__)

# PostgREST code returned by .single() when no row matches
NO_ROWS_CODE = "PGRST116"


class SupabaseClientError(Exception):
    """
    Error during Supabase operations.

    Provides actionable error messages: tells HOW to fix, not just WHAT failed.
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


class SupabaseClient:
    """
    Typed wrapper for Supabase database operations.

    Implements singleton pattern - one client instance is shared across
    the application. All methods are class methods for easy access without
    instantiation.

    Example:
        lead = SupabaseClient.fetch_lead("550e8400-...")
        if lead and lead.get("price_fixed"):
            ...
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton Supabase client.

        Uses service_role key which bypasses Row Level Security (RLS).
        This is appropriate for server-side operations.

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                )
        return cls._instance

    @classmethod
    def _normalize_uuid(cls, uuid_value: str | UUID) -> str:
        """Convert UUID to string for queries."""
        return str(uuid_value) if isinstance(uuid_value, UUID) else uuid_value

    @classmethod
    def _fetch_one(
        cls,
        table: str,
        row_id: str | UUID,
        columns: str = "*",
        code: str = "FETCH_FAILED",
    ) -> dict[str, Any] | None:
        """
        Fetch a single row by primary key.

        Returns:
            Row dict, or None if no row has this id

        Raises:
            SupabaseClientError: If the query fails for another reason
        """
        client = cls.get_client()
        row_id_str = cls._normalize_uuid(row_id)

        try:
            response = (
                client.table(table)
                .select(columns)
                .eq("id", row_id_str)
                .single()
                .execute()
            )
            return response.data

        except Exception as e:
            if NO_ROWS_CODE in str(e):
                return None
            raise SupabaseClientError(
                message=f"Failed to fetch from {table}: {e}",
                code=code,
                suggestion=f"Check that the {table} table is reachable and the id is a valid UUID",
                details={"table": table, "id": row_id_str}
            )

    # -------------------------------------------------------------------------
    # Leads
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_lead(
        cls,
        lead_id: str | UUID,
        columns: str = "*",
    ) -> dict[str, Any] | None:
        """
        Fetch a lead by ID.

        Args:
            lead_id: The lead UUID
            columns: PostgREST column list (default: all)

        Returns:
            Lead dict, or None if not found
        """
        return cls._fetch_one("leads", lead_id, columns, code="FETCH_LEAD_FAILED")

    # -------------------------------------------------------------------------
    # Accounting
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_accounting_entry(cls, entry_id: str | UUID) -> dict[str, Any] | None:
        """
        Fetch an accounting entry by ID.

        Returns:
            Entry dict with lead_id, entry_type, amount, remaining_amount,
            commission_closer, commission_formateur; None if not found
        """
        return cls._fetch_one(
            "accounting_entries",
            entry_id,
            "id, lead_id, entry_type, amount, remaining_amount, commission_closer, commission_formateur",
            code="FETCH_ENTRY_FAILED",
        )

    @classmethod
    def fetch_lead_payments(cls, lead_id: str | UUID) -> list[dict[str, Any]]:
        """All payments recorded for a lead (amount, payment_type)."""
        client = cls.get_client()
        lead_id_str = cls._normalize_uuid(lead_id)

        try:
            response = (
                client.table("lead_payments")
                .select("id, amount, payment_type")
                .eq("lead_id", lead_id_str)
                .execute()
            )
            return response.data or []

        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to fetch lead payments: {e}",
                code="FETCH_PAYMENTS_FAILED",
                details={"lead_id": lead_id_str}
            )

    # -------------------------------------------------------------------------
    # Planning
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_planning(
        cls,
        planning_id: str | UUID,
        columns: str = "*",
    ) -> dict[str, Any] | None:
        """Fetch a training session row by ID."""
        return cls._fetch_one("planning", planning_id, columns, code="FETCH_PLANNING_FAILED")

    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------

    @classmethod
    def fetch_user(cls, user_id: str | UUID) -> dict[str, Any] | None:
        """
        Fetch a CRM user profile (role, full_name) from public.users.

        Returns None if the auth user has no profile row yet.
        """
        return cls._fetch_one("users", user_id, "id, role, full_name, email", code="FETCH_USER_FAILED")
