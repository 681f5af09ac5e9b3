# =============================================================================
# lib/utils.py - Shared Utilities
# =============================================================================
# Common utilities used across the application.
# =============================================================================

from datetime import date, datetime, timezone
from uuid import UUID
from zoneinfo import ZoneInfo


# =============================================================================
# UUID Utilities
# =============================================================================

def normalize_uuid(value: str | UUID) -> str:
    """
    Normalize a UUID to string format.

    Example:
        lead_id = normalize_uuid(uuid_obj)  # "550e8400-..."
        lead_id = normalize_uuid("550e8400-...")  # "550e8400-..."
    """
    return str(value) if isinstance(value, UUID) else value


# =============================================================================
# Time Utilities
# =============================================================================

def utcnow_iso() -> str:
    """Current UTC time as ISO 8601, for created_at/updated_at columns."""
    return datetime.now(timezone.utc).isoformat()


def today_in(tz_name: str) -> date:
    """Today's date in the business timezone (not the server's)."""
    return datetime.now(ZoneInfo(tz_name)).date()


def parse_timestamp(value: str | datetime | None) -> datetime | None:
    """
    Parse a Supabase timestamp ("2025-03-08T09:00:00Z" or "+00:00").

    Returns None for empty or unparseable values.
    """
    if value is None or isinstance(value, datetime):
        return value
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (ValueError, TypeError):
        return None
