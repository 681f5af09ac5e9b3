# =============================================================================
# core/services/report_cache.py - Generated Report Cache
# =============================================================================
# AI reports are slow and cost quota, so each generated report is kept for
# an hour (REPORT_CACHE_TTL_SECONDS) and served again until it expires.
#
# Implementations:
# - SupabaseReportCache: rows in ai_report_cache, one per (type, key)
# - InMemoryReportCache: process-local dict, for tests and local runs
#
# The report service receives a cache instance; nothing here is global.
# =============================================================================

from __future__ import annotations

import logging
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Protocol

from lib.supabase_client import SupabaseClient
from lib.utils import parse_timestamp, utcnow_iso

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 3600


class ReportCache(Protocol):
    """Storage for generated report text."""

    def get(self, report_type: str, key: str = "") -> str | None:
        """Cached content, or None when missing or expired."""
        ...

    def set(
        self,
        report_type: str,
        content: str,
        key: str = "",
        meta: dict[str, Any] | None = None,
    ) -> None:
        ...


class SupabaseReportCache:
    """
    Report cache backed by the ai_report_cache table.

    A cache that cannot be read or written behaves as empty: the report is
    generated again instead of failing the request.
    """

    TABLE = "ai_report_cache"

    def __init__(self, ttl_seconds: int = DEFAULT_TTL_SECONDS):
        self.ttl = timedelta(seconds=ttl_seconds)

    def get(self, report_type: str, key: str = "") -> str | None:
        client = SupabaseClient.get_client()
        try:
            response = (
                client.table(self.TABLE)
                .select("content, created_at")
                .eq("report_type", report_type)
                .eq("report_key", key)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.warning(f"Report cache read failed for {report_type}: {e}")
            return None

        if not response.data:
            return None

        row = response.data[0]
        created_at = parse_timestamp(row.get("created_at"))
        if created_at is None:
            return None
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)

        if datetime.now(timezone.utc) - created_at > self.ttl:
            logger.debug(f"Report cache expired for {report_type}")
            return None
        return row.get("content")

    def set(
        self,
        report_type: str,
        content: str,
        key: str = "",
        meta: dict[str, Any] | None = None,
    ) -> None:
        client = SupabaseClient.get_client()
        try:
            client.table(self.TABLE).upsert(
                {
                    "report_type": report_type,
                    "report_key": key,
                    "content": content,
                    "meta": meta,
                    "created_at": utcnow_iso(),
                },
                on_conflict="report_type,report_key",
            ).execute()
            logger.info(f"Cached {report_type} report")
        except Exception as e:
            logger.warning(f"Report cache write failed for {report_type}: {e}")


class InMemoryReportCache:
    """Process-local report cache."""

    def __init__(
        self,
        ttl_seconds: int = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[tuple[str, str], tuple[float, str]] = {}

    def get(self, report_type: str, key: str = "") -> str | None:
        entry = self._entries.get((report_type, key))
        if entry is None:
            return None
        stored_at, content = entry
        if self._clock() - stored_at > self.ttl_seconds:
            del self._entries[(report_type, key)]
            return None
        return content

    def set(
        self,
        report_type: str,
        content: str,
        key: str = "",
        meta: dict[str, Any] | None = None,
    ) -> None:
        self._entries[(report_type, key)] = (self._clock(), content)

    def clear(self) -> None:
        self._entries.clear()
