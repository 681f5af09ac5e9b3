# =============================================================================
# core/services/report_service.py - Dashboard Reports
# =============================================================================
# Aggregates accounting entries and leads into the figures shown on the
# dashboard, then asks the report writer to comment on them.
#
# Flow for GET /reports/{type}:
# 1. Serve the cached report unless a refresh is requested
# 2. Load rows from Supabase and aggregate them with pandas
# 3. Write the report (OpenAI) and cache it
#
# The metric builders (revenue_metrics, pipeline_metrics) are pure functions
# of the loaded rows and a reference time, so they are tested without I/O.
# =============================================================================

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Protocol
from zoneinfo import ZoneInfo

import pandas as pd

from app.config import settings
from core.models.lead import LeadStatus, PAYING_STATUSES
from core.models.report import (
    PipelineMetrics,
    ReportResponse,
    ReportType,
    RevenueMetrics,
)
from core.services.report_cache import ReportCache
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)

# Open leads untouched for this long count as stale
STALE_AFTER = timedelta(days=7)

ENTRY_COLUMNS = ["amount", "lead_id", "created_at"]
LEAD_COLUMNS = [
    "id",
    "status",
    "source",
    "formation",
    "closer_id",
    "created_at",
    "updated_at",
    "last_action_at",
]


class ReportTextWriter(Protocol):
    def write(self, report_type: ReportType | str, context: str) -> str:
        ...


# =============================================================================
# Helpers
# =============================================================================

def _frame(rows: list[dict[str, Any]], columns: list[str]) -> pd.DataFrame:
    """DataFrame with exactly these columns; timestamps parsed as UTC."""
    df = pd.DataFrame(rows or [], columns=columns)
    for column in columns:
        if column.endswith("_at"):
            df[column] = pd.to_datetime(df[column], utc=True, errors="coerce", format="ISO8601")
    return df


def _window(series: pd.Series, start: datetime, end: datetime | None = None) -> pd.Series:
    """Boolean mask for start <= value < end (no upper bound when end is None)."""
    mask = series >= pd.Timestamp(start)
    if end is not None:
        mask &= series < pd.Timestamp(end)
    return mask


def _growth(current: float, previous: float) -> float | None:
    """Percent change; None when there is nothing to compare against."""
    if not previous:
        return None
    return round((current - previous) / previous * 100, 1)


def _period_starts(now: datetime) -> dict[str, datetime]:
    month = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    previous_month = (month - timedelta(days=1)).replace(day=1)
    week = (now - timedelta(days=now.weekday())).replace(hour=0, minute=0, second=0, microsecond=0)
    return {
        "month": month,
        "previous_month": previous_month,
        "week": week,
        "previous_week": week - timedelta(days=7),
    }


# =============================================================================
# Metric Builders
# =============================================================================

def revenue_metrics(
    entries: list[dict[str, Any]],
    leads: list[dict[str, Any]],
    now: datetime,
) -> RevenueMetrics:
    """
    Revenue figures for the current and previous month/week.

    Args:
        entries: accounting_entries rows (amount, lead_id, created_at)
        leads: leads rows (id, status, source, formation, created_at, updated_at)
        now: Reference time, timezone-aware (business timezone)

    Returns:
        RevenueMetrics
    """
    starts = _period_starts(now)

    entries_df = _frame(entries, ENTRY_COLUMNS)
    entries_df["amount"] = pd.to_numeric(entries_df["amount"], errors="coerce").fillna(0.0)
    leads_df = _frame(leads, LEAD_COLUMNS)

    created = entries_df["created_at"]
    this_month = entries_df[_window(created, starts["month"])]
    previous_month = entries_df[_window(created, starts["previous_month"], starts["month"])]
    this_week = entries_df[_window(created, starts["week"])]
    previous_week = entries_df[_window(created, starts["previous_week"], starts["week"])]

    revenue_month = round(float(this_month["amount"].sum()), 2)
    revenue_previous_month = round(float(previous_month["amount"].sum()), 2)
    revenue_week = round(float(this_week["amount"].sum()), 2)
    revenue_previous_week = round(float(previous_week["amount"].sum()), 2)

    closed = leads_df[leads_df["status"] == LeadStatus.CLOSED.value]
    closed_month = int(_window(closed["updated_at"], starts["month"]).sum())
    closed_previous = closed[_window(closed["updated_at"], starts["previous_month"], starts["month"])]

    new_leads_month = int(_window(leads_df["created_at"], starts["month"]).sum())
    new_leads_previous = int(
        _window(leads_df["created_at"], starts["previous_month"], starts["month"]).sum()
    )

    by_formation = (
        this_month.merge(leads_df[["id", "formation"]], left_on="lead_id", right_on="id", how="left")
        .assign(formation=lambda df: df["formation"].fillna("other"))
        .groupby("formation")["amount"]
        .sum()
        .sort_values(ascending=False)
    )
    by_source = closed_previous["source"].fillna("direct").value_counts()

    return RevenueMetrics(
        generated_at=now,
        revenue_month=revenue_month,
        revenue_previous_month=revenue_previous_month,
        revenue_month_growth=_growth(revenue_month, revenue_previous_month),
        revenue_week=revenue_week,
        revenue_previous_week=revenue_previous_week,
        revenue_week_growth=_growth(revenue_week, revenue_previous_week),
        closed_month=closed_month,
        closed_previous_month=len(closed_previous),
        closed_month_growth=_growth(closed_month, len(closed_previous)),
        new_leads_month=new_leads_month,
        new_leads_previous_month=new_leads_previous,
        revenue_by_formation={str(k): round(float(v), 2) for k, v in by_formation.items()},
        closed_by_source={str(k): int(v) for k, v in by_source.items()},
    )


def pipeline_metrics(
    leads: list[dict[str, Any]],
    now: datetime,
    closer_names: dict[str, str] | None = None,
) -> PipelineMetrics:
    """
    Snapshot of the sales pipeline.

    Args:
        leads: leads rows
        now: Reference time, timezone-aware
        closer_names: closer_id -> display name (ids are shown otherwise)
    """
    closer_names = closer_names or {}
    leads_df = _frame(leads, LEAD_COLUMNS)
    total = len(leads_df)

    finished = {LeadStatus.CLOSED.value, LeadStatus.LOST.value}
    open_leads = leads_df[~leads_df["status"].isin(finished)]
    last_touch = open_leads["last_action_at"].fillna(open_leads["created_at"])
    stale = int((last_touch < pd.Timestamp(now - STALE_AFTER)).sum())

    paying = leads_df["status"].isin([status.value for status in PAYING_STATUSES])
    conversion = round(float(paying.sum()) / total * 100, 1) if total else None

    closers = leads_df["closer_id"].map(
        lambda closer_id: closer_names.get(closer_id, closer_id) if pd.notna(closer_id) else "unassigned"
    )

    return PipelineMetrics(
        generated_at=now,
        total_leads=total,
        by_status={str(k): int(v) for k, v in leads_df["status"].value_counts().items()},
        by_source={str(k): int(v) for k, v in leads_df["source"].fillna("direct").value_counts().items()},
        by_closer={str(k): int(v) for k, v in closers.value_counts().items()},
        stale_leads=stale,
        conversion_rate=conversion,
    )


# =============================================================================
# Service
# =============================================================================

class ReportService:
    """
    Builds and caches dashboard reports.

    Args:
        cache: Where generated reports are kept (see report_cache)
        writer: Turns metrics text into a report (see agents.reporter)
    """

    def __init__(self, cache: ReportCache, writer: ReportTextWriter):
        self.cache = cache
        self.writer = writer

    @staticmethod
    def _now() -> datetime:
        return datetime.now(ZoneInfo(settings.TIMEZONE))

    @staticmethod
    def _load(table: str, columns: list[str]) -> list[dict[str, Any]]:
        client = SupabaseClient.get_client()
        try:
            response = client.table(table).select(", ".join(columns)).execute()
            return response.data or []
        except Exception as e:
            logger.error(f"Failed to load {table} for reports: {e}")
            raise

    def build_metrics(
        self,
        report_type: ReportType | str,
        now: datetime | None = None,
    ) -> RevenueMetrics | PipelineMetrics:
        """Load rows and aggregate the metrics of a report."""
        report_type = ReportType(report_type)
        now = now or self._now()
        leads = self._load("leads", LEAD_COLUMNS)

        if report_type == ReportType.REVENUE:
            entries = self._load("accounting_entries", ENTRY_COLUMNS)
            return revenue_metrics(entries, leads, now)

        users = (
            SupabaseClient.get_client()
            .table("users")
            .select("id, full_name")
            .execute()
            .data
            or []
        )
        names = {user["id"]: user.get("full_name") or user["id"] for user in users}
        return pipeline_metrics(leads, now, names)

    def get_report(
        self,
        report_type: ReportType | str,
        refresh: bool = False,
    ) -> ReportResponse:
        """
        Cached report, or a freshly written one.

        Args:
            report_type: "revenue" or "pipeline"
            refresh: Ignore the cache and write a new report

        Raises:
            AIUnavailableError / AIRateLimitedError / ReportGenerationError:
                From the writer, when a new report is needed
        """
        report_type = ReportType(report_type)

        if not refresh:
            cached = self.cache.get(report_type.value)
            if cached:
                logger.debug(f"Serving cached {report_type.value} report")
                return ReportResponse(report_type=report_type, report=cached, cached=True)

        metrics = self.build_metrics(report_type)
        text = self.writer.write(report_type, metrics.to_text())
        self.cache.set(
            report_type.value,
            text,
            meta={"generated_at": metrics.generated_at.isoformat()},
        )
        return ReportResponse(report_type=report_type, report=text, cached=False)
