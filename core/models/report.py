# =============================================================================
# core/models/report.py - Report Schemas
# =============================================================================
# Metrics handed to the report writer and the report payload returned to
# the dashboard.
# =============================================================================

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


class ReportType(str, Enum):
    """
    Dashboard reports.

    - revenue: money in, month over month and week over week
    - pipeline: how leads move through the sales stages
    """
    REVENUE = "revenue"
    PIPELINE = "pipeline"


class RevenueMetrics(BaseModel):
    """Revenue figures for the current and previous periods."""

    generated_at: datetime
    revenue_month: float = 0.0
    revenue_previous_month: float = 0.0
    revenue_month_growth: float | None = Field(
        default=None,
        description="Percent change vs previous month (None when it had no revenue)"
    )
    revenue_week: float = 0.0
    revenue_previous_week: float = 0.0
    revenue_week_growth: float | None = None
    closed_month: int = 0
    closed_previous_month: int = 0
    closed_month_growth: float | None = None
    new_leads_month: int = 0
    new_leads_previous_month: int = 0
    revenue_by_formation: dict[str, float] = Field(default_factory=dict)
    closed_by_source: dict[str, int] = Field(default_factory=dict)

    def to_text(self) -> str:
        """Plain-text summary fed to the language model."""
        lines = [
            f"=== REVENUE REPORT - {self.generated_at:%A %d %B %Y} ===",
            "",
            "## KEY FIGURES",
            f"- Revenue this month: {self.revenue_month:.2f} EUR",
            f"- Revenue previous month: {self.revenue_previous_month:.2f} EUR",
        ]
        if self.revenue_month_growth is not None:
            lines.append(f"- Month over month: {self.revenue_month_growth:+.1f}%")
        lines += [
            f"- Revenue this week: {self.revenue_week:.2f} EUR",
            f"- Revenue last week: {self.revenue_previous_week:.2f} EUR",
        ]
        if self.revenue_week_growth is not None:
            lines.append(f"- Week over week: {self.revenue_week_growth:+.1f}%")
        lines += [
            "",
            "## LEADS AND SALES",
            f"- Leads closed this month: {self.closed_month}",
            f"- Leads closed previous month: {self.closed_previous_month}",
        ]
        if self.closed_month_growth is not None:
            lines.append(f"- Closed leads change: {self.closed_month_growth:+.1f}%")
        lines += [
            f"- New leads this month: {self.new_leads_month}",
            f"- New leads previous month: {self.new_leads_previous_month}",
            "",
            "## REVENUE BY FORMATION (this month)",
        ]
        lines += [f"- {name}: {value:.2f} EUR" for name, value in self.revenue_by_formation.items()]
        lines += ["", "## CLOSED SALES BY SOURCE (previous month)"]
        lines += [f"- {name}: {count}" for name, count in self.closed_by_source.items()]
        return "\n".join(lines)


class PipelineMetrics(BaseModel):
    """Snapshot of the sales pipeline."""

    generated_at: datetime
    total_leads: int = 0
    by_status: dict[str, int] = Field(default_factory=dict)
    by_source: dict[str, int] = Field(default_factory=dict)
    by_closer: dict[str, int] = Field(default_factory=dict)
    stale_leads: int = Field(
        default=0,
        description="Open leads with no action for 7 days or more"
    )
    conversion_rate: float | None = Field(
        default=None,
        description="Share of leads that reached deposit_paid or closed, in percent"
    )

    def to_text(self) -> str:
        lines = [
            f"=== PIPELINE REPORT - {self.generated_at:%A %d %B %Y} ===",
            "",
            f"- Total leads: {self.total_leads}",
            f"- Open leads without action for 7+ days: {self.stale_leads}",
        ]
        if self.conversion_rate is not None:
            lines.append(f"- Conversion rate: {self.conversion_rate:.1f}%")
        lines += ["", "## BY STATUS"]
        lines += [f"- {name}: {count}" for name, count in self.by_status.items()]
        lines += ["", "## BY SOURCE"]
        lines += [f"- {name}: {count}" for name, count in self.by_source.items()]
        lines += ["", "## BY CLOSER"]
        lines += [f"- {name}: {count}" for name, count in self.by_closer.items()]
        return "\n".join(lines)


class ReportResponse(BaseModel):
    report_type: ReportType
    report: str
    cached: bool = False
