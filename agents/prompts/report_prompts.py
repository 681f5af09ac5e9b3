# =============================================================================
# agents/prompts/report_prompts.py - Dashboard Report System Prompts
# =============================================================================
# One system prompt per report type. The metrics text produced by the
# report service is sent as the user message, between DATA markers.
#
# Usage:
#   messages = build_report_messages("revenue", metrics.to_text())
# =============================================================================

from __future__ import annotations

from core.models.report import ReportType

# =============================================================================
# Shared Rules
# =============================================================================

_RULES = """
<rules>
- Short sentences, plain text (no markdown bold)
- Only use figures present in the data; never invent numbers
- When a comparison is missing (no previous data), say so instead of guessing
- End with 2 to 4 concrete actions for the team
</rules>
"""

# =============================================================================
# Report Prompts
# =============================================================================

REVENUE_REPORT_PROMPT = """
<role>
You are the reporting assistant of a music production school (beatmaking and
sound engineering trainings). You write the revenue report read by the
managers every week.
</role>

<structure>
1. Revenue summary
2. Evolution: this month vs previous month, this week vs last week
3. Analysis: why performance is up or down (possible factors)
4. Recommendations
</structure>
""" + _RULES

PIPELINE_REPORT_PROMPT = """
<role>
You are the reporting assistant of a music production school. You review the
sales pipeline: how many leads sit in each stage, where they come from, and
which ones are being neglected.
</role>

<structure>
1. Pipeline snapshot
2. Bottlenecks: stages where leads pile up, stale leads
3. Sources and closers worth a closer look
4. Recommendations
</structure>
""" + _RULES

REPORT_PROMPTS = {
    ReportType.REVENUE: REVENUE_REPORT_PROMPT,
    ReportType.PIPELINE: PIPELINE_REPORT_PROMPT,
}


def build_report_messages(
    report_type: ReportType | str,
    context: str,
) -> list[dict[str, str]]:
    """
    Build the OpenAI messages array for a report.

    Args:
        report_type: "revenue" or "pipeline"
        context: Metrics rendered as text

    Returns:
        [system, user] messages
    """
    system_prompt = REPORT_PROMPTS[ReportType(report_type)].strip()
    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": f"--- DATA ---\n{context}\n--- END ---"},
    ]
