# =============================================================================
# agents/ - AI Agent Definitions
# =============================================================================
# This package contains the AI writer used by the dashboard:
# - reporter.py: Turns aggregated metrics into a written report and
#   recommends the next step for a lead
#
# Prompts:
# - prompts/report_prompts.py: System prompts per report type
# - prompts/recommendation_prompts.py: Lead recommendation prompt
# =============================================================================

from agents.reporter import ReportWriter

__all__ = [
    "ReportWriter",
]
