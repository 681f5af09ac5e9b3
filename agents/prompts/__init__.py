# =============================================================================
# agents/prompts/ - System Prompts for AI Agents
# =============================================================================
# This package contains the system prompts sent to the model:
# - report_prompts.py: Revenue and pipeline report prompts
# - recommendation_prompts.py: Next-step advice for one lead
#
# Organized with XML tags for clear structure.
# =============================================================================

from agents.prompts.report_prompts import (
    PIPELINE_REPORT_PROMPT,
    REPORT_PROMPTS,
    REVENUE_REPORT_PROMPT,
    build_report_messages,
)
from agents.prompts.recommendation_prompts import (
    RECOMMENDATION_PROMPT,
    build_recommendation_messages,
)

__all__ = [
    "PIPELINE_REPORT_PROMPT",
    "REPORT_PROMPTS",
    "REVENUE_REPORT_PROMPT",
    "build_report_messages",
    "RECOMMENDATION_PROMPT",
    "build_recommendation_messages",
]
