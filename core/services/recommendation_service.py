# =============================================================================
# core/services/recommendation_service.py - Next-Step Advice for a Lead
# =============================================================================
# Gathers what the closers wrote about a lead (last 10 comments, newest
# first) and asks the writer for a recommendation and suggested actions.
# Nothing is cached: the advice follows the latest comment.
# =============================================================================

from __future__ import annotations

import logging
from typing import Any, Protocol
from uuid import UUID

from app.exceptions import AIUnavailableError, LeadNotFoundError
from core.models.recommendation import LeadRecommendation
from lib.supabase_client import SupabaseClient
from lib.utils import normalize_uuid, parse_timestamp

logger = logging.getLogger(__name__)

MAX_COMMENTS = 10

LEAD_COLUMNS = "id, first_name, last_name, formation, status, source, last_action_at"


class LeadRecommender(Protocol):
    available: bool

    def recommend(self, context: str) -> LeadRecommendation:
        ...


def _day(value: Any) -> str:
    parsed = parse_timestamp(value)
    return parsed.date().isoformat() if parsed else "unknown date"


def render_context(lead: dict[str, Any], comments: list[dict[str, Any]]) -> str:
    """Lead summary and comments as the text sent to the model."""
    lines = [
        f"Lead: {lead.get('first_name', '')} {lead.get('last_name', '')}".rstrip(),
        f"Formation: {lead.get('formation') or 'unknown'}",
        f"Current status: {lead.get('status') or 'unknown'}",
        f"Last action: {_day(lead['last_action_at']) if lead.get('last_action_at') else 'never'}",
        f"Source: {lead.get('source') or 'direct'}",
        "",
        "Recent comments:",
    ]
    if not comments:
        lines.append("No comments")
    for comment in comments:
        author = comment.get("author") or "?"
        lines.append(f"[{_day(comment.get('created_at'))}] {author}: {comment.get('comment', '')}")
    return "\n".join(lines)


class RecommendationService:
    """Builds the lead context and asks the writer what to do next."""

    def __init__(self, writer: LeadRecommender):
        self.writer = writer

    @staticmethod
    def load_comments(lead_id: str) -> list[dict[str, Any]]:
        """Latest comments of a lead, each with the author's full name."""
        client = SupabaseClient.get_client()
        comments = (
            client.table("lead_comments")
            .select("comment, created_at, user_id")
            .eq("lead_id", lead_id)
            .order("created_at", desc=True)
            .limit(MAX_COMMENTS)
            .execute()
            .data
            or []
        )

        user_ids = sorted({c["user_id"] for c in comments if c.get("user_id")})
        names: dict[str, str] = {}
        if user_ids:
            users = (
                client.table("users")
                .select("id, full_name")
                .in_("id", user_ids)
                .execute()
                .data
                or []
            )
            names = {user["id"]: user.get("full_name") for user in users}

        return [{**c, "author": names.get(c.get("user_id"))} for c in comments]

    def recommend(self, lead_id: str | UUID) -> LeadRecommendation:
        """
        Recommendation for one lead.

        Raises:
            AIUnavailableError: No AI provider configured
            LeadNotFoundError: If lead doesn't exist
            AIRateLimitedError, ReportGenerationError: From the writer
        """
        if not self.writer.available:
            raise AIUnavailableError()

        lead_id_str = normalize_uuid(lead_id)
        lead = SupabaseClient.fetch_lead(lead_id_str, LEAD_COLUMNS)
        if not lead:
            raise LeadNotFoundError(lead_id_str)

        comments = self.load_comments(lead_id_str)
        result = self.writer.recommend(render_context(lead, comments))

        logger.info(
            f"Recommendation for lead {lead_id_str} from {len(comments)} comment(s): "
            f"{[action.type.value for action in result.suggested_actions]}"
        )
        return result.model_copy(update={"lead_id": UUID(lead_id_str)})
