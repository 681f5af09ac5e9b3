# =============================================================================
# agents/reporter.py - Dashboard Report Writer
# =============================================================================
# Turns aggregated metrics into a written report with one OpenAI chat
# completion, and suggests the next step for a lead from its comments.
# Metrics and lead context are built by core.services; this module only
# talks to the model.
#
# Errors:
# - No API key configured   -> AIUnavailableError (503)
# - Provider quota/rate cap -> AIRateLimitedError (429)
# - Anything else           -> ReportGenerationError (502)
#
# Usage:
#   from agents.reporter import ReportWriter
#   text = ReportWriter().write("revenue", metrics.to_text())
# =============================================================================

from __future__ import annotations

import json
import logging
import re

import openai
from openai import OpenAI

from app.config import settings
from app.exceptions import AIRateLimitedError, AIUnavailableError, ReportGenerationError
from agents.prompts.recommendation_prompts import build_recommendation_messages
from agents.prompts.report_prompts import build_report_messages
from core.models.recommendation import ActionType, LeadRecommendation, SuggestedAction
from core.models.report import ReportType

# Set up logging for this module
logger = logging.getLogger(__name__)


class ReportWriter:
    """
    Writes dashboard reports with OpenAI.

    The client is created on first use, so a writer can be built without an
    API key; the error is raised only when a report is actually requested.

    Attributes:
        model: OpenAI model ID
        temperature: Generation temperature
    """

    def __init__(
        self,
        model: str | None = None,
        temperature: float | None = None,
        api_key: str | None = None,
    ):
        self.model = model or settings.OPENAI_MODEL
        self.temperature = temperature if temperature is not None else settings.REPORT_TEMPERATURE
        self._api_key = api_key if api_key is not None else settings.OPENAI_API_KEY
        self._client: OpenAI | None = None

    @property
    def available(self) -> bool:
        return bool(self._api_key)

    @property
    def client(self) -> OpenAI:
        if not self.available:
            raise AIUnavailableError()
        if self._client is None:
            self._client = OpenAI(api_key=self._api_key)
            logger.info(f"ReportWriter initialized with model={self.model}, temp={self.temperature}")
        return self._client

    def write(self, report_type: ReportType | str, context: str) -> str:
        """
        Generate the report text.

        Args:
            report_type: "revenue" or "pipeline"
            context: Metrics rendered as text

        Returns:
            Report text

        Raises:
            AIUnavailableError: No API key configured
            AIRateLimitedError: Provider rate limit or quota reached
            ReportGenerationError: Any other provider failure
        """
        report_type = ReportType(report_type)
        messages = build_report_messages(report_type, context)

        text = self._complete(messages, f"{report_type.value} report")

        logger.info(f"Generated {report_type.value} report ({len(text)} chars)")
        return text

    def recommend(self, context: str) -> LeadRecommendation:
        """
        Recommend the next step for one lead.

        Args:
            context: Lead summary and recent comments rendered as text

        Returns:
            LeadRecommendation; when the model does not answer with usable
            JSON its raw text becomes the recommendation, without actions

        Raises:
            Same errors as write()
        """
        messages = build_recommendation_messages(context)
        text = self._complete(messages, "lead recommendation", json_output=True)
        return parse_recommendation(text)

    def _complete(
        self,
        messages: list[dict[str, str]],
        label: str,
        json_output: bool = False,
    ) -> str:
        """One chat completion, provider errors mapped to CRM errors."""
        client = self.client
        extra = {"response_format": {"type": "json_object"}} if json_output else {}

        try:
            response = client.chat.completions.create(
                model=self.model,
                temperature=self.temperature,
                messages=messages,
                **extra,
            )
        except openai.RateLimitError as e:
            logger.warning(f"OpenAI rate limit while writing {label}: {e}")
            raise AIRateLimitedError()
        except Exception as e:
            logger.error(f"OpenAI API call failed for {label}: {e}")
            raise ReportGenerationError(str(e))

        text = (response.choices[0].message.content or "").strip()
        if not text:
            raise ReportGenerationError("Empty response from the model")
        return text


# =============================================================================
# Parsing
# =============================================================================

_JSON_OBJECT = re.compile(r"\{.*\}", re.DOTALL)


def parse_recommendation(text: str) -> LeadRecommendation:
    """
    Read the model's JSON answer.

    Actions with an unknown type are dropped; a missing label falls back
    to the action type.

    Example:
        >>> parse_recommendation('{"recommendation": "Call back", "suggested_actions": [{"type": "hot"}]}')
        LeadRecommendation(lead_id=None, recommendation='Call back', suggested_actions=[...])
    """
    raw = text.strip()
    match = _JSON_OBJECT.search(raw)
    if not match:
        return LeadRecommendation(recommendation=raw)

    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        logger.debug(f"Recommendation is not valid JSON ({e}), using raw text")
        return LeadRecommendation(recommendation=raw)

    if not isinstance(data, dict):
        return LeadRecommendation(recommendation=raw)

    recommendation = data.get("recommendation")
    if not isinstance(recommendation, str) or not recommendation.strip():
        recommendation = raw

    valid = {action.value for action in ActionType}
    actions = []
    for item in data.get("suggested_actions") or []:
        if not isinstance(item, dict) or item.get("type") not in valid:
            continue
        label = item.get("label")
        actions.append(SuggestedAction(
            type=item["type"],
            label=label if isinstance(label, str) and label else item["type"],
        ))

    return LeadRecommendation(recommendation=recommendation.strip(), suggested_actions=actions)
