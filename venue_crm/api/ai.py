"""
FastAPI router module for the AI-assisted helpers.

Endpoints (all POST, JSON bodies):
- /ai/lead-score: Lead quality score for an interaction
- /ai/intent-tags: Primary intent, topics and urgency
- /ai/next-action: Next-best-action suggestion
- /ai/follow-up: Email or SMS follow-up draft
- /ai/manager-digest: End-of-day digest for the manager
- /ai/timeline-summary: Synopsis of a lead's interaction history

The helpers in venue_crm.services.ai_assist answer with fallback values
when the text generator is missing or fails, so these endpoints normally
return 200 even without GROQ_API_KEY. Malformed bodies are rejected with
400 by the application's validation handler; unexpected failures return
500 with {"error": "<message>"}.
"""

import logging

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from venue_crm.core.dependencies import SettingsDep, TextGeneratorDep
from venue_crm.models import (
    ErrorResponse,
    FollowUpDraft,
    FollowUpRequest,
    IntentTags,
    IntentTagsRequest,
    LeadQualityScore,
    LeadScoreRequest,
    ManagerDigest,
    ManagerDigestRequest,
    NextActionRequest,
    NextBestAction,
    TimelineSummary,
    TimelineSummaryRequest,
)
from venue_crm.services.ai_assist import (
    build_manager_digest,
    draft_follow_up,
    score_lead,
    suggest_next_action,
    summarize_timeline,
    tag_intent,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ai", tags=["ai"])

ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Invalid request body"},
    500: {"model": ErrorResponse, "description": "Generation failure"},
}


def _error(message: str) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": message})


@router.post("/lead-score", response_model=LeadQualityScore, responses=ERROR_RESPONSES)
async def post_lead_score(request: LeadScoreRequest, generator: TextGeneratorDep):
    """Score the lead behind an interaction from 0 to 100."""
    try:
        return await score_lead(
            generator,
            request.interaction,
            request.eventType or "",
            request.headcount,
            request.eventDescription,
        )
    except Exception as e:
        logger.error(f"Error generating lead score: {str(e)}", exc_info=True)
        return _error("Failed to generate lead score")


@router.post("/intent-tags", response_model=IntentTags, responses=ERROR_RESPONSES)
async def post_intent_tags(request: IntentTagsRequest, generator: TextGeneratorDep):
    try:
        return await tag_intent(
            generator,
            request.interaction,
            request.eventType,
            request.eventDescription,
        )
    except Exception as e:
        logger.error(f"Error generating intent tags: {str(e)}", exc_info=True)
        return _error("Failed to generate intent tags")


@router.post("/next-action", response_model=NextBestAction, responses=ERROR_RESPONSES)
async def post_next_action(request: NextActionRequest, generator: TextGeneratorDep):
    try:
        return await suggest_next_action(
            generator,
            request.interaction,
            request.lead,
            request.eventType,
            request.headcount,
        )
    except Exception as e:
        logger.error(f"Error generating next action: {str(e)}", exc_info=True)
        return _error("Failed to generate next action")


@router.post("/follow-up", response_model=FollowUpDraft, responses=ERROR_RESPONSES)
async def post_follow_up(
    request: FollowUpRequest,
    generator: TextGeneratorDep,
    settings: SettingsDep,
):
    """Draft an email (with subject) or SMS follow-up."""
    try:
        return await draft_follow_up(
            generator,
            request.interaction,
            request.lead,
            request.type,
            request.nextAction,
            venue_name=settings.venue_name,
        )
    except Exception as e:
        logger.error(f"Error generating follow-up draft: {str(e)}", exc_info=True)
        return _error("Failed to generate follow-up draft")


@router.post("/manager-digest", response_model=ManagerDigest, responses=ERROR_RESPONSES)
async def post_manager_digest(request: ManagerDigestRequest, generator: TextGeneratorDep):
    """
    Summarize today's activity.

    Falls back to the rule-based digest when the model is unavailable.
    """
    try:
        return await build_manager_digest(
            generator,
            request.interactions,
            request.leads,
            request.bookings,
        )
    except Exception as e:
        logger.error(f"Error generating manager digest: {str(e)}", exc_info=True)
        return _error("Failed to generate manager digest")


@router.post("/timeline-summary", response_model=TimelineSummary, responses=ERROR_RESPONSES)
async def post_timeline_summary(request: TimelineSummaryRequest, generator: TextGeneratorDep):
    try:
        return await summarize_timeline(generator, request.lead, request.interactions)
    except Exception as e:
        logger.error(f"Error generating timeline summary: {str(e)}", exc_info=True)
        return _error("Failed to generate timeline summary")
