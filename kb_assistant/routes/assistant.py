"""
Assistant API Routes

Chat/UI callers ask questions, read interaction statistics and attach
customer feedback to a previous answer.
"""
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field

from kb_assistant.models.schemas import AIResponse, CustomerQuery, InteractionStats
from kb_assistant.routes.dependencies import get_assistant
from kb_assistant.services.assistant import KnowledgeAssistant
from kb_assistant.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/assistant", tags=["assistant"])


class FeedbackRequest(BaseModel):
    """Customer feedback for an answered question"""
    interaction_id: str = Field(..., min_length=1)
    satisfaction: float
    feedback: Optional[str] = None


class FeedbackResponse(BaseModel):
    """Feedback result"""
    success: bool


@router.post("/ask", response_model=AIResponse)
async def ask_question(
    query: CustomerQuery,
    assistant: KnowledgeAssistant = Depends(get_assistant)
):
    """
    Answer a customer question from the knowledge base

    Always returns 200; failures are reported through
    `needs_human_review` and a templated answer.
    """
    return await assistant.answer_customer_question(query)


@router.get("/stats", response_model=InteractionStats)
async def interaction_stats(
    days: int = Query(30, ge=1, le=365),
    assistant: KnowledgeAssistant = Depends(get_assistant)
):
    """Interaction statistics for the trailing `days` window"""
    stats = await assistant.get_interaction_stats(days)
    if stats is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Interaction statistics are unavailable"
        )
    return stats


@router.post("/feedback", response_model=FeedbackResponse)
async def record_feedback(
    request: FeedbackRequest,
    assistant: KnowledgeAssistant = Depends(get_assistant)
):
    """Attach a satisfaction score and comment to an interaction"""
    success = await assistant.record_customer_feedback(
        request.interaction_id,
        request.satisfaction,
        request.feedback,
    )
    return FeedbackResponse(success=success)
