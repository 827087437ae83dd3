"""
Pydantic models for the Knowledge Assistant

Store rows mirror the Supabase `knowledge_base` and `ai_interactions`
tables (snake_case column names). Everything else is per-request and
never persisted.
"""
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Dict, Any, List
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator, ConfigDict


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================================
# Enums
# ============================================================================

class CustomerType(str, Enum):
    """Customer segment attached to a query (accepted, not used for retrieval)"""
    ALL = "all"
    PREMIUM = "premium"
    BASIC = "basic"


# ============================================================================
# Store Models
# ============================================================================

class KnowledgeEntry(BaseModel):
    """
    Knowledge base row as returned by the store.

    confidence_score is assigned editorially and is never computed here.
    Unapproved entries are still readable; only the fallback search stage
    surfaces them.
    """
    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="Unique identifier")
    title: str = Field("", description="Short title")
    content: str = Field("", description="Authoritative answer body")
    category: Optional[str] = Field(None, description="Category tag, e.g. Shipping")
    confidence_score: Optional[float] = Field(None, description="Editorial confidence in [0, 1]")
    tags: List[str] = Field(default_factory=list, description="Keywords for tag matching")
    is_approved: bool = Field(False, description="Editorial approval flag")
    updated_at: Optional[datetime] = Field(None, description="Last modification time")

    @field_validator('id', mode='before')
    @classmethod
    def coerce_id(cls, v: Any) -> str:
        """Stores may hand back integer or UUID keys"""
        return str(v)

    @field_validator('title', 'content', mode='before')
    @classmethod
    def none_to_empty(cls, v: Any) -> str:
        return v or ""

    @field_validator('tags', mode='before')
    @classmethod
    def none_to_list(cls, v: Any) -> List[str]:
        return list(v) if v else []

    @field_validator('is_approved', mode='before')
    @classmethod
    def none_to_false(cls, v: Any) -> bool:
        return bool(v)


class InteractionLog(BaseModel):
    """
    Row of the `ai_interactions` table.

    Created once per answered question; customer_satisfaction and feedback
    are attached later by a single point update.
    """
    id: str = Field(default_factory=lambda: str(uuid4()))
    customer_question: str
    matched_entries: List[str] = Field(default_factory=list)
    ai_response: str
    confidence_score: float
    session_id: Optional[str] = None
    response_time_ms: int = 0
    sources_count: int = 0
    customer_satisfaction: Optional[float] = None
    feedback: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)


class InteractionStatsRow(BaseModel):
    """
    The columns of an `ai_interactions` row that stats aggregate.

    Rows written by older clients may lack values; missing numbers read as 0.
    """
    confidence_score: float = 0.0
    response_time_ms: int = 0
    customer_satisfaction: Optional[float] = None
    created_at: Optional[datetime] = None

    @field_validator('confidence_score', 'response_time_ms', mode='before')
    @classmethod
    def none_to_zero(cls, v: Any) -> Any:
        return 0 if v is None else v


class InteractionStats(BaseModel):
    """Aggregates over interaction logs in a trailing window"""
    total_interactions: int
    average_confidence: float
    average_response_time: float
    average_satisfaction: float
    days: int


# ============================================================================
# Query / Response Models
# ============================================================================

class CustomerQuery(BaseModel):
    """
    A single customer question.

    session_id is only used for log correlation; customer_type and context
    are accepted for forward compatibility and do not change retrieval.
    """
    question: str
    session_id: Optional[str] = None
    customer_type: Optional[CustomerType] = None
    context: Optional[str] = None


class KnowledgeSource(BaseModel):
    """Projection of a KnowledgeEntry scored against one question"""
    id: str
    title: str
    excerpt: str
    category: str
    confidence: float = Field(..., description="Stored editorial confidence")
    relevance_score: float = Field(..., ge=0, le=1, description="Per-query word containment")


class AIResponse(BaseModel):
    """Structured answer returned to chat/UI callers"""
    answer: str
    sources: List[KnowledgeSource] = Field(default_factory=list)
    confidence: float = Field(..., ge=0, le=1)
    response_time: int = Field(0, description="Elapsed milliseconds")
    needs_human_review: bool
    suggestions: List[str] = Field(default_factory=list)
    follow_up_questions: List[str] = Field(default_factory=list)
    interaction_id: Optional[str] = Field(
        None, description="Interaction log id to attach feedback to"
    )


class KnowledgeQuery(BaseModel):
    """
    Search primitive understood by every KnowledgeRepository.

    An entry matches when its title or content contains any term
    (case-insensitive), or, with match_tags, when its tags contain a term.
    No terms means no text filter. Results are ordered by stored
    confidence, highest first.
    """
    terms: List[str] = Field(default_factory=list)
    match_tags: bool = False
    approved_only: bool = False
    limit: int = Field(5, ge=1)


# ============================================================================
# Answer Service Contract
# ============================================================================

class GenerationSource(BaseModel):
    """Source passed to the answer service"""
    title: str
    content: str
    category: str


class GenerationRequest(BaseModel):
    """Payload for the answer-generation service"""
    question: str
    context: str
    sources: List[GenerationSource] = Field(default_factory=list)
    prompt: Optional[str] = Field(None, description="Full prompt for in-process generators")


class GenerationResult(BaseModel):
    """Reply from the answer-generation service"""
    success: bool = False
    response: Optional[str] = None
    tokens_used: Optional[int] = None
    fallback_response: Optional[str] = None
    error: Optional[str] = None


# ============================================================================
# Knowledge Search (direct lookup for chatbots and integrations)
# ============================================================================

class KnowledgeSearchRequest(BaseModel):
    """Filtered knowledge lookup"""
    query: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[List[str]] = None
    limit: Optional[int] = Field(None, description="0 or missing means the default of 10")
    api_key: Optional[str] = None


class KnowledgeSearchHit(BaseModel):
    """Single knowledge lookup result"""
    id: str
    title: str
    content: str
    category: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    updated_at: Optional[datetime] = None
    relevance_score: float


class KnowledgeSearchResponse(BaseModel):
    """Knowledge lookup response"""
    success: bool = True
    count: int
    query_params: Dict[str, Any] = Field(default_factory=dict)
    data: List[KnowledgeSearchHit] = Field(default_factory=list)
