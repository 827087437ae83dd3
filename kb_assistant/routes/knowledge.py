"""
Knowledge search API route

Filtered lookup for chatbot/workflow integrations. When
KNOWLEDGE_BASE_API_KEY is configured the request body must carry the
same `api_key`.
"""
import hmac

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from kb_assistant.config import get_settings
from kb_assistant.models.schemas import KnowledgeSearchRequest, KnowledgeSearchResponse
from kb_assistant.routes.dependencies import get_knowledge_search
from kb_assistant.services.knowledge_search import KnowledgeSearchService
from kb_assistant.utils.errors import AssistantError
from kb_assistant.utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/knowledge", tags=["knowledge"])


@router.post("/search", response_model=KnowledgeSearchResponse)
async def search_knowledge(
    request: KnowledgeSearchRequest,
    service: KnowledgeSearchService = Depends(get_knowledge_search)
):
    """Search knowledge entries by text, category and tags"""
    expected_key = get_settings().knowledge_base_api_key
    if expected_key and not hmac.compare_digest(request.api_key or "", expected_key):
        return JSONResponse(
            status_code=status.HTTP_401_UNAUTHORIZED,
            content={"error": "Invalid API key"}
        )

    try:
        return await service.search(request)
    except AssistantError as e:
        logger.error(f"Knowledge base search error: {e}")
        return JSONResponse(
            status_code=e.status_code,
            content={"success": False, "error": str(e)}
        )
