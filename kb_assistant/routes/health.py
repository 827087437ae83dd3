"""
Health check endpoints

- GET /api/health - Basic health check
- GET /api/health/dependencies - Knowledge store and answer service status
"""
import time
from datetime import datetime, timezone
from typing import Dict, Optional
from fastapi import APIRouter, status
from pydantic import BaseModel, Field
from supabase import create_client
import httpx
import asyncio

from kb_assistant import __version__
from kb_assistant.config import get_settings
from kb_assistant.utils.logger import get_logger

settings = get_settings()
logger = get_logger(__name__)

router = APIRouter(prefix="/api/health", tags=["health"])

# Application start time for uptime calculation
APP_START_TIME = time.time()

# Cache for dependency check results (30 seconds TTL)
_dependency_cache: Optional["DependencyHealth"] = None
_cache_timestamp: float = 0.0
CACHE_TTL_SECONDS = 30.0
CHECK_TIMEOUT_SECONDS = 5.0


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================================================
# Pydantic Models
# ============================================================================

class HealthResponse(BaseModel):
    """Basic health check response"""
    status: str = Field(..., description="Overall status: healthy, degraded, unhealthy")
    timestamp: datetime = Field(default_factory=_utcnow, description="Check timestamp")
    version: str = Field(..., description="Application version")
    uptime_seconds: float = Field(..., description="Application uptime in seconds")


class DependencyStatus(BaseModel):
    """Status of a single dependency"""
    name: str = Field(..., description="Dependency name")
    status: str = Field(..., description="Status: healthy, degraded, unhealthy")
    latency_ms: Optional[float] = Field(None, description="Response latency in milliseconds")
    error_message: Optional[str] = Field(None, description="Error message if unhealthy")


class DependencyHealth(BaseModel):
    """Dependency health check response"""
    overall_status: str = Field(..., description="Overall status: healthy, degraded, unhealthy")
    dependencies: Dict[str, DependencyStatus] = Field(..., description="Individual dependency statuses")
    checked_at: datetime = Field(default_factory=_utcnow, description="Check timestamp")


# ============================================================================
# Dependency Check Functions
# ============================================================================

async def check_supabase() -> DependencyStatus:
    """Query one row of the knowledge table"""
    try:
        start = time.time()

        client = create_client(
            settings.supabase_url,
            settings.supabase_api_key
        )

        await asyncio.wait_for(
            asyncio.to_thread(
                lambda: client.table(settings.knowledge_table).select("id").limit(1).execute()
            ),
            timeout=CHECK_TIMEOUT_SECONDS
        )

        latency = (time.time() - start) * 1000

        return DependencyStatus(
            name="supabase",
            status="healthy",
            latency_ms=round(latency, 2)
        )

    except asyncio.TimeoutError:
        logger.error("Supabase health check timed out")
        return DependencyStatus(
            name="supabase",
            status="unhealthy",
            error_message="Request timed out after 5 seconds"
        )
    except Exception as e:
        logger.error(f"Supabase health check failed: {e}")
        return DependencyStatus(
            name="supabase",
            status="unhealthy",
            error_message=str(e)
        )


async def check_answer_service() -> DependencyStatus:
    """
    Probe the configured answer backend

    edge: CORS preflight against the function URL
    gemini: list models with the configured key
    none: reported as degraded (template answers only)
    """
    backend = settings.answer_backend.lower()

    if backend == "none":
        return DependencyStatus(
            name="answer_service",
            status="degraded",
            error_message="Answer generation disabled"
        )

    try:
        start = time.time()

        async with httpx.AsyncClient(timeout=CHECK_TIMEOUT_SECONDS) as client:
            if backend == "gemini":
                if not settings.google_api_key:
                    return DependencyStatus(
                        name="answer_service",
                        status="degraded",
                        error_message="API key not configured"
                    )
                response = await client.get(
                    "https://generativelanguage.googleapis.com/v1/models",
                    params={"key": settings.google_api_key}
                )
            else:
                response = await client.options(
                    f"{settings.functions_url}/{settings.answer_function_name}"
                )
            response.raise_for_status()

        latency = (time.time() - start) * 1000

        return DependencyStatus(
            name="answer_service",
            status="healthy",
            latency_ms=round(latency, 2)
        )

    except httpx.TimeoutException:
        logger.error("Answer service health check timed out")
        return DependencyStatus(
            name="answer_service",
            status="degraded",
            error_message="Request timed out after 5 seconds"
        )
    except httpx.HTTPStatusError as e:
        logger.error(f"Answer service health check failed: {e}")
        return DependencyStatus(
            name="answer_service",
            status="degraded",
            error_message=f"HTTP {e.response.status_code}: {str(e)}"
        )
    except Exception as e:
        logger.error(f"Answer service health check failed: {e}")
        return DependencyStatus(
            name="answer_service",
            status="degraded",
            error_message=str(e)
        )


async def check_all_dependencies() -> Dict[str, DependencyStatus]:
    """Check all external dependencies in parallel"""
    results = await asyncio.gather(
        check_supabase(),
        check_answer_service(),
        return_exceptions=True
    )

    dependencies = {}
    dep_names = ["supabase", "answer_service"]

    for name, result in zip(dep_names, results):
        if isinstance(result, Exception):
            logger.error(f"Unexpected error checking {name}: {result}")
            dependencies[name] = DependencyStatus(
                name=name,
                status="unhealthy",
                error_message=f"Unexpected error: {str(result)}"
            )
        else:
            dependencies[name] = result

    return dependencies


def determine_overall_status(dependencies: Dict[str, DependencyStatus]) -> str:
    """
    Overall status from dependency health

    Supabase unhealthy means unhealthy. The answer service is non-critical:
    without it questions are still answered from templates, so any problem
    there only degrades.
    """
    supabase = dependencies.get("supabase")
    if supabase and supabase.status == "unhealthy":
        return "unhealthy"

    if any(dep.status in ["degraded", "unhealthy"] for dep in dependencies.values()):
        return "degraded"

    return "healthy"


# ============================================================================
# API Endpoints
# ============================================================================

@router.get(
    "",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    summary="Basic health check"
)
async def basic_health_check() -> HealthResponse:
    """
    Basic health check endpoint

    Always returns 200 OK. Does not check external dependencies.
    """
    uptime = time.time() - APP_START_TIME

    return HealthResponse(
        status="healthy",
        timestamp=_utcnow(),
        version=__version__,
        uptime_seconds=round(uptime, 2)
    )


@router.get(
    "/dependencies",
    response_model=DependencyHealth,
    status_code=status.HTTP_200_OK,
    summary="Dependency health check"
)
async def dependency_health_check() -> DependencyHealth:
    """
    Check Supabase and the answer service

    Results are cached for 30 seconds. Always returns 200 OK.
    """
    global _dependency_cache, _cache_timestamp

    current_time = time.time()
    if _dependency_cache and (current_time - _cache_timestamp) < CACHE_TTL_SECONDS:
        logger.debug("Returning cached dependency health check results")
        return _dependency_cache

    logger.info("Performing dependency health checks")
    dependencies = await check_all_dependencies()

    response = DependencyHealth(
        overall_status=determine_overall_status(dependencies),
        dependencies=dependencies,
        checked_at=_utcnow()
    )

    _dependency_cache = response
    _cache_timestamp = current_time

    unhealthy_deps = [
        name for name, dep in dependencies.items()
        if dep.status == "unhealthy"
    ]
    if unhealthy_deps:
        logger.warning(f"Unhealthy dependencies: {', '.join(unhealthy_deps)}")

    return response
