"""
Logging Middleware - Request/Response logging
"""
import time
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from typing import Callable
from kb_assistant.utils.logger import get_logger

logger = get_logger(__name__)


class LoggingMiddleware(BaseHTTPMiddleware):
    """
    Log every request with status code and duration

    Health checks are skipped (too noisy). Adds X-Process-Time (ms).
    """

    async def dispatch(self, request: Request, call_next: Callable):
        if request.url.path.startswith("/api/health"):
            return await call_next(request)

        start_time = time.time()
        method = request.method
        path = request.url.path
        client_host = request.client.host if request.client else "unknown"

        logger.info(f"→ {method} {path} from {client_host}")

        try:
            response = await call_next(request)
        except Exception as e:
            duration_ms = int((time.time() - start_time) * 1000)
            logger.error(f"✗ {method} {path} ERROR ({duration_ms}ms): {e}", exc_info=True)
            raise

        duration_ms = int((time.time() - start_time) * 1000)
        logger.info(f"← {method} {path} {response.status_code} ({duration_ms}ms)")

        response.headers["X-Process-Time"] = str(duration_ms)
        return response
