"""
Middleware package
"""
from kb_assistant.middleware.logging_middleware import LoggingMiddleware

__all__ = ["LoggingMiddleware"]
