"""Custom exceptions shared by repositories, answer generators and routes."""


class AssistantError(Exception):
    """Base class for knowledge assistant errors."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code


class StoreError(AssistantError):
    """Raised when the knowledge or interaction store fails."""

    def __init__(self, message: str = "Store operation failed"):
        super().__init__(message, status_code=503)


class NotFoundError(AssistantError):
    """Raised when a requested record is missing."""

    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, status_code=404)


class GenerationError(AssistantError):
    """Raised when the answer service is unavailable or replies with nothing usable."""

    def __init__(self, message: str = "Answer generation unavailable"):
        super().__init__(message, status_code=502)


class InvalidQueryError(AssistantError):
    """Raised when a customer query cannot be processed."""

    def __init__(self, message: str = "Invalid query"):
        super().__init__(message, status_code=422)
