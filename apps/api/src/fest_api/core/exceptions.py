"""
Service Exceptions

Business-rule failures raised by the service layer. Each carries the HTTP
status it maps to; routers turn them into ``{error, code}`` envelopes.
Module-specific errors subclass ``FestServiceError`` next to their service.
"""


class FestServiceError(Exception):
    """Base exception for service errors."""

    def __init__(self, message: str, error_code: str, status_code: int = 400):
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        super().__init__(message)


class ValidationFailedError(FestServiceError):
    """Raised when a request is missing fields or has the wrong shape."""

    def __init__(self, message: str, details: list[dict] | None = None):
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            status_code=400,
        )
        self.details = details


class CollegeNotFoundError(FestServiceError):
    """Raised when the authenticated user's college does not exist."""

    def __init__(self, college_id: int | None = None):
        message = f"College {college_id} not found" if college_id else "College not found"
        super().__init__(
            message=message,
            error_code="COLLEGE_NOT_FOUND",
            status_code=404,
        )


class CollegeLockedError(FestServiceError):
    """Raised when a mutation is attempted after final approval."""

    def __init__(self, action: str = "modify registrations"):
        super().__init__(
            message=f"Final approval is locked. Cannot {action}.",
            error_code="FINAL_APPROVAL_LOCKED",
            status_code=403,
        )
