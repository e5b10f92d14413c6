from typing import Optional, Any


class PlacementError(Exception):
    """
    Base exception for the placement API.
    """
    def __init__(self, message: str, code: str = "INTERNAL_ERROR", status_code: int = 500, details: Optional[Any] = None):
        self.message = message
        self.code = code
        self.status_code = status_code
        self.details = details
        super().__init__(self.message)


class ResourceNotFoundError(PlacementError):
    """
    Raised when a requested resource is not found.
    """
    def __init__(self, message: str = "Resource not found", details: Optional[Any] = None):
        super().__init__(message, code="NOT_FOUND", status_code=404, details=details)


class AuthenticationError(PlacementError):
    """
    Raised when authentication fails.
    """
    def __init__(self, message: str = "Authentication failed", details: Optional[Any] = None):
        super().__init__(message, code="AUTHENTICATION_FAILED", status_code=401, details=details)


class PermissionDeniedError(PlacementError):
    """
    Raised when the caller's role may not use an endpoint.
    """
    def __init__(self, message: str = "Permission denied", details: Optional[Any] = None):
        super().__init__(message, code="PERMISSION_DENIED", status_code=403, details=details)


class ValidationError(PlacementError):
    """
    Raised when input validation fails.
    """
    def __init__(self, message: str = "Validation error", details: Optional[Any] = None):
        super().__init__(message, code="VALIDATION_ERROR", status_code=400, details=details)


class RateLimitExceededError(PlacementError):
    """
    Raised when a client has used up its request allowance.
    """
    def __init__(self, retry_after: int):
        super().__init__(
            "Too many requests, please try again later.",
            code="RATE_LIMITED",
            status_code=429,
            details={"retry_after": retry_after}
        )
        self.headers = {"Retry-After": str(retry_after)}


class StorageError(PlacementError):
    """
    Raised when the document database or blob store fails.
    """
    def __init__(self, message: str = "Storage error", details: Optional[Any] = None):
        super().__init__(message, code="STORAGE_ERROR", status_code=500, details=details)
