from typing import Optional


class AppError(Exception):
    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(self.message)


class ValidationError(AppError):
    def __init__(self, message: str = "All fields required"):
        super().__init__(message=message, status_code=400)


class ConflictError(AppError):
    """Raised when a unique value is already taken. Reported as a 400."""
    def __init__(self, message: str = "Email already exists"):
        super().__init__(message=message, status_code=400)


class AuthError(AppError):
    def __init__(self, message: str = "Invalid token"):
        super().__init__(message=message, status_code=401)


class NotFoundError(AppError):
    def __init__(self, message: str = "Not found"):
        super().__init__(message=message, status_code=404)


class UpstreamError(AppError):
    """
    A blob store or analysis service call failed.
    Clients only ever see the generic message; `detail` is for the logs.
    """
    def __init__(self, detail: str, cause: Optional[Exception] = None):
        super().__init__(message="Server error", status_code=500)
        self.detail = detail
        self.cause = cause

    def __str__(self) -> str:
        return self.detail
