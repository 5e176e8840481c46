"""Error taxonomy shared by services and routers.

Services raise these; the handlers registered in ``app.main.create_app`` turn
them into the ``{"success": false, "errorMessage": ...}`` envelope.
"""

from typing import Optional

from fastapi import status


class ApiError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Something went wrong"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        self.message = message or self.default_message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class ValidationError(ApiError):
    status_code = 422
    default_message = "Invalid request data"


class ConflictError(ApiError):
    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource already exists"


class NotFoundError(ApiError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class UnauthorizedError(ApiError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized request"


class PermissionDeniedError(UnauthorizedError):
    """The caller is authenticated but does not own the target."""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You are not allowed to modify this resource"


class StorageError(ApiError):
    default_message = "File could not be uploaded"
