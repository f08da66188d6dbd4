"""
Typed failures raised by the services.

Each error carries the HTTP status it maps to at the boundary. Storage
failures are not wrapped: SQLAlchemy exceptions propagate as-is and are
rendered as 500 by the application.
"""
from fastapi import status


class TaskgateError(Exception):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error = "Internal Server Error"
    default_message = "An unexpected error occurred"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(TaskgateError):
    status_code = status.HTTP_401_UNAUTHORIZED
    error = "Unauthorized"
    default_message = "Authentication required"


class Forbidden(TaskgateError):
    status_code = status.HTTP_403_FORBIDDEN
    error = "Forbidden"
    default_message = "Forbidden"


class NotFound(TaskgateError):
    status_code = status.HTTP_404_NOT_FOUND
    error = "Not Found"
    default_message = "Not found"


class BadRequest(TaskgateError):
    status_code = status.HTTP_400_BAD_REQUEST
    error = "Bad Request"
    default_message = "Bad request"


class Conflict(TaskgateError):
    status_code = status.HTTP_409_CONFLICT
    error = "Conflict"
    default_message = "Conflict"
