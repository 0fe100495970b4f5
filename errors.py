"""
Error types raised by the API.

Every error carries the HTTP status it maps to; ``main.py`` renders them as
``{"error": message}`` so clients can surface the message verbatim.
"""

from typing import Any, Dict, Optional

from fastapi import status


class PlantCareError(Exception):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.message}


class ValidationError(PlantCareError):
    """A required field is missing or empty."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class Conflict(PlantCareError):
    """The resource already exists (duplicate email, duplicate subscription)."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Already exists"


class Unauthenticated(PlantCareError):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized, please login first"


class Forbidden(PlantCareError):
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "You are not allowed to do that"


class NotFound(PlantCareError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class InternalError(PlantCareError):
    pass
