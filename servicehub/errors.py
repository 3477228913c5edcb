"""
Error taxonomy surfaced by the API.

Every error a handler raises is one of the classes below. Each carries a
stable ``code`` so clients can branch without parsing messages, and the
message never contains raw database text.
"""

from typing import Any, Optional

from fastapi import HTTPException


class ServiceError(HTTPException):
    status_code = 500
    code = "error"

    def __init__(self, message: str, details: Optional[Any] = None):
        super().__init__(status_code=self.status_code, detail=message)
        self.message = message
        self.details = details

    def to_content(self) -> dict:
        content = {"error": self.message, "code": self.code}
        if self.details is not None:
            content["details"] = self.details
        return content


class AuthenticationRequired(ServiceError):
    status_code = 401
    code = "unauthenticated"


class PermissionDenied(ServiceError):
    status_code = 403
    code = "forbidden"


class NotFound(ServiceError):
    status_code = 404
    code = "not_found"


class ValidationFailed(ServiceError):
    status_code = 400
    code = "invalid"


class StateConflict(ServiceError):
    """The resource is in a state that does not allow the change"""

    status_code = 400
    code = "conflict"


class StoreFailure(ServiceError):
    status_code = 500
    code = "store_error"

    def __init__(self, message: str = "The request could not be completed. Please try again."):
        super().__init__(message)


ERRORS_BY_CODE = {
    cls.code: cls
    for cls in (
        AuthenticationRequired,
        PermissionDenied,
        NotFound,
        ValidationFailed,
        StateConflict,
        StoreFailure,
    )
}
