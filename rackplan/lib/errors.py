"""
Domain errors raised by the services.

Routes never translate these by hand; ``rackplan.main`` registers a single
handler that renders ``{"error": code, "message": ..., "details": ...}``.
"""
from typing import Any, Dict, Optional


class AppError(Exception):
    status_code: int = 500
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"error": self.code, "message": self.message}
        if self.details:
            body["details"] = self.details
        return body


class NotFoundError(AppError):
    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, resource: str, resource_id: Any = None):
        message = f"{resource} not found"
        if resource_id is not None:
            message = f"{resource} '{resource_id}' not found"
        super().__init__(message)
        self.resource = resource
        self.resource_id = resource_id


class OutOfRangeError(AppError):
    """A U placement outside ``[1, total_u]`` or a non-positive height."""

    status_code = 400
    code = "OUT_OF_RANGE"

    def __init__(
        self,
        message: str,
        reason: str,
        total_u: Optional[int] = None,
        end_u: Optional[int] = None,
    ):
        details: Dict[str, Any] = {"reason": reason}
        if total_u is not None:
            details["total_u"] = total_u
        if end_u is not None:
            details["end_u"] = end_u
        super().__init__(message, details)
        self.reason = reason
        self.total_u = total_u
        self.end_u = end_u


class ConflictError(AppError):
    """Slot overlap, duplicate rack name, or stale floor plan version."""

    status_code = 409
    code = "CONFLICT"
