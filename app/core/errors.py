"""Error types surfaced by the order and reporting handlers."""
from typing import Any, Dict, Optional


class OrderingError(Exception):
    """Base error carrying the HTTP status it maps to."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_body(self) -> Dict[str, Any]:
        """JSON body returned to the caller."""
        return {"message": self.message}


class ValidationError(OrderingError):
    """Missing or malformed request field."""

    status_code = 400


class NotFoundError(OrderingError):
    """Referenced entity or result set does not exist."""

    status_code = 404


class InternalError(OrderingError):
    """Any other failure, including collaborator failures."""

    status_code = 500

    def __init__(self, message: str, error: Optional[str] = None):
        super().__init__(message)
        self.error = error

    def to_body(self) -> Dict[str, Any]:
        body = super().to_body()
        if self.error is not None:
            body["error"] = self.error
        return body
