"""
PrintQuote exception hierarchy

Raised at the API boundary and turned into JSON responses by the handler
registered in printquote.main. The pricing engine itself never raises these
for expected validation conditions; it returns a PricingError which the
endpoints wrap in PricingValidationError.
"""
from typing import Any, Dict, Optional

from printquote.schemas.pricing import PricingError


class PrintQuoteException(Exception):
    """Base class for all PrintQuote API errors"""

    status_code: int = 400
    error_code: str = "PRINTQUOTE_ERROR"

    def __init__(
        self,
        message: str,
        *,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        if error_code is not None:
            self.error_code = error_code
        if status_code is not None:
            self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(PrintQuoteException):
    """Raised when a requested resource does not exist"""

    status_code = 404
    error_code = "NOT_FOUND"

    def __init__(self, resource: str, resource_id: Any):
        super().__init__(
            f"{resource} not found: {resource_id}",
            details={"resource": resource, "id": resource_id},
        )


class PricingValidationError(PrintQuoteException):
    """Raised when the pricing engine refuses to produce a price"""

    status_code = 422

    def __init__(self, error: PricingError):
        super().__init__(
            error.message,
            error_code=error.code.value,
            details={
                "blocking_items": [item.model_dump() for item in error.blocking_items],
            },
        )
        self.pricing_error = error
