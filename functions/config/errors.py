"""ObraCost error handling.

Custom exceptions, internal error codes and user-facing error categories
for the estimating functions.
"""

from typing import Optional, Dict, Any


# Error Codes
class ErrorCode:
    """Internal error code constants.

    Codes keep the precise failure reason for logs. Several codes share
    one user-facing category (see ErrorCategory).
    """

    # Validation Errors
    VALIDATION_ERROR = "VALIDATION_ERROR"
    MISSING_FIELD = "MISSING_FIELD"
    INVALID_FIELD = "INVALID_FIELD"

    # Generation Errors
    INVALID_REQUEST = "INVALID_REQUEST"
    ACCESS_DENIED = "ACCESS_DENIED"
    UPSTREAM_RATE_LIMITED = "UPSTREAM_RATE_LIMITED"
    UPSTREAM_OVERLOADED = "UPSTREAM_OVERLOADED"
    UPSTREAM_FAILURE = "UPSTREAM_FAILURE"
    LLM_TIMEOUT = "LLM_TIMEOUT"
    NO_USABLE_CONTENT = "NO_USABLE_CONTENT"
    UNPARSABLE_RESPONSE = "UNPARSABLE_RESPONSE"

    # Invoice / Store Errors
    INVOICE_NOT_FOUND = "INVOICE_NOT_FOUND"
    FIRESTORE_ERROR = "FIRESTORE_ERROR"
    FIRESTORE_WRITE_FAILED = "FIRESTORE_WRITE_FAILED"

    # Anything else
    INTERNAL_ERROR = "INTERNAL_ERROR"


class ErrorCategory:
    """User-facing error categories returned in error responses."""

    NOT_AUTHENTICATED = "not-authenticated"
    RATE_LIMITED = "rate-limited"
    BAD_REQUEST = "bad-request"
    UPSTREAM_UNAVAILABLE = "upstream-unavailable"
    NO_USABLE_CONTENT = "no-usable-content"
    UNPARSABLE_RESPONSE = "unparsable-response"
    TIMEOUT = "timeout"
    INTERNAL = "internal"


RETRY_MESSAGE = "The estimate could not be generated. Please try again."

USER_MESSAGES: Dict[str, str] = {
    ErrorCategory.NOT_AUTHENTICATED: "You are not signed in.",
    ErrorCategory.RATE_LIMITED: "You have reached the hourly generation limit.",
    ErrorCategory.BAD_REQUEST: "The request is missing required information.",
    ErrorCategory.UPSTREAM_UNAVAILABLE: RETRY_MESSAGE,
    ErrorCategory.NO_USABLE_CONTENT: RETRY_MESSAGE,
    ErrorCategory.UNPARSABLE_RESPONSE: RETRY_MESSAGE,
    ErrorCategory.TIMEOUT: "The estimate took too long to generate. Please try again.",
    ErrorCategory.INTERNAL: "Internal server error.",
}

HTTP_STATUS: Dict[str, int] = {
    ErrorCategory.NOT_AUTHENTICATED: 401,
    ErrorCategory.RATE_LIMITED: 429,
    ErrorCategory.BAD_REQUEST: 400,
    ErrorCategory.UPSTREAM_UNAVAILABLE: 502,
    ErrorCategory.NO_USABLE_CONTENT: 502,
    ErrorCategory.UNPARSABLE_RESPONSE: 502,
    ErrorCategory.TIMEOUT: 504,
    ErrorCategory.INTERNAL: 500,
}

# Internal generation codes -> user-facing category
_CODE_CATEGORIES: Dict[str, str] = {
    ErrorCode.VALIDATION_ERROR: ErrorCategory.BAD_REQUEST,
    ErrorCode.MISSING_FIELD: ErrorCategory.BAD_REQUEST,
    ErrorCode.INVALID_FIELD: ErrorCategory.BAD_REQUEST,
    ErrorCode.INVALID_REQUEST: ErrorCategory.UPSTREAM_UNAVAILABLE,
    ErrorCode.ACCESS_DENIED: ErrorCategory.UPSTREAM_UNAVAILABLE,
    ErrorCode.UPSTREAM_RATE_LIMITED: ErrorCategory.UPSTREAM_UNAVAILABLE,
    ErrorCode.UPSTREAM_OVERLOADED: ErrorCategory.UPSTREAM_UNAVAILABLE,
    ErrorCode.UPSTREAM_FAILURE: ErrorCategory.UPSTREAM_UNAVAILABLE,
    ErrorCode.LLM_TIMEOUT: ErrorCategory.TIMEOUT,
    ErrorCode.NO_USABLE_CONTENT: ErrorCategory.NO_USABLE_CONTENT,
    ErrorCode.UNPARSABLE_RESPONSE: ErrorCategory.UNPARSABLE_RESPONSE,
    ErrorCode.INVOICE_NOT_FOUND: ErrorCategory.BAD_REQUEST,
}


def category_for_code(code: str) -> str:
    """Map an internal error code to its user-facing category."""
    return _CODE_CATEGORIES.get(code, ErrorCategory.INTERNAL)


class ObraCostError(Exception):
    """Base exception for ObraCost errors.

    Provides structured error information for API responses.

    Attributes:
        code: Error code from ErrorCode constants
        message: Human-readable error message (for logs)
        details: Additional error context
    """

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        """Initialize ObraCostError.

        Args:
            code: Error code from ErrorCode constants
            message: Human-readable error message
            details: Additional error context
        """
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}

    @property
    def category(self) -> str:
        """User-facing error category."""
        return category_for_code(self.code)

    @property
    def user_message(self) -> str:
        """Message safe to show to the end user."""
        return USER_MESSAGES[self.category]

    @property
    def http_status(self) -> int:
        """HTTP status for this error."""
        return HTTP_STATUS[self.category]

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for API response.

        Returns:
            Dictionary with category, user message, code, and details.
        """
        return {
            "errorCategory": self.category,
            "userMessage": self.user_message,
            "code": self.code,
            "details": self.details
        }

    def __repr__(self) -> str:
        return f"ObraCostError(code={self.code!r}, message={self.message!r})"


class ValidationError(ObraCostError):
    """Input validation error. Raised before any external call."""

    def __init__(self, message: str, field: Optional[str] = None, details: Optional[Dict] = None):
        super().__init__(
            code=ErrorCode.VALIDATION_ERROR,
            message=message,
            details={**(details or {}), "field": field} if field else details
        )
        self.field = field

    @property
    def user_message(self) -> str:
        return self.message


class GenerationError(ObraCostError):
    """Generation call or extraction failure.

    Never retried automatically; the user re-invokes generation.
    """

    def __init__(
        self,
        code: str,
        message: str,
        status_code: Optional[int] = None,
        details: Optional[Dict] = None
    ):
        super().__init__(
            code=code,
            message=message,
            details={**(details or {}), "status_code": status_code} if status_code else details
        )
        self.status_code = status_code


class InvoiceNotFoundError(ObraCostError):
    """Invoice lookup failed."""

    def __init__(self, invoice_id: str):
        super().__init__(
            code=ErrorCode.INVOICE_NOT_FOUND,
            message=f"Invoice not found: {invoice_id}",
            details={"invoice_id": invoice_id}
        )
        self.invoice_id = invoice_id

    @property
    def http_status(self) -> int:
        return 404

    @property
    def user_message(self) -> str:
        return "Invoice not found."


class StoreError(ObraCostError):
    """Persistent store operation failed."""

    def __init__(
        self,
        message: str,
        code: str = ErrorCode.FIRESTORE_ERROR,
        details: Optional[Dict] = None
    ):
        super().__init__(code=code, message=message, details=details)
